"""Custom exceptions. Every layer raises a subclass of GameError so callers can catch one top-level type."""


class GameError(Exception):
    """Top-level exception for anything going wrong while playing."""


class InvalidRequestError(GameError):
    """Request data that cannot be interpreted."""


class GameStateError(GameError):
    """Operation not allowed in the current phase of the game."""


class RepositoryError(GameError):
    """Record could not be found / stored."""


class CategoryBlockedError(GameError):
    """The category has been blocked by an administrator."""


class ContentFetchError(GameError):
    """Content backend could not deliver usable data."""
