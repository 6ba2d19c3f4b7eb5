"""
Single place holding the global, admin-managed data every game needs: blocked categories and app settings.

Fetched once (retried until a fetch succeeds), shared by all callers, pushed to subscribers whenever it is refreshed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from prepgames.core.exceptions import ContentFetchError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, str] = {
    "whatsapp": "+244923456789",
    "email": "contato@angolasaude.com",
}


class SettingsSource(Protocol):
    """The part of the content client the store depends on."""

    def fetch_blocked_categories(self) -> list[str]: ...

    def fetch_settings(self) -> dict[str, str]: ...


@dataclass(frozen=True)
class GlobalSettings:
    blocked_categories: frozenset[str] = frozenset()
    values: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SETTINGS))

    def is_blocked(self, category_id: Optional[str]) -> bool:
        return category_id is not None and category_id in self.blocked_categories


Subscriber = Callable[[GlobalSettings], None]


class SettingsStore:
    def __init__(self, source: SettingsSource) -> None:
        self._source = source
        self._current: Optional[GlobalSettings] = None
        self._subscribers: list[Subscriber] = []

    def get(self) -> GlobalSettings:
        """
        Cached snapshot; once a load succeeded, callers no longer go to the backend.

        NOTE a load that failed is not cached: the defaults are returned and the next call tries again.
        """
        if self._current is not None:
            return self._current
        snapshot, complete = self._load()
        if complete:
            self._current = snapshot
        return snapshot

    def is_category_blocked(self, category_id: Optional[str]) -> bool:
        return self.get().is_blocked(category_id)

    def refresh(self) -> GlobalSettings:
        """Fetch again (after an admin change for instance) and notify every subscriber. A failed fetch keeps the last good snapshot."""
        snapshot, complete = self._load()
        if not complete:
            return self._current or snapshot

        self._current = snapshot
        for subscriber in list(self._subscribers):
            subscriber(self._current)
        return self._current

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Returns the function to unsubscribe again."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def _load(self) -> tuple[GlobalSettings, bool]:
        """The snapshot, and whether both fetches succeeded."""
        complete = True
        try:
            blocked = frozenset(self._source.fetch_blocked_categories())
        except ContentFetchError as e:
            logger.warning("Could not fetch blocked categories, assuming none: %s", e)
            blocked = frozenset()
            complete = False

        values = dict(DEFAULT_SETTINGS)
        try:
            values.update(self._source.fetch_settings())
        except ContentFetchError as e:
            logger.warning("Could not fetch settings, using defaults: %s", e)
            complete = False

        return GlobalSettings(blocked_categories=blocked, values=values), complete
