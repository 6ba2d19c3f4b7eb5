"""Protocol repository (SQLAlchemy implementation in sql_repository.py, dict-based one in the tests)"""

from typing import Protocol
from uuid import UUID

from prepgames.core.models import GameRecord


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def get_game(self, game_id: UUID) -> GameRecord | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameRecord) -> tuple[GameRecord, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameRecord) -> GameRecord | None:
        """Replace the state of an existing record. Raises GameStateError when game.version is not the stored one."""
        ...

    def delete_game(self, game_id: UUID) -> GameRecord | None:
        """Remove a game's record."""
        ...
