"""Implementation of (Game)Repository using SQLAlchemy"""

from copy import deepcopy
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from prepgames.core.exceptions import GameStateError
from prepgames.core.models import GameRecord
from prepgames.db.schema import DBGameSession


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameRecord | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_record(game_db)
        return None

    def create_game(self, game: GameRecord) -> tuple[GameRecord, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGameSession(
            id=new_id,
            kind=game.kind,
            state=deepcopy(game.state),
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_record(game_db), new_id

    def update_game(self, game_id: UUID, game: GameRecord) -> GameRecord | None:
        """
        Replace the state of an existing record.

        NOTE game.version must be the version the caller loaded. Raises GameStateError when the record
        has been updated since (by another request), so that request's changes are not overwritten.
        """
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        if game_db.version != game.version:
            raise GameStateError(
                f"Game with {game_id=} was changed by another request (version {game_db.version}, expected {game.version})."
            )
        game_db.kind = game.kind
        # NOTE assign a new object: in-place changes to a JSON column are not tracked
        game_db.state = deepcopy(game.state)
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise GameStateError(
                f"Game with {game_id=} was changed by another request."
            ) from e
        self.db.refresh(game_db)
        return self._to_record(game_db)

    def delete_game(self, game_id: UUID) -> GameRecord | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_record = self._to_record(game_db)
        self.db.delete(game_db)
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise GameStateError(
                f"Game with {game_id=} was changed by another request."
            ) from e
        return game_record

    def _fetch_game(self, game_id: UUID) -> DBGameSession | None:
        query = select(DBGameSession).where(DBGameSession.id == game_id)
        return self.db.scalar(query)

    def _to_record(self, game_db: DBGameSession) -> GameRecord:
        """Convert SQLAlchemy model to data transfer model."""
        return GameRecord(
            kind=game_db.kind, state=deepcopy(game_db.state), version=game_db.version
        )
