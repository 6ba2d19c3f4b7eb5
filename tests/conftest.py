"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures and mock dependencies required for testing multiple layers.
"""

from dataclasses import replace
from typing import Any, Generator, Optional
from uuid import UUID, uuid4

import pytest
import requests
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from prepgames.core.exceptions import ContentFetchError, GameStateError
from prepgames.core.models import GameRecord, PairData, TermData
from prepgames.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """Mock the GameRepository using a dictionary of game records (versioned like the SQL one)."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameRecord] = {}

    def create_game(self, game: GameRecord) -> tuple[GameRecord, UUID]:
        game_id = uuid4()
        stored = replace(game, version=1)
        self._games[game_id] = stored
        return stored, game_id

    def get_game(self, game_id: UUID) -> GameRecord | None:
        return self._games.get(game_id)

    def update_game(self, game_id: UUID, game: GameRecord) -> GameRecord | None:
        current = self._games.get(game_id)
        if current is None:
            return None
        if current.version != game.version:
            raise GameStateError(f"Game with {game_id=} was changed by another request.")
        stored = replace(game, version=current.version + 1)
        self._games[game_id] = stored
        return stored

    def delete_game(self, game_id: UUID) -> GameRecord | None:
        return self._games.pop(game_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._games.clear()


class MockContent:
    """Mock the content backend: canned pools, records every posted result. fail=True mimics the backend being down."""

    def __init__(
        self,
        pairs: Optional[list[PairData]] = None,
        terms: Optional[list[TermData]] = None,
        blocked: Optional[list[str]] = None,
        fail: bool = False,
    ) -> None:
        self.pairs = pairs if pairs is not None else []
        self.terms = terms if terms is not None else []
        self.blocked = blocked or []
        self.fail = fail
        self.flashcard_results: list[dict] = []
        self.matching_results: list[dict] = []
        self.settings_calls = 0

    def fetch_pairs(self, category_id: Optional[str] = None) -> list[PairData]:
        self._maybe_fail()
        return [dict(pair) for pair in self.pairs]

    def fetch_terms(self, category_id: Optional[str] = None) -> list[TermData]:
        self._maybe_fail()
        return [dict(term) for term in self.terms]

    def fetch_blocked_categories(self) -> list[str]:
        self.settings_calls += 1
        self._maybe_fail()
        return list(self.blocked)

    def fetch_settings(self) -> dict[str, str]:
        self._maybe_fail()
        return {"email": "mock@example.com"}

    def post_flashcard_result(
        self, category_id: Optional[str], cards_reviewed: int, mastered: int
    ) -> bool:
        self.flashcard_results.append(
            {"category_id": category_id, "cards_reviewed": cards_reviewed, "mastered": mastered}
        )
        return not self.fail

    def post_matching_result(
        self, category_id: Optional[str], level: int, score: int, matched: int
    ) -> bool:
        self.matching_results.append(
            {"category_id": category_id, "level": level, "score": score, "matched": matched}
        )
        return not self.fail

    def _maybe_fail(self) -> None:
        if self.fail:
            raise ContentFetchError("backend down (mock)")


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False) -> None:
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self) -> Any:
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    """Stands in for requests.Session: canned responses per path, records every call."""

    def __init__(self, responses: Optional[dict[str, FakeResponse]] = None, error: Optional[Exception] = None) -> None:
        self.responses = responses or {}
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond("POST", url, kwargs)

    def _respond(self, method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error:
            raise self.error
        path = url.removeprefix("http://content.test")
        return self.responses.get(path, FakeResponse(status_code=404))


class FakeClock:
    """Milliseconds, only moves when told to."""

    def __init__(self, now: float = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


PAIRS = [{"id": f"q{i}", "left": f"prompt {i}", "right": f"answer {i}"} for i in range(8)]
TERMS = [
    {"id": "t1", "term": "FEBRE", "hint": "sintoma comum", "definition": "Temperatura elevada."},
    {"id": "t2", "term": "TOSSE", "hint": "via aérea", "definition": "Expulsão súbita de ar."},
]


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def mock_content() -> MockContent:
    return MockContent(pairs=PAIRS, terms=TERMS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
