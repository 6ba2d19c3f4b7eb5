"""HTTP level tests: routes, status codes and the mapping of GameError subclasses onto them."""

import random
from typing import Generator
from uuid import uuid4

import pytest
from conftest import PAIRS, FakeClock, MockContent, MockRepository
from fastapi import status
from fastapi.testclient import TestClient

from prepgames.api.dependencies import get_service
from prepgames.app import create_app
from prepgames.core.shared_types import Side
from prepgames.games.matching import BoardLayout
from prepgames.services.game_service import GameService
from prepgames.services.settings_store import SettingsStore


@pytest.fixture
def client(mock_repository: MockRepository, clock: FakeClock) -> Generator[TestClient, None, None]:
    """App wired to the in-memory mocks instead of the database and the content backend."""
    content = MockContent(pairs=PAIRS, blocked=["cat-blocked"])
    service = GameService(
        mock_repository, content, SettingsStore(content), clock=clock, rng=random.Random(3)
    )
    app = create_app()
    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# --- MATCHING ---
def test_matching_round_trip(client: TestClient) -> None:
    created = client.post("/matching", json={"category_id": "cat-1"})
    assert created.status_code == 201
    game = created.json()
    game_id = game["game_id"]
    assert len(game["left_cards"]) == 4

    card_id = game["left_cards"][0]["id"]
    index = [c["id"] for c in game["right_cards"]].index(card_id)
    target = BoardLayout().region(Side.RIGHT, index).center

    begun = client.post(f"/matching/{game_id}/drag/begin", json={"card_id": card_id})
    assert begun.status_code == 200
    assert begun.json()["dragging"]

    moved = client.post(f"/matching/{game_id}/drag/move", json={"x": 10, "y": 20})
    assert moved.json()["line"]["x2"] == 10

    ended = client.post(f"/matching/{game_id}/drag/end", json={"x": target.x, "y": target.y})
    assert ended.json()["score"] == 100
    assert ended.json()["line_status"] == "success"

    confetti = client.get(f"/matching/{game_id}/confetti/0")
    assert confetti.status_code == 200
    assert not confetti.json()["active"]

    finished = client.post(f"/matching/{game_id}/finish")
    assert finished.status_code == 200
    assert finished.json()["matched"] == 1
    assert client.get(f"/matching/{game_id}").status_code == 404


def test_next_level_too_early_is_a_conflict(client: TestClient) -> None:
    game_id = client.post("/matching", json={}).json()["game_id"]
    response = client.post(f"/matching/{game_id}/next-level")
    assert response.status_code == 409
    assert "detail" in response.json()


def test_blocked_category_is_forbidden(client: TestClient) -> None:
    for path in ("/matching", "/decipher", "/flashcards"):
        response = client.post(path, json={"category_id": "cat-blocked"})
        assert response.status_code == 403


def test_unknown_game_is_not_found(client: TestClient) -> None:
    assert client.get(f"/matching/{uuid4()}").status_code == 404
    assert client.get(f"/decipher/{uuid4()}").status_code == 404
    assert client.post(f"/flashcards/{uuid4()}/flip").status_code == 404


# --- DECIPHER ---
def test_decipher_routes(client: TestClient) -> None:
    created = client.post("/decipher", json={})
    assert created.status_code == 201
    game_id = created.json()["game_id"]

    key = client.post(f"/decipher/{game_id}/key", json={"key": "Shift"})
    assert key.json()["guessed_letters"] == []

    guessed = client.post(f"/decipher/{game_id}/guess", json={"letter": "q"})
    assert guessed.status_code == 200
    assert guessed.json()["guessed_letters"] == ["Q"]

    hinted = client.post(f"/decipher/{game_id}/hint")
    assert hinted.json()["hints_used"] == 1

    revealed = client.post(f"/decipher/{game_id}/reveal")
    assert revealed.json()["state"] == "lost"
    assert revealed.json()["definition"] is not None

    following = client.post(f"/decipher/{game_id}/next")
    assert following.json()["state"] == "playing"


def test_invalid_letter_is_unprocessable(client: TestClient) -> None:
    game_id = client.post("/decipher", json={}).json()["game_id"]
    response = client.post(f"/decipher/{game_id}/guess", json={"letter": "12"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


# --- FLASHCARDS ---
def test_flashcard_routes(client: TestClient) -> None:
    created = client.post("/flashcards", json={"category_id": "cat-1"})
    assert created.status_code == 201
    game_id = created.json()["game_id"]
    assert created.json()["card"]["back"] is None

    assert client.post(f"/flashcards/{game_id}/flip").json()["card"]["back"] is not None
    assert client.post(f"/flashcards/{game_id}/next").json()["current_index"] == 1
    assert client.post(f"/flashcards/{game_id}/previous").json()["current_index"] == 0

    rated = client.post(f"/flashcards/{game_id}/rate", json={"status": "mastered"})
    assert rated.json()["mastered"] == 1

    assert client.post(f"/flashcards/{game_id}/more").json()["total"] == 2 * len(PAIRS)
    restarted = client.post(f"/flashcards/{game_id}/restart").json()
    assert restarted["mastered"] == 0
    assert restarted["current_index"] == 0


def test_rating_card_as_new_is_unprocessable(client: TestClient) -> None:
    game_id = client.post("/flashcards", json={}).json()["game_id"]
    response = client.post(f"/flashcards/{game_id}/rate", json={"status": "new"})
    assert response.status_code == 422


# --- SHARED ---
def test_delete_checks_kind(client: TestClient) -> None:
    game_id = client.post("/decipher", json={}).json()["game_id"]
    assert client.delete(f"/matching/{game_id}").status_code == 404
    assert client.delete(f"/decipher/{game_id}").status_code == 204
    assert client.get(f"/decipher/{game_id}").status_code == 404


def test_settings_routes(client: TestClient) -> None:
    response = client.get("/settings")
    assert response.status_code == 200
    assert response.json()["blocked_categories"] == ["cat-blocked"]
    assert "whatsapp" in response.json()["values"]
    assert client.post("/settings/refresh").json() == response.json()
