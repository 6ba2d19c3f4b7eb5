"""HTTP routes. Every browser event of a game is one request, the response is the game state after applying it."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from prepgames.api.dependencies import get_service
from prepgames.api.models import (
    BeginDragRequest,
    ConfettiRequest,
    ConfettiResponse,
    CreateGameRequest,
    DecipherResponse,
    DeleteGameRequest,
    FlashcardResponse,
    GetGameRequest,
    GuessRequest,
    KeyRequest,
    MatchingResponse,
    MatchingResultResponse,
    PointerRequest,
    RateCardRequest,
    SettingsResponse,
)
from prepgames.core.shared_types import CardStatus, GameKind
from prepgames.services.game_service import GameService

router = APIRouter()


# --- BODIES (game_id comes from the path) ---
class CardBody(BaseModel):
    card_id: str


class PointerBody(BaseModel):
    x: float
    y: float


class LetterBody(BaseModel):
    letter: str


class KeyBody(BaseModel):
    key: str


class RateBody(BaseModel):
    status: CardStatus


# --- MATCHING ---
@router.post("/matching", response_model=MatchingResponse, status_code=status.HTTP_201_CREATED)
def create_matching(
    request: CreateGameRequest, service: GameService = Depends(get_service)
) -> MatchingResponse:
    return service.create_matching_game(request)


@router.get("/matching/{game_id}", response_model=MatchingResponse)
def get_matching(game_id: UUID, service: GameService = Depends(get_service)) -> MatchingResponse:
    return service.get_matching_game(GetGameRequest(game_id=game_id))


@router.post("/matching/{game_id}/drag/begin", response_model=MatchingResponse)
def begin_drag(
    game_id: UUID, body: CardBody, service: GameService = Depends(get_service)
) -> MatchingResponse:
    return service.begin_drag(BeginDragRequest(game_id=game_id, card_id=body.card_id))


@router.post("/matching/{game_id}/drag/move", response_model=MatchingResponse)
def move_drag(
    game_id: UUID, body: PointerBody, service: GameService = Depends(get_service)
) -> MatchingResponse:
    return service.update_drag(PointerRequest(game_id=game_id, x=body.x, y=body.y))


@router.post("/matching/{game_id}/drag/end", response_model=MatchingResponse)
def end_drag(
    game_id: UUID, body: PointerBody, service: GameService = Depends(get_service)
) -> MatchingResponse:
    return service.end_drag(PointerRequest(game_id=game_id, x=body.x, y=body.y))


@router.post("/matching/{game_id}/next-level", response_model=MatchingResponse)
def next_level(game_id: UUID, service: GameService = Depends(get_service)) -> MatchingResponse:
    return service.next_level(GetGameRequest(game_id=game_id))


@router.get("/matching/{game_id}/confetti/{frame}", response_model=ConfettiResponse)
def confetti(
    game_id: UUID, frame: int, service: GameService = Depends(get_service)
) -> ConfettiResponse:
    return service.confetti(ConfettiRequest(game_id=game_id, frame=frame))


@router.post("/matching/{game_id}/finish", response_model=MatchingResultResponse)
def finish_matching(
    game_id: UUID, service: GameService = Depends(get_service)
) -> MatchingResultResponse:
    return service.finish_matching_game(GetGameRequest(game_id=game_id))


# --- DECIPHER ---
@router.post("/decipher", response_model=DecipherResponse, status_code=status.HTTP_201_CREATED)
def create_decipher(
    request: CreateGameRequest, service: GameService = Depends(get_service)
) -> DecipherResponse:
    return service.create_decipher_game(request)


@router.get("/decipher/{game_id}", response_model=DecipherResponse)
def get_decipher(game_id: UUID, service: GameService = Depends(get_service)) -> DecipherResponse:
    return service.get_decipher_game(GetGameRequest(game_id=game_id))


@router.post("/decipher/{game_id}/guess", response_model=DecipherResponse)
def guess(
    game_id: UUID, body: LetterBody, service: GameService = Depends(get_service)
) -> DecipherResponse:
    return service.guess(GuessRequest(game_id=game_id, letter=body.letter))


@router.post("/decipher/{game_id}/key", response_model=DecipherResponse)
def press_key(
    game_id: UUID, body: KeyBody, service: GameService = Depends(get_service)
) -> DecipherResponse:
    return service.press_key(KeyRequest(game_id=game_id, key=body.key))


@router.post("/decipher/{game_id}/hint", response_model=DecipherResponse)
def use_hint(game_id: UUID, service: GameService = Depends(get_service)) -> DecipherResponse:
    return service.use_hint(GetGameRequest(game_id=game_id))


@router.post("/decipher/{game_id}/reveal", response_model=DecipherResponse)
def reveal_term(game_id: UUID, service: GameService = Depends(get_service)) -> DecipherResponse:
    return service.reveal_term(GetGameRequest(game_id=game_id))


@router.post("/decipher/{game_id}/next", response_model=DecipherResponse)
def next_term(game_id: UUID, service: GameService = Depends(get_service)) -> DecipherResponse:
    return service.next_term(GetGameRequest(game_id=game_id))


# --- FLASHCARDS ---
@router.post("/flashcards", response_model=FlashcardResponse, status_code=status.HTTP_201_CREATED)
def create_flashcards(
    request: CreateGameRequest, service: GameService = Depends(get_service)
) -> FlashcardResponse:
    return service.create_flashcard_deck(request)


@router.get("/flashcards/{game_id}", response_model=FlashcardResponse)
def get_flashcards(game_id: UUID, service: GameService = Depends(get_service)) -> FlashcardResponse:
    return service.get_flashcard_deck(GetGameRequest(game_id=game_id))


@router.post("/flashcards/{game_id}/flip", response_model=FlashcardResponse)
def flip_card(game_id: UUID, service: GameService = Depends(get_service)) -> FlashcardResponse:
    return service.flip_card(GetGameRequest(game_id=game_id))


@router.post("/flashcards/{game_id}/next", response_model=FlashcardResponse)
def next_card(game_id: UUID, service: GameService = Depends(get_service)) -> FlashcardResponse:
    return service.next_card(GetGameRequest(game_id=game_id))


@router.post("/flashcards/{game_id}/previous", response_model=FlashcardResponse)
def previous_card(game_id: UUID, service: GameService = Depends(get_service)) -> FlashcardResponse:
    return service.previous_card(GetGameRequest(game_id=game_id))


@router.post("/flashcards/{game_id}/rate", response_model=FlashcardResponse)
def rate_card(
    game_id: UUID, body: RateBody, service: GameService = Depends(get_service)
) -> FlashcardResponse:
    return service.rate_card(RateCardRequest(game_id=game_id, status=body.status))


@router.post("/flashcards/{game_id}/restart", response_model=FlashcardResponse)
def restart_deck(game_id: UUID, service: GameService = Depends(get_service)) -> FlashcardResponse:
    return service.restart_deck(GetGameRequest(game_id=game_id))


@router.post("/flashcards/{game_id}/more", response_model=FlashcardResponse)
def load_more_cards(game_id: UUID, service: GameService = Depends(get_service)) -> FlashcardResponse:
    return service.load_more_cards(GetGameRequest(game_id=game_id))


# --- SHARED ---
@router.delete("/matching/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_matching(game_id: UUID, service: GameService = Depends(get_service)) -> None:
    service.delete_game(DeleteGameRequest(game_id=game_id, kind=GameKind.MATCHING))


@router.delete("/decipher/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_decipher(game_id: UUID, service: GameService = Depends(get_service)) -> None:
    service.delete_game(DeleteGameRequest(game_id=game_id, kind=GameKind.DECIPHER))


@router.delete("/flashcards/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_flashcards(game_id: UUID, service: GameService = Depends(get_service)) -> None:
    service.delete_game(DeleteGameRequest(game_id=game_id, kind=GameKind.FLASHCARDS))


@router.get("/settings", response_model=SettingsResponse)
def get_settings(service: GameService = Depends(get_service)) -> SettingsResponse:
    return service.get_settings()


@router.post("/settings/refresh", response_model=SettingsResponse)
def refresh_settings(service: GameService = Depends(get_service)) -> SettingsResponse:
    return service.refresh_settings()
