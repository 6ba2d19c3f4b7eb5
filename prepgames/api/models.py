"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from prepgames.core.exceptions import InvalidRequestError
from prepgames.core.shared_types import CardStatus, GameKind, GuessState, LineStatus


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    category_id: Optional[str] = None


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID
    kind: Optional[GameKind] = None


class BeginDragRequest(BaseModel):
    game_id: UUID
    card_id: str


class PointerRequest(BaseModel):
    """Pointer position relative to the board (mouse or touch, the service does not care which)."""

    game_id: UUID
    x: float
    y: float


class ConfettiRequest(BaseModel):
    game_id: UUID
    frame: int = Field(default=0, ge=0)


class GuessRequest(BaseModel):
    game_id: UUID
    letter: str

    @field_validator("letter")
    @classmethod
    def validate_letter(cls, value: str) -> str:
        letter = value.strip().upper()
        if len(letter) != 1 or not ("A" <= letter <= "Z"):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a single letter A-Z."
            )
        return letter


class KeyRequest(BaseModel):
    """Raw key name from a keyboard event ('a', 'Enter', 'Shift', ...). Filtering happens in the game."""

    game_id: UUID
    key: str


class RateCardRequest(BaseModel):
    game_id: UUID
    status: CardStatus

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: CardStatus) -> CardStatus:
        if value == CardStatus.NEW:
            raise InvalidRequestError(
                f"A card can only be rated {CardStatus.MASTERED!r} or {CardStatus.REVIEW!r}."
            )
        return value


# --- RESPONSE MODELS ---
class CardView(BaseModel):
    id: str
    text: str


class LineView(BaseModel):
    x1: float
    y1: float
    x2: float
    y2: float


class MatchingResponse(BaseModel):
    game_id: UUID
    category_id: Optional[str]
    level: int
    score: int
    left_cards: list[CardView]
    right_cards: list[CardView]
    matched_ids: list[str]
    shaking_ids: list[str]
    line: Optional[LineView]
    line_status: LineStatus
    dragging: bool
    level_complete: bool
    show_level_modal: bool
    confetti_fired: bool


class MatchingResultResponse(BaseModel):
    game_id: UUID
    level: int
    score: int
    matched: int
    submitted: bool


class ParticleView(BaseModel):
    x: float
    y: float
    r: float
    color: str


class ConfettiResponse(BaseModel):
    game_id: UUID
    frame: int
    active: bool
    particles: list[ParticleView]


class DecipherResponse(BaseModel):
    game_id: UUID
    category_id: Optional[str]
    masked_term: str
    length: int
    hint: str
    definition: Optional[str]
    guessed_letters: list[str]
    lives: int
    hints_used: int
    state: GuessState
    term_revealed: bool
    can_use_hint: bool
    remaining: int


class FlashcardView(BaseModel):
    id: str
    front: str
    back: Optional[str]
    status: CardStatus


class FlashcardResponse(BaseModel):
    game_id: UUID
    category_id: Optional[str]
    current_index: int
    total: int
    card: Optional[FlashcardView]
    flipped: bool
    completed: bool
    mastered: int
    review: int
    results_sent: bool


class SettingsResponse(BaseModel):
    blocked_categories: list[str]
    values: dict[str, str]
