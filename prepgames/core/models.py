"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Both the API layer (higher) and the domain/db layers (lower) use the models defined here to send to/receive from the Service.
Only JSON-friendly field types are used, so a model can be stored as-is in a JSON column.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Type aliases to make the models easier to read
PairData = dict[str, str]  # {"id", "left", "right"}
TermData = dict[str, str]  # {"id", "term", "hint", "definition"}
CardData = dict[str, str]  # {"id", "front", "back", "status"}
TaskData = dict[str, Any]  # {"name", "due"}


@dataclass
class MatchingGameModel:
    """Transport-safe representation of a matching ("connection") game."""

    category_id: Optional[str]
    pool: list[PairData]
    level: int = 1
    score: int = 0
    left_cards: list[PairData] = field(default_factory=list)
    right_cards: list[PairData] = field(default_factory=list)
    used_ids: list[str] = field(default_factory=list)
    matched_ids: list[str] = field(default_factory=list)
    shaking_ids: list[str] = field(default_factory=list)
    line: Optional[dict[str, float]] = None
    line_status: str = "default"
    start_card_id: Optional[str] = None
    dragging: bool = False
    show_level_modal: bool = False
    confetti_seed: Optional[int] = None
    tasks: list[TaskData] = field(default_factory=list)


@dataclass
class DecipherGameModel:
    """Transport-safe representation of a term-guess ("decipher") game."""

    category_id: Optional[str]
    pool: list[TermData]
    queue: list[TermData]
    term: str
    hint: str
    definition: str
    guessed_letters: list[str] = field(default_factory=list)
    lives: int = 5
    hints_used: int = 0
    state: str = "playing"
    term_revealed: bool = False


@dataclass
class FlashcardDeckModel:
    """Transport-safe representation of a flashcard study session."""

    category_id: Optional[str]
    cards: list[CardData]
    current_index: int = 0
    flipped: bool = False
    completed: bool = False
    mastered: int = 0
    review: int = 0
    results_sent: bool = False


@dataclass
class GameRecord:
    """What the repository stores: the kind of game + the serialized model of that game."""

    kind: str
    state: dict[str, Any]
    version: int = 0  # 0 until stored, then bumped by every update
