"""Flashcard study session: flip a card, rate it (mastered / review), move through the deck."""

from dataclasses import dataclass
from typing import Optional, Self
from uuid import uuid4

from prepgames.core.exceptions import GameStateError, InvalidRequestError
from prepgames.core.models import CardData, FlashcardDeckModel, PairData
from prepgames.core.shared_types import CardStatus


def cards_from_pairs(pairs: list[PairData]) -> list[CardData]:
    return [
        {
            "id": pair["id"],
            "front": pair["left"],
            "back": pair["right"],
            "status": CardStatus.NEW.value,
        }
        for pair in pairs
    ]


@dataclass
class FlashcardDeck:
    category_id: Optional[str]
    cards: list[CardData]
    current_index: int = 0
    flipped: bool = False
    completed: bool = False
    mastered: int = 0
    review: int = 0
    results_sent: bool = False

    @classmethod
    def from_model(cls, model: FlashcardDeckModel) -> Self:
        return cls(
            category_id=model.category_id,
            cards=model.cards,
            current_index=model.current_index,
            flipped=model.flipped,
            completed=model.completed,
            mastered=model.mastered,
            review=model.review,
            results_sent=model.results_sent,
        )

    def to_model(self) -> FlashcardDeckModel:
        return FlashcardDeckModel(
            category_id=self.category_id,
            cards=self.cards,
            current_index=self.current_index,
            flipped=self.flipped,
            completed=self.completed,
            mastered=self.mastered,
            review=self.review,
            results_sent=self.results_sent,
        )

    @property
    def current_card(self) -> Optional[CardData]:
        if not self.cards:
            return None
        return self.cards[self.current_index]

    @property
    def results_pending(self) -> bool:
        """A finished session whose results have not been handed to the backend yet."""
        return self.completed and not self.results_sent and len(self.cards) > 0

    def flip(self) -> None:
        self._assert_studying()
        self.flipped = not self.flipped

    def next(self) -> None:
        """Move to the next card. Moving past the last card completes the session."""
        self._assert_studying()
        self.flipped = False
        if self.current_index < len(self.cards) - 1:
            self.current_index += 1
        else:
            self.completed = True

    def previous(self) -> None:
        self._assert_studying()
        if self.current_index > 0:
            self.flipped = False
            self.current_index -= 1

    def rate(self, status: CardStatus) -> None:
        """Count the rating, remember it on the card and move on."""
        self._assert_studying()
        if status == CardStatus.MASTERED:
            self.mastered += 1
        elif status == CardStatus.REVIEW:
            self.review += 1
        else:
            raise InvalidRequestError(
                f"Cannot rate a card as {status!r}. Pick one from {CardStatus.MASTERED}, {CardStatus.REVIEW}"
            )
        self.cards[self.current_index]["status"] = status.value
        self.next()

    def restart(self) -> None:
        self.mastered = 0
        self.review = 0
        self.current_index = 0
        self.completed = False
        self.flipped = False
        self.results_sent = False

    def load_more(self, cards: list[CardData]) -> None:
        """
        Append new cards with fresh ids (the backend may send duplicates).

        NOTE a completed deck is reopened, and the current index (last card) is moved onto the first new card.
        """
        start = len(self.cards)
        self.cards.extend({**card, "id": f"{card['id']}-more-{uuid4().hex[:8]}"} for card in cards)
        if self.completed and len(self.cards) > start:
            self.completed = False
            self.flipped = False
            self.current_index = start

    def mark_results_sent(self) -> None:
        self.results_sent = True

    # -- PRIVATE HELPERS ---
    def _assert_studying(self) -> None:
        if not self.cards:
            raise GameStateError("Deck is empty.")
        if self.completed:
            raise GameStateError("Session completed. Restart or load more cards.")
