"""Orchestration of communication from API router to the games, the content backend and the persistence layer (and the reverse direction)."""

import logging
import random
import time
from dataclasses import asdict
from typing import Callable, Optional, Protocol
from uuid import UUID

from prepgames.api.models import (
    BeginDragRequest,
    CardView,
    ConfettiRequest,
    ConfettiResponse,
    CreateGameRequest,
    DecipherResponse,
    DeleteGameRequest,
    FlashcardResponse,
    FlashcardView,
    GetGameRequest,
    GuessRequest,
    KeyRequest,
    LineView,
    MatchingResponse,
    MatchingResultResponse,
    ParticleView,
    PointerRequest,
    RateCardRequest,
    SettingsResponse,
)
from prepgames.core.exceptions import (
    CategoryBlockedError,
    ContentFetchError,
    RepositoryError,
)
from prepgames.core.models import (
    DecipherGameModel,
    FlashcardDeckModel,
    GameRecord,
    MatchingGameModel,
    PairData,
    TermData,
)
from prepgames.core.shared_types import GameKind, GuessState
from prepgames.db.repository import GameRepository
from prepgames.games.decipher import DecipherGame
from prepgames.games.fallback import MIN_PAIRS, pairs_or_fallback, terms_or_fallback, unique_pairs
from prepgames.games.flashcards import FlashcardDeck, cards_from_pairs
from prepgames.games.matching import MATCH_POINTS, MatchingGame, Point
from prepgames.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class ContentSource(Protocol):
    """The part of the content client the service depends on."""

    def fetch_pairs(self, category_id: Optional[str] = None) -> list[PairData]: ...

    def fetch_terms(self, category_id: Optional[str] = None) -> list[TermData]: ...

    def post_flashcard_result(
        self, category_id: Optional[str], cards_reviewed: int, mastered: int
    ) -> bool: ...

    def post_matching_result(
        self, category_id: Optional[str], level: int, score: int, matched: int
    ) -> bool: ...


def wall_clock_ms() -> float:
    return time.time() * 1000


class GameService:
    """Orchestration of layers for the mini-games."""

    def __init__(
        self,
        repository: GameRepository,
        content: ContentSource,
        settings_store: SettingsStore,
        clock: Callable[[], float] = wall_clock_ms,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.content = content
        self.settings_store = settings_store
        self.clock = clock
        self.rng = rng or random.Random()

    # -- API routes logic: MATCHING ---
    def create_matching_game(self, request: CreateGameRequest) -> MatchingResponse:
        """Fetch the pair pool of the category (or fall back to the built-in one) and deal the first level."""
        self._assert_category_open(request.category_id)

        pairs = self._fetch_pairs(request.category_id)
        game = MatchingGame.new_game(pairs, request.category_id, rng=self.rng)

        record = GameRecord(kind=GameKind.MATCHING, state=asdict(game.to_model()))
        _, game_id = self.repo.create_game(record)
        logger.info("Matching game %s created (category=%s)", game_id, request.category_id)
        return self._matching_response(game_id, game)

    def get_matching_game(self, request: GetGameRequest) -> MatchingResponse:
        """Used in a polling loop by the frontend: timers (shake reset, confetti, level prompt) fire here as well."""
        game, version = self._load_matching(request.game_id)
        return self._save_matching(request.game_id, game, version)

    def begin_drag(self, request: BeginDragRequest) -> MatchingResponse:
        game, version = self._load_matching(request.game_id)
        game.begin_drag(request.card_id)
        return self._save_matching(request.game_id, game, version)

    def update_drag(self, request: PointerRequest) -> MatchingResponse:
        game, version = self._load_matching(request.game_id)
        game.update_drag(Point(request.x, request.y))
        return self._save_matching(request.game_id, game, version)

    def end_drag(self, request: PointerRequest) -> MatchingResponse:
        game, version = self._load_matching(request.game_id)
        outcome = game.end_drag(Point(request.x, request.y), now=self.clock())
        logger.debug("Game %s: drag released with outcome %s", request.game_id, outcome)
        return self._save_matching(request.game_id, game, version)

    def next_level(self, request: GetGameRequest) -> MatchingResponse:
        game, version = self._load_matching(request.game_id)
        game.next_level()
        return self._save_matching(request.game_id, game, version)

    def confetti(self, request: ConfettiRequest) -> ConfettiResponse:
        game, _ = self._load_matching(request.game_id)
        burst = game.confetti(request.frame)
        if burst is None:
            return ConfettiResponse(
                game_id=request.game_id, frame=request.frame, active=False, particles=[]
            )
        return ConfettiResponse(
            game_id=request.game_id,
            frame=burst.frame,
            active=burst.is_active,
            particles=[
                ParticleView(x=p.x, y=p.y, r=p.r, color=p.color)
                for p in burst.visible()
            ],
        )

    def finish_matching_game(self, request: GetGameRequest) -> MatchingResultResponse:
        """Player leaves: send the aggregate result to the backend and remove the game."""
        game, _ = self._load_matching(request.game_id)
        game.teardown()

        matched = game.score // MATCH_POINTS
        submitted = self.content.post_matching_result(
            game.category_id, level=game.level, score=game.score, matched=matched
        )
        self.repo.delete_game(request.game_id)
        return MatchingResultResponse(
            game_id=request.game_id,
            level=game.level,
            score=game.score,
            matched=matched,
            submitted=submitted,
        )

    # -- API routes logic: DECIPHER ---
    def create_decipher_game(self, request: CreateGameRequest) -> DecipherResponse:
        self._assert_category_open(request.category_id)

        terms = self._fetch_terms(request.category_id)
        game = DecipherGame.new_game(terms, request.category_id, rng=self.rng)

        record = GameRecord(kind=GameKind.DECIPHER, state=asdict(game.to_model()))
        _, game_id = self.repo.create_game(record)
        logger.info("Decipher game %s created (category=%s, terms=%d)", game_id, request.category_id, len(game.pool))
        return self._decipher_response(game_id, game)

    def get_decipher_game(self, request: GetGameRequest) -> DecipherResponse:
        game, _ = self._load_decipher(request.game_id)
        return self._decipher_response(request.game_id, game)

    def guess(self, request: GuessRequest) -> DecipherResponse:
        game, version = self._load_decipher(request.game_id)
        game.guess(request.letter)
        return self._save_decipher(request.game_id, game, version)

    def press_key(self, request: KeyRequest) -> DecipherResponse:
        game, version = self._load_decipher(request.game_id)
        game.press_key(request.key)
        return self._save_decipher(request.game_id, game, version)

    def use_hint(self, request: GetGameRequest) -> DecipherResponse:
        game, version = self._load_decipher(request.game_id)
        game.use_hint()
        return self._save_decipher(request.game_id, game, version)

    def reveal_term(self, request: GetGameRequest) -> DecipherResponse:
        game, version = self._load_decipher(request.game_id)
        game.reveal_term()
        return self._save_decipher(request.game_id, game, version)

    def next_term(self, request: GetGameRequest) -> DecipherResponse:
        game, version = self._load_decipher(request.game_id)
        game.next_term()
        return self._save_decipher(request.game_id, game, version)

    # -- API routes logic: FLASHCARDS ---
    def create_flashcard_deck(self, request: CreateGameRequest) -> FlashcardResponse:
        self._assert_category_open(request.category_id)

        cards = cards_from_pairs(self._fetch_pairs(request.category_id))
        deck = FlashcardDeck(category_id=request.category_id, cards=cards)

        record = GameRecord(kind=GameKind.FLASHCARDS, state=asdict(deck.to_model()))
        _, game_id = self.repo.create_game(record)
        return self._flashcard_response(game_id, deck)

    def get_flashcard_deck(self, request: GetGameRequest) -> FlashcardResponse:
        deck, _ = self._load_flashcards(request.game_id)
        return self._flashcard_response(request.game_id, deck)

    def flip_card(self, request: GetGameRequest) -> FlashcardResponse:
        deck, version = self._load_flashcards(request.game_id)
        deck.flip()
        return self._save_flashcards(request.game_id, deck, version)

    def next_card(self, request: GetGameRequest) -> FlashcardResponse:
        deck, version = self._load_flashcards(request.game_id)
        deck.next()
        return self._save_flashcards(request.game_id, deck, version)

    def previous_card(self, request: GetGameRequest) -> FlashcardResponse:
        deck, version = self._load_flashcards(request.game_id)
        deck.previous()
        return self._save_flashcards(request.game_id, deck, version)

    def rate_card(self, request: RateCardRequest) -> FlashcardResponse:
        deck, version = self._load_flashcards(request.game_id)
        deck.rate(request.status)
        return self._save_flashcards(request.game_id, deck, version)

    def restart_deck(self, request: GetGameRequest) -> FlashcardResponse:
        deck, version = self._load_flashcards(request.game_id)
        deck.restart()
        return self._save_flashcards(request.game_id, deck, version)

    def load_more_cards(self, request: GetGameRequest) -> FlashcardResponse:
        deck, version = self._load_flashcards(request.game_id)
        deck.load_more(cards_from_pairs(self._fetch_pairs(deck.category_id)))
        return self._save_flashcards(request.game_id, deck, version)

    # -- API routes logic: SHARED ---
    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a game record (any kind). Pending timers are stored with the game, so they go with it."""
        self._fetch_record(request.game_id, request.kind)
        self.repo.delete_game(request.game_id)

    def get_settings(self) -> SettingsResponse:
        return self._settings_response()

    def refresh_settings(self) -> SettingsResponse:
        self.settings_store.refresh()
        return self._settings_response()

    # -- Internal helpers --
    def _assert_category_open(self, category_id: Optional[str]) -> None:
        if self.settings_store.is_category_blocked(category_id):
            raise CategoryBlockedError(f"Category {category_id!r} is blocked.")

    def _fetch_pairs(self, category_id: Optional[str]) -> list[PairData]:
        """Network trouble or a pool too small for a round both end up with the built-in pool."""
        try:
            pairs = self.content.fetch_pairs(category_id)
        except ContentFetchError as e:
            logger.error("Failed to load pairs for category %s: %s", category_id, e)
            pairs = []
        pairs = unique_pairs(pairs)
        if len(pairs) < MIN_PAIRS:
            logger.warning("Using default pairs fallback (got %d)", len(pairs))
        return pairs_or_fallback(pairs)

    def _fetch_terms(self, category_id: Optional[str]) -> list[TermData]:
        try:
            terms = self.content.fetch_terms(category_id)
        except ContentFetchError as e:
            logger.error("Failed to load terms for category %s: %s", category_id, e)
            terms = []
        if not terms:
            logger.warning("No terms found, using fallback term")
        return terms_or_fallback(terms)

    def _fetch_record(self, game_id: UUID, kind: Optional[GameKind] = None) -> GameRecord:
        """Attempt to find the game in the repository and raise error if it fails (or is another kind of game)."""
        record = self.repo.get_game(game_id)
        if record is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        if kind is not None and record.kind != kind:
            raise RepositoryError(f"Game with {game_id=} is not a {kind} game.")
        return record

    def _load_matching(self, game_id: UUID) -> tuple[MatchingGame, int]:
        """Restore the game and fire whatever timers came due since the last request."""
        record = self._fetch_record(game_id, GameKind.MATCHING)
        game = MatchingGame.from_model(MatchingGameModel(**record.state), rng=self.rng)
        game.run_due(self.clock())
        return game, record.version

    def _save_matching(self, game_id: UUID, game: MatchingGame, version: int) -> MatchingResponse:
        """version is the one the game was loaded with: a save on top of a newer state raises GameStateError."""
        record = GameRecord(kind=GameKind.MATCHING, state=asdict(game.to_model()), version=version)
        self.repo.update_game(game_id, record)
        return self._matching_response(game_id, game)

    def _load_decipher(self, game_id: UUID) -> tuple[DecipherGame, int]:
        record = self._fetch_record(game_id, GameKind.DECIPHER)
        game = DecipherGame.from_model(DecipherGameModel(**record.state), rng=self.rng)
        return game, record.version

    def _save_decipher(self, game_id: UUID, game: DecipherGame, version: int) -> DecipherResponse:
        record = GameRecord(kind=GameKind.DECIPHER, state=asdict(game.to_model()), version=version)
        self.repo.update_game(game_id, record)
        return self._decipher_response(game_id, game)

    def _load_flashcards(self, game_id: UUID) -> tuple[FlashcardDeck, int]:
        record = self._fetch_record(game_id, GameKind.FLASHCARDS)
        return FlashcardDeck.from_model(FlashcardDeckModel(**record.state)), record.version

    def _save_flashcards(self, game_id: UUID, deck: FlashcardDeck, version: int) -> FlashcardResponse:
        """
        Also the moment a completed session hands in its results (once, no retry).

        NOTE the deck is stored as 'results sent' before posting, so a rejected (outdated) save never posts.
        """
        post_results = deck.results_pending
        if post_results:
            deck.mark_results_sent()

        record = GameRecord(kind=GameKind.FLASHCARDS, state=asdict(deck.to_model()), version=version)
        self.repo.update_game(game_id, record)

        if post_results:
            self.content.post_flashcard_result(
                deck.category_id, cards_reviewed=len(deck.cards), mastered=deck.mastered
            )
        return self._flashcard_response(game_id, deck)

    def _matching_response(self, game_id: UUID, game: MatchingGame) -> MatchingResponse:
        line = (
            LineView(
                x1=game.line[0].x, y1=game.line[0].y, x2=game.line[1].x, y2=game.line[1].y
            )
            if game.line
            else None
        )
        return MatchingResponse(
            game_id=game_id,
            category_id=game.category_id,
            level=game.level,
            score=game.score,
            left_cards=[CardView(id=c["id"], text=c["left"]) for c in game.left_cards],
            right_cards=[CardView(id=c["id"], text=c["right"]) for c in game.right_cards],
            matched_ids=sorted(game.matched_ids),
            shaking_ids=sorted(game.shaking_ids),
            line=line,
            line_status=game.line_status,
            dragging=game.dragging,
            level_complete=game.is_level_complete,
            show_level_modal=game.show_level_modal,
            confetti_fired=game.confetti_seed is not None,
        )

    def _decipher_response(self, game_id: UUID, game: DecipherGame) -> DecipherResponse:
        # the definition would give the term away, only shown once the session is over
        over = game.state != GuessState.PLAYING
        return DecipherResponse(
            game_id=game_id,
            category_id=game.category_id,
            masked_term=game.masked_term,
            length=len(game.term),
            hint=game.hint,
            definition=game.definition if over else None,
            guessed_letters=sorted(game.guessed_letters),
            lives=game.lives,
            hints_used=game.hints_used,
            state=game.state,
            term_revealed=game.term_revealed,
            can_use_hint=game.can_use_hint,
            remaining=game.remaining,
        )

    def _flashcard_response(self, game_id: UUID, deck: FlashcardDeck) -> FlashcardResponse:
        card = deck.current_card
        view = (
            FlashcardView(
                id=card["id"],
                front=card["front"],
                back=card["back"] if deck.flipped else None,
                status=card["status"],
            )
            if card
            else None
        )
        return FlashcardResponse(
            game_id=game_id,
            category_id=deck.category_id,
            current_index=deck.current_index,
            total=len(deck.cards),
            card=view,
            flipped=deck.flipped,
            completed=deck.completed,
            mastered=deck.mastered,
            review=deck.review,
            results_sent=deck.results_sent,
        )

    def _settings_response(self) -> SettingsResponse:
        current = self.settings_store.get()
        return SettingsResponse(
            blocked_categories=sorted(current.blocked_categories),
            values=current.values,
        )
