"""
The MatchingGame class is the entrypoint into the domain layer for the matching ("connection") game.

A round shows 4 prompts on the left, and their answers (shuffled) on the right.
The player drags a line from a left card to the right card holding its answer.
The service layer feeds pointer events into this class and persists the result through to_model().
"""

import random
from dataclasses import dataclass, field
from typing import Optional, Self

from prepgames.core.exceptions import GameStateError
from prepgames.core.models import MatchingGameModel, PairData
from prepgames.core.shared_types import LineStatus, Side
from prepgames.games.fallback import MIN_PAIRS, pairs_or_fallback, unique_pairs
from prepgames.games.particles import ParticleBurst
from prepgames.games.scheduler import Scheduler

CARDS_PER_ROUND = MIN_PAIRS
MATCH_POINTS = 100

# Delays (ms)
SHAKE_DURATION = 500
CONFETTI_DELAY = 100
LEVEL_MODAL_DELAY = 600

# Task names
CLEAR_SHAKE = "clear_shake"
FIRE_CONFETTI = "fire_confetti"
SHOW_LEVEL_MODAL = "show_level_modal"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Region:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        return (self.x <= point.x <= self.x + self.width) and (
            self.y <= point.y <= self.y + self.height
        )


@dataclass(frozen=True)
class BoardLayout:
    """
    Where the cards are on the board, computed from the round itself (not from whatever the browser rendered).

    Two columns of equally sized cards: left column flush left, right column flush right.
    """

    width: float = 800
    card_width: float = 300
    card_height: float = 80
    gap: float = 16
    top: float = 0

    def region(self, side: Side, index: int) -> Region:
        x = 0 if side == Side.LEFT else self.width - self.card_width
        y = self.top + index * (self.card_height + self.gap)
        return Region(x, y, self.card_width, self.card_height)

    def regions(self, side: Side, card_ids: list[str]) -> dict[str, Region]:
        return {card_id: self.region(side, i) for i, card_id in enumerate(card_ids)}


@dataclass
class MatchingGame:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    category_id: Optional[str]
    pool: list[PairData]
    level: int = 1
    score: int = 0
    left_cards: list[PairData] = field(default_factory=list)
    right_cards: list[PairData] = field(default_factory=list)
    used_ids: set[str] = field(default_factory=set)
    matched_ids: set[str] = field(default_factory=set)
    shaking_ids: set[str] = field(default_factory=set)
    line: Optional[tuple[Point, Point]] = None
    line_status: LineStatus = LineStatus.DEFAULT
    start_card_id: Optional[str] = None
    dragging: bool = False
    show_level_modal: bool = False
    confetti_seed: Optional[int] = None
    scheduler: Scheduler = field(default_factory=Scheduler)
    layout: BoardLayout = field(default_factory=BoardLayout)
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def new_game(
        cls,
        pool: list[PairData],
        category_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> Self:
        """Pools too small to fill a round are replaced by the built-in one."""
        game = cls(
            category_id=category_id,
            pool=pairs_or_fallback(pool),
            rng=rng or random.Random(),
        )
        game.start()
        return game

    @classmethod
    def from_model(
        cls, model: MatchingGameModel, rng: Optional[random.Random] = None
    ) -> Self:
        line = (
            (
                Point(model.line["x1"], model.line["y1"]),
                Point(model.line["x2"], model.line["y2"]),
            )
            if model.line
            else None
        )
        return cls(
            category_id=model.category_id,
            pool=model.pool,
            level=model.level,
            score=model.score,
            left_cards=model.left_cards,
            right_cards=model.right_cards,
            used_ids=set(model.used_ids),
            matched_ids=set(model.matched_ids),
            shaking_ids=set(model.shaking_ids),
            line=line,
            line_status=LineStatus(model.line_status),
            start_card_id=model.start_card_id,
            dragging=model.dragging,
            show_level_modal=model.show_level_modal,
            confetti_seed=model.confetti_seed,
            scheduler=Scheduler.from_data(model.tasks),
            rng=rng or random.Random(),
        )

    def to_model(self) -> MatchingGameModel:
        line = (
            {
                "x1": self.line[0].x,
                "y1": self.line[0].y,
                "x2": self.line[1].x,
                "y2": self.line[1].y,
            }
            if self.line
            else None
        )
        return MatchingGameModel(
            category_id=self.category_id,
            pool=self.pool,
            level=self.level,
            score=self.score,
            left_cards=self.left_cards,
            right_cards=self.right_cards,
            used_ids=sorted(self.used_ids),
            matched_ids=sorted(self.matched_ids),
            shaking_ids=sorted(self.shaking_ids),
            line=line,
            line_status=self.line_status.value,
            start_card_id=self.start_card_id,
            dragging=self.dragging,
            show_level_modal=self.show_level_modal,
            confetti_seed=self.confetti_seed,
            tasks=self.scheduler.to_data(),
        )

    @property
    def left_ids(self) -> list[str]:
        return [card["id"] for card in self.left_cards]

    @property
    def right_ids(self) -> list[str]:
        return [card["id"] for card in self.right_cards]

    @property
    def is_level_complete(self) -> bool:
        return len(self.left_cards) > 0 and len(self.matched_ids) == len(
            self.left_cards
        )

    def start(self) -> None:
        """(Re)start from level 1 with a fresh score and every pair available again."""
        self.score = 0
        self.level = 1
        self.used_ids = set()
        self.load_level()

    def load_level(self) -> None:
        """
        Deal a new round
        ----

        1. Clear everything left over from the previous round (matches, drag, pending timers)
        2. Pick 4 pairs not used before. Not enough left? --> everything becomes available again
        3. Left side in the order picked, right side shuffled independently
        """
        self.matched_ids = set()
        self.shaking_ids = set()
        self._clear_drag()
        self.line_status = LineStatus.DEFAULT
        self.show_level_modal = False
        self.confetti_seed = None
        self.scheduler.cancel_all()

        # every id at most once per round, so each left card has exactly one partner on the right
        pool = unique_pairs(self.pool)
        available = [pair for pair in pool if pair["id"] not in self.used_ids]
        if len(available) < CARDS_PER_ROUND:
            # NOTE pools smaller than a round are played as they are (fallback normally prevents this).
            if len(pool) >= CARDS_PER_ROUND:
                self.used_ids = set()
            available = pool

        batch = self.rng.sample(available, min(CARDS_PER_ROUND, len(available)))
        self.used_ids.update(pair["id"] for pair in batch)
        self.left_cards = batch
        self.right_cards = self.rng.sample(batch, len(batch))

    def next_level(self) -> None:
        """Only the player moves on to the next level, and only once this one is done."""
        if not self.is_level_complete:
            raise GameStateError(
                f"Level {self.level} is not complete yet. matched: {len(self.matched_ids)}/{len(self.left_cards)}"
            )
        self.level += 1
        self.load_level()

    def begin_drag(self, card_id: str) -> bool:
        """Start drawing a line from the center of a left card. Matched or unknown cards are ignored."""
        if card_id not in self.left_ids or card_id in self.matched_ids:
            return False

        regions = self.layout.regions(Side.LEFT, self.left_ids)
        start = regions[card_id].center
        self.start_card_id = card_id
        self.line = (start, start)
        self.dragging = True
        self.line_status = LineStatus.DEFAULT
        return True

    def update_drag(self, point: Point) -> None:
        if not self.dragging or self.line is None:
            return
        self.line = (self.line[0], point)

    def end_drag(self, point: Point, now: float) -> Optional[LineStatus]:
        """
        Release the line
        ----

        * On the right card with the same id --> match, +100 points
        * On another right card --> both cards shake for a moment, score untouched
        * Anywhere else --> nothing happens

        Returns the outcome (None if released elsewhere or not dragging at all).
        """
        if not self.dragging or self.start_card_id is None:
            return None

        start_id = self.start_card_id
        self._clear_drag()

        target = self.hit_test(point)
        if target is None or target[0] != Side.RIGHT:
            return None

        _, target_id = target
        if target_id == start_id:
            self._register_match(start_id, now)
            self.line_status = LineStatus.SUCCESS
        else:
            self._shake(start_id, target_id, now)
            self.line_status = LineStatus.ERROR
        return self.line_status

    def hit_test(self, point: Point) -> Optional[tuple[Side, str]]:
        """Which card (if any) lies under the point."""
        for side, ids in ((Side.LEFT, self.left_ids), (Side.RIGHT, self.right_ids)):
            for card_id, region in self.layout.regions(side, ids).items():
                if region.contains(point):
                    return side, card_id
        return None

    def run_due(self, now: float) -> list[str]:
        return self.scheduler.run_due(now, self._on_task)

    def teardown(self) -> None:
        """Game is going away: nothing scheduled may fire anymore."""
        self.scheduler.cancel_all()
        self._clear_drag()

    def confetti(self, frame: int = 0) -> Optional[ParticleBurst]:
        """Replay the level-complete burst up to the requested frame. None before it has been fired."""
        if self.confetti_seed is None:
            return None
        burst = ParticleBurst.spawn(
            width=self.layout.width,
            height=self.layout.top
            + CARDS_PER_ROUND * (self.layout.card_height + self.layout.gap),
            seed=self.confetti_seed,
        )
        burst.advance_to(frame)
        return burst

    # -- PRIVATE HELPERS ---
    def _clear_drag(self) -> None:
        self.dragging = False
        self.start_card_id = None
        self.line = None

    def _register_match(self, card_id: str, now: float) -> None:
        if card_id in self.matched_ids:
            return
        self.score += MATCH_POINTS
        self.matched_ids.add(card_id)
        if self.is_level_complete:
            self.scheduler.call_later(now, CONFETTI_DELAY, FIRE_CONFETTI)
            self.scheduler.call_later(now, LEVEL_MODAL_DELAY, SHOW_LEVEL_MODAL)

    def _shake(self, first_id: str, second_id: str, now: float) -> None:
        # a newer shake replaces the running one, so an older timer cannot stop it early
        self.scheduler.cancel(CLEAR_SHAKE)
        self.shaking_ids = {first_id, second_id}
        self.scheduler.call_later(now, SHAKE_DURATION, CLEAR_SHAKE)

    def _on_task(self, name: str) -> None:
        if name == CLEAR_SHAKE:
            self.shaking_ids = set()
        elif name == FIRE_CONFETTI:
            self.confetti_seed = self.rng.randrange(2**31)
        elif name == SHOW_LEVEL_MODAL:
            self.show_level_modal = True
