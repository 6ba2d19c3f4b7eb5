"""Unit tests for prepgames/games/matching.py"""

import random

import pytest

from prepgames.core.exceptions import GameStateError
from prepgames.core.shared_types import LineStatus, Side
from prepgames.games.fallback import DEFAULT_PAIRS
from prepgames.games.matching import (
    CLEAR_SHAKE,
    FIRE_CONFETTI,
    MATCH_POINTS,
    SHOW_LEVEL_MODAL,
    BoardLayout,
    MatchingGame,
    Point,
)

POOL = [{"id": f"p{i}", "left": f"prompt {i}", "right": f"answer {i}"} for i in range(8)]


@pytest.fixture
def game() -> MatchingGame:
    return MatchingGame.new_game(POOL, category_id="cat", rng=random.Random(7))


def right_center(game: MatchingGame, card_id: str) -> Point:
    """Where to release the pointer to land on the right card with this id."""
    index = game.right_ids.index(card_id)
    return game.layout.region(Side.RIGHT, index).center


def drag(game: MatchingGame, from_id: str, to_id: str, now: float = 0) -> LineStatus | None:
    game.begin_drag(from_id)
    return game.end_drag(right_center(game, to_id), now=now)


def other_id(game: MatchingGame, card_id: str) -> str:
    return next(i for i in game.right_ids if i != card_id)


# --- LOADING LEVELS ---
def test_new_game_deals_four_cards(game: MatchingGame) -> None:
    assert len(game.left_cards) == 4
    assert len(game.right_cards) == 4
    assert game.level == 1
    assert game.score == 0


@pytest.mark.parametrize("seed", range(20))
def test_left_and_right_contain_the_same_ids(seed: int) -> None:
    """Every id on the left shows up exactly once on the right, whatever the shuffle."""
    game = MatchingGame.new_game(POOL, rng=random.Random(seed))
    for _ in range(5):
        assert sorted(game.left_ids) == sorted(game.right_ids)
        assert len(set(game.right_ids)) == 4
        for card_id in game.left_ids:
            drag(game, card_id, card_id)
        game.next_level()


def test_pairs_are_not_reused_until_pool_runs_out(game: MatchingGame) -> None:
    """With 8 pairs, the first two levels show all 8 exactly once. The third level starts over."""
    first = set(game.left_ids)
    for card_id in game.left_ids:
        drag(game, card_id, card_id)
    game.next_level()
    second = set(game.left_ids)

    assert first.isdisjoint(second)
    assert first | second == {pair["id"] for pair in POOL}

    for card_id in game.left_ids:
        drag(game, card_id, card_id)
    game.next_level()
    assert len(game.used_ids) == 4


def test_small_pool_falls_back_to_default_pairs() -> None:
    game = MatchingGame.new_game(POOL[:3], rng=random.Random(1))
    assert len(game.pool) == len(DEFAULT_PAIRS)
    assert set(game.left_ids) <= {pair["id"] for pair in DEFAULT_PAIRS}


@pytest.mark.parametrize("seed", range(10))
def test_duplicate_ids_in_pool_are_dealt_once(seed: int) -> None:
    """A question listed twice must not end up twice in a round: every level can still be completed."""
    duplicated = POOL[:5] + [dict(pair, right="other answer") for pair in POOL[:3]]
    game = MatchingGame(category_id=None, pool=duplicated, rng=random.Random(seed))
    game.start()

    for _ in range(4):
        assert len(set(game.left_ids)) == len(game.left_ids) == 4
        assert sorted(game.left_ids) == sorted(game.right_ids)
        for card_id in game.left_ids:
            assert drag(game, card_id, card_id) == LineStatus.SUCCESS
        assert game.is_level_complete
        game.next_level()


def test_load_level_clears_previous_round(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    drag(game, card_id, other_id(game, card_id))
    assert game.shaking_ids

    game.load_level()
    assert game.matched_ids == set()
    assert game.shaking_ids == set()
    assert game.line is None
    assert game.scheduler.pending() == []


# --- DRAGGING ---
def test_begin_drag_starts_line_at_card_center(game: MatchingGame) -> None:
    card_id = game.left_ids[1]
    assert game.begin_drag(card_id)

    center = game.layout.region(Side.LEFT, 1).center
    assert game.dragging
    assert game.start_card_id == card_id
    assert game.line == (center, center)
    assert game.line_status == LineStatus.DEFAULT


def test_cannot_drag_from_unknown_card(game: MatchingGame) -> None:
    assert not game.begin_drag("does-not-exist")
    assert not game.dragging


def test_cannot_drag_from_matched_card(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    drag(game, card_id, card_id)
    assert not game.begin_drag(card_id)
    assert not game.dragging


def test_update_drag_moves_line_end(game: MatchingGame) -> None:
    game.begin_drag(game.left_ids[0])
    start = game.line[0]
    game.update_drag(Point(123, 45))
    assert game.line == (start, Point(123, 45))


def test_update_drag_without_dragging_does_nothing(game: MatchingGame) -> None:
    game.update_drag(Point(1, 1))
    assert game.line is None


def test_match_scores_100(game: MatchingGame) -> None:
    card_id = game.left_ids[2]
    outcome = drag(game, card_id, card_id)

    assert outcome == LineStatus.SUCCESS
    assert game.matched_ids == {card_id}
    assert game.score == MATCH_POINTS
    assert not game.dragging
    assert game.line is None


def test_mismatch_shakes_without_score(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    wrong_id = other_id(game, card_id)
    outcome = drag(game, card_id, wrong_id, now=1000)

    assert outcome == LineStatus.ERROR
    assert game.matched_ids == set()
    assert game.score == 0
    assert game.shaking_ids == {card_id, wrong_id}
    assert game.scheduler.pending() == [CLEAR_SHAKE]


def test_shake_clears_after_500ms(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    drag(game, card_id, other_id(game, card_id), now=1000)

    assert game.run_due(1499) == []
    assert game.shaking_ids
    assert game.run_due(1500) == [CLEAR_SHAKE]
    assert game.shaking_ids == set()


def test_second_shake_is_not_cut_short_by_first(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    drag(game, card_id, other_id(game, card_id), now=1000)
    drag(game, card_id, other_id(game, card_id), now=1400)

    game.run_due(1500)
    assert game.shaking_ids
    game.run_due(1900)
    assert game.shaking_ids == set()


def test_release_outside_cards_changes_nothing(game: MatchingGame) -> None:
    game.begin_drag(game.left_ids[0])
    outcome = game.end_drag(Point(400, 2000), now=0)

    assert outcome is None
    assert game.score == 0
    assert game.matched_ids == set()
    assert game.shaking_ids == set()
    assert not game.dragging
    assert game.line is None


def test_release_on_left_card_changes_nothing(game: MatchingGame) -> None:
    game.begin_drag(game.left_ids[0])
    outcome = game.end_drag(game.layout.region(Side.LEFT, 0).center, now=0)
    assert outcome is None
    assert game.matched_ids == set()


def test_end_drag_without_begin_is_ignored(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    assert game.end_drag(right_center(game, card_id), now=0) is None
    assert game.score == 0


# --- LEVEL COMPLETION ---
def test_level_complete_only_with_all_four_matched(game: MatchingGame) -> None:
    for card_id in game.left_ids[:3]:
        drag(game, card_id, card_id)
        assert not game.is_level_complete

    drag(game, game.left_ids[3], game.left_ids[3], now=2000)
    assert game.is_level_complete
    assert game.score == 4 * MATCH_POINTS
    assert game.scheduler.pending() == [FIRE_CONFETTI, SHOW_LEVEL_MODAL]


def test_level_complete_sequence(game: MatchingGame) -> None:
    for card_id in game.left_ids:
        drag(game, card_id, card_id, now=2000)

    assert game.confetti_seed is None
    assert not game.show_level_modal

    assert game.run_due(2100) == [FIRE_CONFETTI]
    assert game.confetti_seed is not None
    assert not game.show_level_modal

    assert game.run_due(2600) == [SHOW_LEVEL_MODAL]
    assert game.show_level_modal

    # the level only goes up when the player asks for it
    assert game.level == 1
    game.next_level()
    assert game.level == 2
    assert not game.show_level_modal


def test_next_level_before_completion_raises(game: MatchingGame) -> None:
    with pytest.raises(GameStateError):
        game.next_level()


def test_teardown_cancels_pending_tasks(game: MatchingGame) -> None:
    for card_id in game.left_ids:
        drag(game, card_id, card_id, now=0)
    game.teardown()

    assert game.run_due(10_000) == []
    assert not game.show_level_modal
    assert game.confetti_seed is None


def test_confetti_only_after_it_fired(game: MatchingGame) -> None:
    assert game.confetti() is None
    for card_id in game.left_ids:
        drag(game, card_id, card_id, now=0)
    game.run_due(100)

    burst = game.confetti(frame=10)
    assert burst is not None
    assert burst.frame == 10
    assert len(burst.particles) == 150


def test_start_resets_score_and_level(game: MatchingGame) -> None:
    for card_id in game.left_ids:
        drag(game, card_id, card_id)
    game.next_level()
    game.start()
    assert game.level == 1
    assert game.score == 0
    assert game.used_ids == set(game.left_ids)


# --- LAYOUT ---
def test_layout_regions_do_not_overlap() -> None:
    layout = BoardLayout()
    left = layout.region(Side.LEFT, 0)
    right = layout.region(Side.RIGHT, 0)
    below = layout.region(Side.LEFT, 1)

    assert not left.contains(right.center)
    assert not left.contains(below.center)
    assert left.contains(left.center)


def test_hit_test(game: MatchingGame) -> None:
    assert game.hit_test(game.layout.region(Side.RIGHT, 3).center) == (
        Side.RIGHT,
        game.right_ids[3],
    )
    assert game.hit_test(Point(-10, -10)) is None


# --- MODEL CONVERSION ---
def test_model_round_trip_keeps_state(game: MatchingGame) -> None:
    card_id = game.left_ids[0]
    drag(game, card_id, card_id)
    game.begin_drag(game.left_ids[1])
    game.update_drag(Point(10, 20))

    restored = MatchingGame.from_model(game.to_model())
    assert restored.to_model() == game.to_model()
    assert restored.dragging
    assert restored.line == game.line
