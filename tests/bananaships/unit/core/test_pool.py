from __future__ import annotations

import random
from collections import Counter

import pytest

from bananaships.game.core.models import Letter
from bananaships.game.core.pool import draw_token, fork_rng, get_letter_counts, make_pool


@pytest.mark.parametrize(
    ("players", "width", "height"),
    [(1, 8, 8), (2, 8, 8), (3, 8, 8), (4, 6, 9), (5, 10, 10), (7, 3, 4)],
)
def test_letter_counts_total_divides_evenly(players: int, width: int, height: int) -> None:
    counts = get_letter_counts(players, width, height)
    assert sum(counts.values()) % players == 0
    assert all(count >= 1 for count in counts.values())


def test_letter_counts_grow_with_board_area() -> None:
    small = sum(get_letter_counts(2, 4, 4).values())
    large = sum(get_letter_counts(2, 12, 12).values())
    assert large > small


def test_letter_counts_reject_zero_players() -> None:
    with pytest.raises(ValueError):
        get_letter_counts(0, 8, 8)


def test_make_pool_expands_counts() -> None:
    pool = make_pool({Letter.A: 2, Letter.WILDCARD: 1, Letter.Z: 0})
    assert Counter(pool) == Counter({Letter.A: 2, Letter.WILDCARD: 1})


def test_draw_token_removes_exactly_one() -> None:
    pool = make_pool({Letter.A: 3, Letter.B: 2})
    letter, rest = draw_token(pool, random.Random(4))
    assert len(rest) == len(pool) - 1
    assert Counter(rest) + Counter([letter]) == Counter(pool)


def test_draw_token_rejects_empty_pool() -> None:
    with pytest.raises(ValueError):
        draw_token((), random.Random(0))


def test_fork_rng_leaves_source_untouched(seeded_rng: random.Random) -> None:
    forked = fork_rng(seeded_rng)
    drawn = [forked.random() for _ in range(3)]
    assert [seeded_rng.random() for _ in range(3)] == drawn
