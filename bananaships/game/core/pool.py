"""Letter pool sizing and seeded draws."""

from __future__ import annotations

import math
import random

from bananaships.game.core.models import Letter

# Scrabble distribution, 100 tiles including two blanks.
LETTER_COUNTS: dict[Letter, int] = {
    Letter.A: 9,
    Letter.B: 2,
    Letter.C: 2,
    Letter.D: 4,
    Letter.E: 12,
    Letter.F: 2,
    Letter.G: 3,
    Letter.H: 2,
    Letter.I: 9,
    Letter.J: 1,
    Letter.K: 1,
    Letter.L: 4,
    Letter.M: 2,
    Letter.N: 6,
    Letter.O: 8,
    Letter.P: 2,
    Letter.Q: 1,
    Letter.R: 6,
    Letter.S: 4,
    Letter.T: 6,
    Letter.U: 4,
    Letter.V: 2,
    Letter.W: 2,
    Letter.X: 1,
    Letter.Y: 2,
    Letter.Z: 1,
    Letter.WILDCARD: 2,
}

# A 15x15 Scrabble board is played with about 1.75 tiles per cell in circulation.
SCRABBLE_TILES = 15 * 15 * 1.75

PER_CELL_LETTER_SHARE: dict[Letter, float] = {
    letter: count / SCRABBLE_TILES for letter, count in LETTER_COUNTS.items()
}


def get_letter_counts(player_count: int, width: int, height: int) -> dict[Letter, int]:
    """Scale the distribution to the players' combined board area.

    Every letter's share is rounded up, then wildcards pad the total to a
    multiple of ``player_count`` so hands can be dealt evenly.
    """
    if player_count < 1:
        raise ValueError("At least one player is required to size the pool.")
    cells = player_count * width * height
    counts = {letter: math.ceil(share * cells) for letter, share in PER_CELL_LETTER_SHARE.items()}
    shortfall = -sum(counts.values()) % player_count
    counts[Letter.WILDCARD] += shortfall
    return counts


def make_pool(counts: dict[Letter, int]) -> tuple[Letter, ...]:
    """Flatten per-letter counts into a token tuple (order is irrelevant)."""
    return tuple(letter for letter, count in counts.items() for _ in range(count))


def draw_token(pool: tuple[Letter, ...], rng: random.Random) -> tuple[Letter, tuple[Letter, ...]]:
    """Remove one uniformly chosen token; return it with the smaller pool."""
    if not pool:
        raise ValueError("Cannot draw from an empty pool.")
    idx = rng.randrange(len(pool))
    return pool[idx], pool[:idx] + pool[idx + 1 :]


def fork_rng(rng: random.Random) -> random.Random:
    """Independent copy of ``rng`` continuing from the same point."""
    forked = random.Random()
    forked.setstate(rng.getstate())
    return forked
