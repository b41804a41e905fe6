from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from dataclasses import replace

import pytest

from bananaships.game.core.board import BoardState
from bananaships.game.core.events import EventMessage, EventPayload
from bananaships.game.core.models import Coord, GameConfig, Letter, Piece, Tile
from bananaships.game.core.reducer import ActionResult, handle_message
from bananaships.game.core.state import ClientParams, SharedGameState

OWNER = "alice"
GUEST = "bob"


def make_params(user_id: str = OWNER, *, owner_id: str = OWNER, seed: str = "seed", **config: int) -> ClientParams:
    return ClientParams(
        user_id=user_id,
        owner_id=owner_id,
        game_id="game-1",
        config=GameConfig(seed=seed, **config),
    )


def make_event(seq: int | None, sender: str, payload: EventPayload, *, timestamp: int = 1_000) -> EventMessage:
    return EventMessage(sequence_id=seq, sender_id=sender, timestamp=timestamp, payload=payload)


def fold(
    payloads: Iterable[tuple[str, EventPayload]],
    params: ClientParams,
    state: SharedGameState | None = None,
) -> SharedGameState:
    """Fold ``(sender, payload)`` pairs, failing the test on any rejection."""
    seq = 0
    for sender, payload in payloads:
        seq += 1
        result = handle_message(state, make_event(seq, sender, payload, timestamp=1_000 + seq), params)
        assert result.error is None, result.error
        state = result.state
    assert state is not None
    return state


def apply(state: SharedGameState | None, sender: str, payload: EventPayload, params: ClientParams) -> ActionResult:
    return handle_message(state, make_event(99, sender, payload, timestamp=5_000), params)


def make_board(rows: int, columns: int, letters: Mapping[Coord, str], extra: Iterable[Piece] = ()) -> BoardState:
    """Board with one tile per entry of ``letters``; ids follow insertion order from 1."""
    builder = BoardState.empty(rows, columns).edit()
    for piece_id, (coord, letter) in enumerate(letters.items(), start=1):
        builder.add_piece(Tile(id=piece_id, letter=Letter(letter), x=coord.x, y=coord.y))
    for piece in extra:
        builder.add_piece(piece)
    return builder.build()


def column_letters(x: int, letters: str, *, bottom: int = 0) -> dict[Coord, str]:
    """Letters stacked upward from ``bottom`` in column ``x``."""
    return {Coord(x, bottom + idx): letter for idx, letter in enumerate(letters)}


def row_letters(y: int, letters: str, *, left: int = 0) -> dict[Coord, str]:
    return {Coord(left + idx, y): letter for idx, letter in enumerate(letters)}


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1337)


@pytest.fixture
def owner_params() -> ClientParams:
    return make_params(OWNER)


@pytest.fixture
def guest_params() -> ClientParams:
    return make_params(GUEST)


@pytest.fixture
def nereii_board() -> BoardState:
    """4 wide, 10 tall; column 1 holds I, I, E, R, E, N from the floor up."""
    return make_board(10, 4, column_letters(1, "IIEREN"))


def make_local_state(
    letters: Mapping[Coord, str],
    tray_letters: str = "",
    *,
    rows: int = 4,
    columns: int = 4,
) -> SharedGameState:
    """Pregame state for ``OWNER`` whose board holds ``letters``; tray tiles take the following ids."""
    base = SharedGameState.create(
        name="test",
        game_id="game-1",
        owner_id=OWNER,
        rows=rows,
        columns=columns,
        config=GameConfig(),
        rng=random.Random(0),
        my_id=OWNER,
    )
    first_tray_id = len(letters) + 1
    tray = [Tile(id=first_tray_id + idx, letter=Letter(char)) for idx, char in enumerate(tray_letters)]
    board = make_board(rows, columns, letters).with_pieces(tray)
    return replace(base, board=board, tray=tuple(tile.id for tile in tray), next_id=first_tray_id + len(tray))
