from __future__ import annotations

from dataclasses import replace

import pytest

from bananaships.game.core.models import Coord, Direction, KnownCell, Letter, Player, Tile
from bananaships.game.core.state import ClientParams, hidden_tiles
from tests.bananaships.conftest import OWNER, make_board, make_local_state, make_params, row_letters


def test_coord_key_round_trip_and_step() -> None:
    coord = Coord(3, 7)
    assert coord.key == "3,7"
    assert Coord.from_key("3,7") == coord
    assert coord.step(Direction.DOWN, 2) == Coord(3, 5)
    assert coord.step(Direction.RIGHT) == Coord(4, 7)


def test_direction_from_vector() -> None:
    assert Direction.from_vector([0, 1]) is Direction.UP
    assert Direction.RIGHT.reverse is Direction.LEFT
    for junk in ([1, 1], [1], "x", None):
        with pytest.raises(ValueError):
            Direction.from_vector(junk)  # type: ignore[arg-type]


def test_letter_matching_is_case_insensitive() -> None:
    assert Letter.Q.matches("q")
    assert not Letter.Q.matches("u")
    assert Letter.WILDCARD.matches("z")


def test_tile_at_moves_and_lifts() -> None:
    tile = Tile(id=1, letter=Letter.A)
    placed = tile.at(Coord(2, 0))
    assert placed.placed and placed.anchor == Coord(2, 0)
    assert not placed.at(None).placed


def test_seeded_rng_prefers_supplied_source() -> None:
    params = make_params(OWNER, seed="abc")
    assert params.seeded_rng().random() == make_params(OWNER, seed="abc").seeded_rng().random()

    supplied = params.seeded_rng()
    explicit = ClientParams(user_id=OWNER, owner_id=OWNER, game_id="g", rng=supplied)
    assert explicit.seeded_rng() is supplied


def test_hidden_tiles_skips_known_cells() -> None:
    state = make_local_state(row_letters(0, "ABC"))
    assert hidden_tiles(state) == []

    known = {Coord(1, 0).key: KnownCell(guesser_id="bob", letter="B", revealed=True)}
    joined = replace(state, players={OWNER: Player(name="Alice", known_board=known)})

    assert [tile.id for tile in hidden_tiles(joined)] == [1, 3]
    assert joined.in_bounds(Coord(3, 3))
    assert not joined.in_bounds(Coord(4, 0))


def test_make_board_helper_places_letters() -> None:
    board = make_board(2, 3, row_letters(1, "HI"))
    assert board.pieces[2] == Tile(id=2, letter=Letter.I, x=1, y=1)
