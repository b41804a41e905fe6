from __future__ import annotations

from bananaships.game.core.models import Coord, Direction, KnownCell, Letter
from bananaships.game.core.words import fit_word, letter_at, word_matches
from tests.bananaships.conftest import make_board, row_letters


def test_word_matches_spelled_word() -> None:
    board = make_board(4, 6, row_letters(0, "REED", left=1))
    assert word_matches(board, "reed", Coord(1, 0), Direction.RIGHT)
    assert not word_matches(board, "reef", Coord(1, 0), Direction.RIGHT)
    assert not word_matches(board, "reeds", Coord(1, 0), Direction.RIGHT)
    assert not word_matches(board, "", Coord(1, 0), Direction.RIGHT)


def test_word_matches_reads_downward() -> None:
    board = make_board(4, 3, {Coord(0, 3): "C", Coord(0, 2): "A", Coord(0, 1): "T"})
    assert word_matches(board, "CAT", Coord(0, 3), Direction.DOWN)


def test_wildcard_tile_matches_any_guess() -> None:
    board = make_board(2, 3, row_letters(0, "C?T"))
    assert letter_at(board, Coord(1, 0)) is Letter.WILDCARD
    assert word_matches(board, "cat", Coord(0, 0), Direction.RIGHT)
    assert word_matches(board, "cut", Coord(0, 0), Direction.RIGHT)


def test_fit_word_treats_unknown_cells_as_free() -> None:
    known = {
        Coord(2, 0).key: KnownCell(letter="R", revealed=True),
        Coord(3, 0).key: KnownCell(letter="E", revealed=True),
        Coord(4, 0).key: KnownCell(letter="E", revealed=True),
        Coord(5, 0).key: KnownCell(letter="N", revealed=True),
    }
    report = fit_word(known, Coord(1, 0), "green", rows=4, columns=8)

    across = report[Direction.RIGHT]
    assert across.word == "GREEN"
    assert across.complete
    assert across.cells[0] == (Coord(1, 0), "G")


def test_fit_word_stops_at_revealed_mismatch_and_edges() -> None:
    known = {
        Coord(2, 0).key: KnownCell(letter="X", revealed=True),
        Coord(0, 0).key: KnownCell(guesser_id="bob"),
    }
    report = fit_word(known, Coord(0, 0), "abc", rows=2, columns=8)

    assert report[Direction.RIGHT].word == "AB"
    assert not report[Direction.RIGHT].complete
    assert report[Direction.DOWN].word == "A"


def test_fit_word_revealed_miss_blocks_the_word() -> None:
    known = {Coord(0, 0).key: KnownCell(guesser_id="bob", letter=None, revealed=True)}
    report = fit_word(known, Coord(0, 0), "at", rows=4, columns=4)
    assert report[Direction.RIGHT].word == ""
    assert report[Direction.RIGHT].cells == ()
