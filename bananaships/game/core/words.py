"""Word lookups against real boards and against partially known boards."""

from __future__ import annotations

from dataclasses import dataclass

from bananaships.game.core.board import BoardState
from bananaships.game.core.models import WORD_DIRECTIONS, Coord, Direction, KnownCell, Letter, Tile


@dataclass(frozen=True, slots=True)
class WordFit:
    """Longest prefix of a guess that fits the known board in one direction."""

    guess: str
    word: str
    cells: tuple[tuple[Coord, str], ...]

    @property
    def complete(self) -> bool:
        return bool(self.guess) and len(self.word) == len(self.guess)


def letter_at(board: BoardState, coord: Coord) -> Letter | None:
    """Tile letter at ``coord``, ``None`` for empty cells and non-tile pieces."""
    piece = board.piece_at(coord)
    return piece.letter if isinstance(piece, Tile) else None


def word_matches(board: BoardState, word: str, coord: Coord, direction: Direction) -> bool:
    """Return whether ``word`` is spelled on the board from ``coord`` along ``direction``."""
    if not word:
        return False
    for idx, char in enumerate(word):
        letter = letter_at(board, coord.step(direction, idx))
        if letter is None or not letter.matches(char):
            return False
    return True


def _known_cell_accepts(known: KnownCell | None, char: str) -> bool:
    if known is None or not known.revealed:
        return True
    if known.letter is None:
        return False
    return known.letter == Letter.WILDCARD.value or known.letter.upper() == char.upper()


def fit_word(
    known_board: dict[str, KnownCell],
    coord: Coord,
    word: str,
    rows: int,
    columns: int,
) -> dict[Direction, WordFit]:
    """Preview how far ``word`` fits an opponent's known board in each direction.

    Unrevealed in-bounds cells are free matches; the walk stops at the first
    revealed mismatch, revealed empty cell, or board edge.
    """
    report: dict[Direction, WordFit] = {}
    for direction in WORD_DIRECTIONS:
        cells: list[tuple[Coord, str]] = []
        for idx, char in enumerate(word):
            cell = coord.step(direction, idx)
            if not (0 <= cell.x < columns and 0 <= cell.y < rows):
                break
            if not _known_cell_accepts(known_board.get(cell.key), char):
                break
            cells.append((cell, char.upper()))
        report[direction] = WordFit(
            guess=word.upper(),
            word="".join(char for _, char in cells),
            cells=tuple(cells),
        )
    return report
