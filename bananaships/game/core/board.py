"""Board state representation and mutation helpers.

``BoardState`` is immutable: its numpy grid is flagged read-only and every
change goes through a ``BoardBuilder``, a scratch copy that callers edit in
place and then ``build()`` into a new state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from bananaships.game.core.models import Coord, Piece, Tile
from bananaships.game.core.shapes import cells_at, piece_cells, shape_offsets

EMPTY = 0


class GridView(Protocol):
    """Read surface shared by ``BoardState`` and ``BoardBuilder``."""

    rows: int
    columns: int

    @property
    def grid(self) -> np.ndarray: ...

    @property
    def pieces(self) -> Mapping[int, Piece]: ...


def _in_bounds(view: GridView, coord: Coord) -> bool:
    return 0 <= coord.x < view.columns and 0 <= coord.y < view.rows


def _piece_id_at(view: GridView, coord: Coord) -> int | None:
    if not _in_bounds(view, coord):
        return None
    value = int(view.grid[coord.y, coord.x])
    return None if value == EMPTY else value


@dataclass(frozen=True, slots=True, eq=False)
class BoardState:
    """Numpy-backed board plus the piece registry it indexes into.

    ``grid[y, x]`` holds the id of the piece covering that cell, 0 when empty.
    """

    rows: int
    columns: int
    grid: np.ndarray
    pieces: Mapping[int, Piece]

    def __post_init__(self) -> None:
        if self.grid.shape != (self.rows, self.columns):
            raise ValueError(
                f"Grid shape {self.grid.shape} does not match {self.rows}x{self.columns} board."
            )
        self.grid.flags.writeable = False

    @classmethod
    def empty(cls, rows: int, columns: int) -> BoardState:
        return cls(rows=rows, columns=columns, grid=np.zeros((rows, columns), dtype=np.int32), pieces={})

    def in_bounds(self, coord: Coord) -> bool:
        """Return whether the coordinate is in board bounds."""
        return _in_bounds(self, coord)

    def piece_id_at(self, coord: Coord) -> int | None:
        return _piece_id_at(self, coord)

    def piece_at(self, coord: Coord) -> Piece | None:
        piece_id = self.piece_id_at(coord)
        return None if piece_id is None else self.pieces[piece_id]

    def placed_pieces(self) -> list[Piece]:
        """Placed pieces in id order."""
        return [self.pieces[pid] for pid in sorted(self.pieces) if self.pieces[pid].placed]

    def with_pieces(self, pieces: Iterable[Piece]) -> BoardState:
        """Register unplaced pieces without touching the grid."""
        registry = dict(self.pieces)
        for piece in pieces:
            if piece.placed:
                raise ValueError(f"Piece {piece.id} is placed; use a BoardBuilder to place it.")
            registry[piece.id] = piece
        return BoardState(rows=self.rows, columns=self.columns, grid=self.grid, pieces=registry)

    def edit(self) -> BoardBuilder:
        """Return a scratch copy for in-place editing."""
        return BoardBuilder(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardState):
            return NotImplemented
        return (
            self.rows == other.rows
            and self.columns == other.columns
            and dict(self.pieces) == dict(other.pieces)
            and bool(np.array_equal(self.grid, other.grid))
        )


class BoardBuilder:
    """Mutable scratch board. Owns private copies of the grid and registry."""

    def __init__(self, board: BoardState) -> None:
        self.rows = board.rows
        self.columns = board.columns
        self._grid = np.array(board.grid, dtype=np.int32, copy=True)
        self._pieces: dict[int, Piece] = dict(board.pieces)

    @property
    def grid(self) -> np.ndarray:
        return self._grid

    @property
    def pieces(self) -> Mapping[int, Piece]:
        return self._pieces

    def in_bounds(self, coord: Coord) -> bool:
        return _in_bounds(self, coord)

    def piece_id_at(self, coord: Coord) -> int | None:
        return _piece_id_at(self, coord)

    def add_piece(self, piece: Piece) -> None:
        """Register a piece, writing its cells if it carries coordinates."""
        self._pieces[piece.id] = piece.at(None)
        if piece.placed:
            self.set_piece_coord(piece.id, piece.anchor)

    def vacate(self, piece_id: int) -> None:
        """Clear every grid cell still pointing at ``piece_id``."""
        self._grid[self._grid == piece_id] = EMPTY

    def set_piece_coord(self, piece_id: int, coord: Coord | None) -> Piece:
        """Move a registered piece to ``coord`` (``None`` returns it to the tray)."""
        piece = self._pieces[piece_id]
        self.vacate(piece_id)
        moved = piece.at(coord)
        if coord is not None:
            cells = cells_at(moved, coord)
            for cell in cells:
                if not self.in_bounds(cell):
                    raise ValueError(f"Piece {piece_id} would leave the board at {cell}.")
            for cell in cells:
                self._grid[cell.y, cell.x] = piece_id
        self._pieces[piece_id] = moved
        return moved

    def build(self) -> BoardState:
        return BoardState(
            rows=self.rows,
            columns=self.columns,
            grid=self._grid.copy(),
            pieces=dict(self._pieces),
        )


def can_place(board: GridView, piece: Piece, anchor: Coord, *, ignore_id: int | None = None) -> bool:
    """Return whether every cell of ``piece`` at ``anchor`` is on the board and vacant.

    Cells held by ``ignore_id`` count as vacant.
    """
    for cell in cells_at(piece, anchor):
        if not _in_bounds(board, cell):
            return False
        occupant = _piece_id_at(board, cell)
        if occupant is not None and occupant != ignore_id:
            return False
    return True


def find_landing(board: GridView, piece: Piece, column: int) -> int:
    """Drop ``piece`` from the top of ``column``; return its resting row or -1."""
    if isinstance(piece, Tile):
        top = board.rows - 1
    else:
        top = board.rows - 1 - max(dy for _, dy in shape_offsets(piece.shape, piece.rotation))
    if top < 0 or not can_place(board, piece, Coord(column, top)):
        return -1
    row = top
    while row > 0 and can_place(board, piece, Coord(column, row - 1)):
        row -= 1
    return row


def set_piece_coord(board: BoardState, piece: Piece, coord: Coord | None) -> BoardState:
    """Pure variant: return a new board with ``piece`` moved to ``coord``."""
    builder = board.edit()
    if piece.id not in builder.pieces:
        builder.add_piece(piece.at(None))
    builder.set_piece_coord(piece.id, coord)
    return builder.build()


def occupied_cells(board: GridView) -> list[Coord]:
    ys, xs = np.nonzero(board.grid)
    return sorted(Coord(int(x), int(y)) for x, y in zip(xs, ys))


def check_consistency(board: BoardState) -> None:
    """Raise ``ValueError`` if the grid and the piece registry disagree."""
    expected = np.zeros((board.rows, board.columns), dtype=np.int32)
    for piece in board.placed_pieces():
        for cell in piece_cells(piece):
            if not board.in_bounds(cell):
                raise ValueError(f"Piece {piece.id} hangs off the board at {cell}.")
            if expected[cell.y, cell.x] != EMPTY:
                raise ValueError(f"Pieces {expected[cell.y, cell.x]} and {piece.id} overlap at {cell}.")
            expected[cell.y, cell.x] = piece.id
    if not np.array_equal(expected, board.grid):
        raise ValueError("Board grid does not match the piece registry.")
