"""Support checks and the per-tick gravity drop."""

from __future__ import annotations

from bananaships.game.core.board import BoardState
from bananaships.game.core.models import Coord, Direction, Piece
from bananaships.game.core.shapes import piece_cells


def is_supported(board: BoardState, piece_id: int) -> bool:
    """Return whether a piece rests, directly or through others, on row 0.

    A multi-cell piece is a rigid body: one supported contact below any of its
    cells is enough. Tray pieces are trivially supported.
    """
    return _supported(board, piece_id, frozenset())


def _supported(board: BoardState, piece_id: int, visiting: frozenset[int]) -> bool:
    piece = board.pieces[piece_id]
    if not piece.placed:
        return True
    visiting = visiting | {piece_id}
    for cell in piece_cells(piece):
        if cell.y == 0:
            return True
        below = board.piece_id_at(cell.step(Direction.DOWN))
        if below is None or below in visiting:
            continue
        if _supported(board, below, visiting):
            return True
    return False


def find_unsupported(board: BoardState) -> list[Piece]:
    """Placed pieces that would fall, in id order."""
    return [piece for piece in board.placed_pieces() if not is_supported(board, piece.id)]


def gravity_tick(board: BoardState) -> BoardState:
    """Drop every unsupported piece one row at once; return ``board`` if none fall."""
    falling = find_unsupported(board)
    if not falling:
        return board
    builder = board.edit()
    for piece in falling:
        builder.vacate(piece.id)
    for piece in falling:
        anchor = piece.anchor
        if anchor is None:
            continue
        builder.set_piece_coord(piece.id, Coord(anchor.x, anchor.y - 1))
    return builder.build()
