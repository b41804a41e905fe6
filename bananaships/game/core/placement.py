"""Local drag-and-drop piece moves between tray and board."""

from __future__ import annotations

from dataclasses import replace

from bananaships.game.core.board import can_place
from bananaships.game.core.models import Coord
from bananaships.game.core.state import SharedGameState


def swap_piece(state: SharedGameState, destination: Coord, piece_id: int) -> SharedGameState:
    """Move a piece to ``destination``, swapping with whatever sits there.

    A placed mover trades places with the occupant. A mover coming from the
    tray never displaces anything: it needs a vacant destination and simply
    leaves the tray. Illegal moves return ``state`` unchanged.
    """
    piece = state.board.pieces.get(piece_id)
    if piece is None:
        return state
    previous = piece.anchor
    if previous == destination:
        return state
    occupant_id = state.board.piece_id_at(destination)
    if occupant_id == piece_id:
        occupant_id = None

    builder = state.board.edit()
    if occupant_id is not None:
        if previous is None:
            return state
        builder.vacate(occupant_id)
    if not can_place(builder, piece, destination, ignore_id=piece_id):
        return state
    builder.set_piece_coord(piece_id, destination)

    if occupant_id is not None:
        occupant = state.board.pieces[occupant_id]
        if not can_place(builder, occupant, previous):
            return state
        builder.set_piece_coord(occupant_id, previous)

    tray = tuple(pid for pid in state.tray if pid != piece_id)
    return replace(state, board=builder.build(), tray=tray)


def return_to_tray(state: SharedGameState, piece_id: int) -> SharedGameState:
    """Lift a placed piece off the board back into the tray."""
    piece = state.board.pieces.get(piece_id)
    if piece is None or not piece.placed:
        return state
    builder = state.board.edit()
    builder.set_piece_coord(piece_id, None)
    return replace(state, board=builder.build(), tray=(*state.tray, piece_id))
