"""Chains and islands: how placed pieces connect on a board."""

from __future__ import annotations

from collections import deque

from bananaships.game.core.board import BoardState
from bananaships.game.core.models import Coord, Direction, Piece, Tile
from bananaships.game.core.shapes import piece_cells

# Diagonals are not a legal game direction.
CHAIN_AXES: tuple[Direction, ...] = (Direction.RIGHT, Direction.DOWN)
_NEIGHBOURS: tuple[Direction, ...] = (Direction.RIGHT, Direction.LEFT, Direction.UP, Direction.DOWN)


def trace_chain(board: BoardState, coord: Coord, direction: Direction) -> list[Coord] | None:
    """Occupied cells after ``coord`` along ``direction``, up to the first gap.

    Returns ``None`` when ``coord`` itself is empty, and ``[]`` when it is
    occupied but has no neighbour that way.
    """
    if board.piece_id_at(coord) is None:
        return None
    cells: list[Coord] = []
    current = coord.step(direction)
    while board.piece_id_at(current) is not None:
        cells.append(current)
        current = current.step(direction)
    return cells


def get_tile_chains(board: BoardState, coord: Coord) -> list[list[Piece]]:
    """Runs of two or more pieces through ``coord``, one per axis, in reading order."""
    chains: list[list[Piece]] = []
    for direction in CHAIN_AXES:
        tail = trace_chain(board, coord, direction)
        if tail is None:
            continue
        head = trace_chain(board, coord, direction.reverse) or []
        if not head and not tail:
            continue
        cells = [*reversed(head), coord, *tail]
        chains.append([board.pieces[board.piece_id_at(cell)] for cell in cells])
    return chains


def chain_text(chain: list[Piece]) -> str:
    """Letters along a chain; wildcards render as ``?``."""
    return "".join(piece.letter.value for piece in chain if isinstance(piece, Tile))


def get_islands(board: BoardState) -> list[list[int]]:
    """Group placed pieces into 4-connected components, each sorted by id.

    Islands are ordered by their smallest piece id.
    """
    seen: set[int] = set()
    islands: list[list[int]] = []
    for piece in board.placed_pieces():
        if piece.id in seen:
            continue
        seen.add(piece.id)
        island: list[int] = []
        queue: deque[int] = deque([piece.id])
        while queue:
            current = queue.popleft()
            island.append(current)
            for cell in piece_cells(board.pieces[current]):
                for direction in _NEIGHBOURS:
                    neighbour = board.piece_id_at(cell.step(direction))
                    if neighbour is None or neighbour in seen:
                        continue
                    seen.add(neighbour)
                    queue.append(neighbour)
        islands.append(sorted(island))
    return islands


def largest_island(islands: list[list[int]]) -> int:
    """Index of the biggest island; ties go to the earliest (smallest id)."""
    best = -1
    best_size = 0
    for idx, island in enumerate(islands):
        if len(island) > best_size:
            best, best_size = idx, len(island)
    return best
