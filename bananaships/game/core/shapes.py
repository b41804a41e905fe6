"""Tetromino shapes and piece footprint math."""

from __future__ import annotations

from bananaships.game.core.models import Coord, Piece, Tetromino, Tile

TETROMINO_SHAPES: dict[str, tuple[str, ...]] = {
    "I": ("****",),
    "O": ("**", "**"),
    "T": ("***", " * "),
    "S": (" **", "** "),
    "Z": ("** ", " **"),
    "J": ("*  ", "***"),
    "L": ("  *", "***"),
}

# Integer 90° rotation matrices, (cos, sin) per quarter turn.
_QUARTER_TURNS: tuple[tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))


def shape_offsets(shape: tuple[str, ...], rotation: int = 0) -> list[tuple[int, int]]:
    """Relative ``(dx, dy)`` of every filled cell, anchored at the bottom-left.

    Shape rows are written top row first, so the last row sits on the anchor row.
    """
    cos, sin = _QUARTER_TURNS[rotation % 4]
    y_max = len(shape) - 1
    offsets: list[tuple[int, int]] = []
    for row_idx, row in enumerate(shape):
        for col_idx, cell in enumerate(row):
            if cell == " ":
                continue
            dx, dy = col_idx, y_max - row_idx
            offsets.append((dx * cos - dy * sin, dx * sin + dy * cos))
    return offsets


def cells_at(piece: Piece, anchor: Coord) -> list[Coord]:
    """Cells the piece would occupy with its anchor on ``anchor``."""
    if isinstance(piece, Tile):
        return [anchor]
    return [Coord(anchor.x + dx, anchor.y + dy) for dx, dy in shape_offsets(piece.shape, piece.rotation)]


def piece_cells(piece: Piece) -> list[Coord]:
    """Cells currently occupied by a placed piece, empty for tray pieces."""
    anchor = piece.anchor
    if anchor is None:
        return []
    return cells_at(piece, anchor)


def make_tetromino(piece_id: int, name: str, rotation: int = 0) -> Tetromino:
    """Build an unplaced tetromino from one of the named shapes."""
    try:
        shape = TETROMINO_SHAPES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown tetromino shape: {name}") from exc
    return Tetromino(id=piece_id, shape=shape, rotation=rotation % 4)
