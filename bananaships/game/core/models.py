"""Core domain models used by game logic."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, StrEnum

DEFAULT_ROWS = 8
DEFAULT_COLUMNS = 8
STARTING_LETTERS = 15


class Letter(StrEnum):
    """Tile faces. ``WILDCARD`` is a blank that stands in for any letter."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    H = "H"
    I = "I"  # noqa: E741
    J = "J"
    K = "K"
    L = "L"
    M = "M"
    N = "N"
    O = "O"  # noqa: E741
    P = "P"
    Q = "Q"
    R = "R"
    S = "S"
    T = "T"
    U = "U"
    V = "V"
    W = "W"
    X = "X"
    Y = "Y"
    Z = "Z"
    WILDCARD = "?"

    def matches(self, char: str) -> bool:
        """Return whether a guessed character is satisfied by this tile."""
        return self is Letter.WILDCARD or self.value == char.upper()


class Direction(Enum):
    """Unit steps on the board. ``y`` grows upward, row 0 is the floor."""

    RIGHT = (1, 0)
    LEFT = (-1, 0)
    UP = (0, 1)
    DOWN = (0, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def reverse(self) -> Direction:
        return Direction((-self.dx, -self.dy))

    @classmethod
    def from_vector(cls, vector: tuple[int, int] | list[int]) -> Direction:
        """Parse a ``(dx, dy)`` pair, raising ``ValueError`` for diagonals and junk."""
        try:
            return cls((int(vector[0]), int(vector[1])))
        except (IndexError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid direction: {vector!r}") from exc


# Words are read left-to-right and top-to-bottom.
WORD_DIRECTIONS: tuple[Direction, ...] = (Direction.RIGHT, Direction.DOWN)


@dataclass(frozen=True, slots=True, order=True)
class Coord:
    """Board coordinate: ``x`` is the column, ``y`` the row counted from the floor."""

    x: int
    y: int

    @property
    def key(self) -> str:
        """Known-board key, ``"x,y"``."""
        return f"{self.x},{self.y}"

    def step(self, direction: Direction, count: int = 1) -> Coord:
        return Coord(self.x + direction.dx * count, self.y + direction.dy * count)

    @classmethod
    def from_key(cls, key: str) -> Coord:
        x, y = key.split(",")
        return cls(int(x), int(y))


@dataclass(frozen=True, slots=True)
class Tile:
    """Single-letter piece; ``x``/``y`` are unset while it sits in a tray."""

    id: int
    letter: Letter
    x: int | None = None
    y: int | None = None

    @property
    def placed(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def anchor(self) -> Coord | None:
        if self.x is None or self.y is None:
            return None
        return Coord(self.x, self.y)

    def at(self, coord: Coord | None) -> Tile:
        if coord is None:
            return replace(self, x=None, y=None)
        return replace(self, x=coord.x, y=coord.y)


@dataclass(frozen=True, slots=True)
class Tetromino:
    """Rigid multi-cell piece described by a text bitmap (top row first)."""

    id: int
    shape: tuple[str, ...]
    rotation: int = 0
    x: int | None = None
    y: int | None = None

    @property
    def placed(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def anchor(self) -> Coord | None:
        if self.x is None or self.y is None:
            return None
        return Coord(self.x, self.y)

    def at(self, coord: Coord | None) -> Tetromino:
        if coord is None:
            return replace(self, x=None, y=None)
        return replace(self, x=coord.x, y=coord.y)


Piece = Tile | Tetromino


@dataclass(frozen=True, slots=True)
class KnownCell:
    """What has been disclosed about one cell of a player's board.

    ``revealed`` distinguishes a pending guess (no answer yet) from an answered
    one; an answered cell with ``letter=None`` was empty.
    """

    guesser_id: str | None = None
    letter: str | None = None
    revealed: bool = False


@dataclass(frozen=True, slots=True)
class Player:
    """Joined player. ``known_board`` only grows during the guessing phase."""

    name: str = "unnamed player"
    known_board: dict[str, KnownCell] = field(default_factory=dict)
    remaining: int | None = None


class PhaseName(StrEnum):
    """Game phase tags, in the only order they may occur."""

    PREGAME = "pregame"
    BANANAGRAMS = "bananagrams"
    BATTLESHIP = "battleship"


@dataclass(frozen=True, slots=True)
class PregamePhase:
    name: PhaseName = PhaseName.PREGAME


@dataclass(frozen=True, slots=True)
class BananagramsPhase:
    started_at: int
    pool_drained_at: int | None = None
    name: PhaseName = PhaseName.BANANAGRAMS


@dataclass(frozen=True, slots=True)
class BattleshipPhase:
    turn_player_id: str | None
    waiting_for_response: bool = False
    completed_at: int | None = None
    name: PhaseName = PhaseName.BATTLESHIP

    @property
    def complete(self) -> bool:
        return self.completed_at is not None


GamePhase = PregamePhase | BananagramsPhase | BattleshipPhase


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Owner-tunable game configuration shared by every client."""

    seed: str = ""
    min_players: int = 2
    starting_hand: int = STARTING_LETTERS
    rows: int = DEFAULT_ROWS
    columns: int = DEFAULT_COLUMNS
