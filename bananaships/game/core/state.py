"""Shared game state aggregate and the per-client parameters folded with it."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from bananaships.game.core.board import BoardState
from bananaships.game.core.models import (
    Coord,
    GameConfig,
    GamePhase,
    Letter,
    PhaseName,
    Player,
    PregamePhase,
    Tile,
)


@dataclass(frozen=True, slots=True)
class ClientParams:
    """Values the log collaborator supplies with every event, never stored by it."""

    user_id: str
    owner_id: str
    game_id: str
    config: GameConfig = field(default_factory=GameConfig)
    rng: random.Random | None = None

    def seeded_rng(self) -> random.Random:
        """The supplied random source, or one seeded from the config."""
        if self.rng is not None:
            return self.rng
        return random.Random(self.config.seed)


@dataclass(frozen=True, slots=True)
class SharedGameState:
    """Authoritative state folded from the event log.

    Fields from ``my_id`` down are local to one client; everything above is
    identical on every client that folded the same events.
    """

    name: str
    game_id: str
    owner_id: str
    players: dict[str, Player]
    phase: GamePhase
    pool: tuple[Letter, ...]
    rows: int
    columns: int
    config: GameConfig
    rng: random.Random = field(compare=False, repr=False)

    my_id: str
    tray: tuple[int, ...]
    board: BoardState
    next_id: int = 1

    @classmethod
    def create(
        cls,
        *,
        name: str,
        game_id: str,
        owner_id: str,
        rows: int,
        columns: int,
        config: GameConfig,
        rng: random.Random,
        my_id: str,
    ) -> SharedGameState:
        return cls(
            name=name,
            game_id=game_id,
            owner_id=owner_id,
            players={},
            phase=PregamePhase(),
            pool=(),
            rows=rows,
            columns=columns,
            config=config,
            rng=rng,
            my_id=my_id,
            tray=(),
            board=BoardState.empty(rows, columns),
        )

    @property
    def phase_name(self) -> PhaseName:
        return self.phase.name

    def in_bounds(self, coord: Coord) -> bool:
        return 0 <= coord.x < self.columns and 0 <= coord.y < self.rows


def hidden_tiles(state: SharedGameState) -> list[Tile]:
    """Placed local tiles whose cells nobody has been told about yet."""
    me = state.players.get(state.my_id)
    if me is None:
        return []
    return [
        piece
        for piece in state.board.placed_pieces()
        if isinstance(piece, Tile) and piece.anchor is not None and piece.anchor.key not in me.known_board
    ]
