"""Application entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from bananaships.game.app.services.replay import fold_events, read_event_log
from bananaships.game.core.state import ClientParams
from bananaships.game.infra.config import GameSettings, load_default_env_files
from bananaships.game.infra.logging import setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bananaships", description="Bananaships game log tools.")
    commands = parser.add_subparsers(dest="command", required=True)

    replay = commands.add_parser("replay", help="Fold a JSON-lines event log and summarize the result.")
    replay.add_argument("log", type=Path, help="Event log, one event object per line")
    replay.add_argument("--viewer", required=True, help="Player id whose view is reconstructed")
    replay.add_argument("--owner", required=True, help="Game owner id")
    replay.add_argument("--game-id", default="replay", help="Game id")
    replay.add_argument("--seed", default=None, help="Shared seed (defaults to BANANASHIPS_SEED)")
    return parser


def run_replay(args: argparse.Namespace, settings: GameSettings) -> int:
    try:
        events = read_event_log(args.log)
    except (OSError, ValueError) as exc:
        logger.error("replay_load_failed path=%s error=%s", args.log, exc)
        return 2

    params = ClientParams(
        user_id=args.viewer,
        owner_id=args.owner,
        game_id=args.game_id,
        config=settings.game_config(seed=args.seed),
    )
    result = fold_events(events, params, stale_after_ms=settings.stale_event_ms)
    state = result.state
    if state is None:
        logger.warning("replay_no_game events=%s rejected=%s", len(events), len(result.rejected))
        return 1

    logger.info(
        "replay_summary game=%s phase=%s players=%s pool=%s tray=%s applied=%s rejected=%s skipped=%s",
        state.game_id,
        state.phase_name.value,
        len(state.players),
        len(state.pool),
        len(state.tray),
        result.applied,
        len(result.rejected),
        result.skipped,
    )
    for player_id, player in state.players.items():
        logger.info(
            "replay_player id=%s name=%s remaining=%s known_cells=%s",
            player_id,
            player.name,
            player.remaining,
            len(player.known_board),
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Bananaships command line."""
    load_default_env_files()
    setup_logging()
    args = _build_parser().parse_args(argv)
    settings = GameSettings.from_env()
    if args.command == "replay":
        return run_replay(args, settings)
    return 2


if __name__ == "__main__":
    sys.exit(main())
