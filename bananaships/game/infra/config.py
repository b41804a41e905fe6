"""Application configuration and env loading."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from bananaships.game.app.services.event_sequencer import STALE_EVENT_MS
from bananaships.game.core.models import DEFAULT_COLUMNS, DEFAULT_ROWS, STARTING_LETTERS, GameConfig


def load_env_file(path: str = ".env", *, override_existing: bool = True) -> None:
    """Load KEY=VALUE pairs from an env file into process environment.

    By default, values from the env file overwrite existing environment variables.
    """
    env_path = _resolve_env_path(path)
    if not env_path.exists():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]

        if override_existing or key not in os.environ:
            os.environ[key] = value


def load_default_env_files(*, override_existing: bool = True, paths: Sequence[str] | None = None) -> None:
    """Load env files with optional local overrides.

    Later files win. Default order: ``.env`` then ``.env.local``.
    """
    to_load = tuple(paths) if paths is not None else (".env", ".env.local")
    for path in to_load:
        load_env_file(path, override_existing=override_existing)


def _resolve_env_path(path: str) -> Path:
    """Resolve env path from cwd, then project root."""
    candidate = Path(path)
    if candidate.exists():
        return candidate
    # Fallback for IDE run configs with different working directory.
    project_root = Path(__file__).resolve().parents[3]
    return project_root / path


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _int(
    name: str,
    default: int,
    *,
    minimum: int | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    raw = _raw(name, env=env)
    if raw is None:
        value = int(default)
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = int(default)
    if minimum is None:
        return value
    return max(int(minimum), value)


def _text(name: str, default: str, *, env: Mapping[str, str] | None = None) -> str:
    raw = _raw(name, env=env)
    if raw is None:
        return str(default)
    value = raw.strip()
    return value if value else str(default)


@dataclass(frozen=True, slots=True)
class GameSettings:
    """Game defaults taken from the environment."""

    min_players: int = 2
    starting_hand: int = STARTING_LETTERS
    rows: int = DEFAULT_ROWS
    columns: int = DEFAULT_COLUMNS
    stale_event_ms: int = STALE_EVENT_MS
    seed: str = ""

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> GameSettings:
        return cls(
            min_players=_int("BANANASHIPS_MIN_PLAYERS", 2, minimum=1, env=env),
            starting_hand=_int("BANANASHIPS_STARTING_HAND", STARTING_LETTERS, minimum=1, env=env),
            rows=_int("BANANASHIPS_ROWS", DEFAULT_ROWS, minimum=1, env=env),
            columns=_int("BANANASHIPS_COLUMNS", DEFAULT_COLUMNS, minimum=1, env=env),
            stale_event_ms=_int("BANANASHIPS_STALE_EVENT_MS", STALE_EVENT_MS, minimum=0, env=env),
            seed=_text("BANANASHIPS_SEED", "", env=env),
        )

    def game_config(self, seed: str | None = None) -> GameConfig:
        """Core configuration shared by every client of one game."""
        return GameConfig(
            seed=self.seed if seed is None else seed,
            min_players=self.min_players,
            starting_hand=self.starting_hand,
            rows=self.rows,
            columns=self.columns,
        )
