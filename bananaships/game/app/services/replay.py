"""Read-only folding of a recorded event log."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from bananaships.game.app.services.event_sequencer import STALE_EVENT_MS, EventSequencer
from bananaships.game.core.errors import GameRuleError
from bananaships.game.core.events import EventMessage, event_from_dict
from bananaships.game.core.reducer import handle_message
from bananaships.game.core.state import ClientParams, SharedGameState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReplayResult:
    state: SharedGameState | None = None
    applied: int = 0
    rejected: list[tuple[EventMessage, GameRuleError]] = field(default_factory=list)
    skipped: int = 0


def read_event_log(path: Path) -> list[EventMessage]:
    """Parse a JSON-lines event log. Blank lines are ignored."""
    events: list[EventMessage] = []
    for lineno, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
        if not isinstance(data, dict):
            raise ValueError(f"{path}:{lineno}: event must be a JSON object")
        try:
            events.append(event_from_dict(data))
        except ValueError as exc:
            raise ValueError(f"{path}:{lineno}: {exc}") from exc
    return events


def fold_events(
    events: Iterable[EventMessage],
    params: ClientParams,
    *,
    stale_after_ms: int = STALE_EVENT_MS,
) -> ReplayResult:
    """Fold public events in sequence order as seen by ``params.user_id``.

    Replies the reducer asks for are not sent; a recorded log already holds them.
    """
    sequencer = EventSequencer(stale_after_ms=stale_after_ms)
    result = ReplayResult()
    for event in events:
        if event.private:
            ready = [event]
        else:
            ready = sequencer.offer(event)
        for item in ready:
            outcome = handle_message(result.state, item, params)
            if outcome.error is not None:
                logger.info(
                    "event_rejected seq=%s kind=%s sender=%s reason=%s",
                    item.sequence_id,
                    item.payload.kind.value,
                    item.sender_id,
                    outcome.error.message,
                )
                result.rejected.append((item, outcome.error))
                continue
            result.state = outcome.state
            result.applied += 1
    result.skipped = len(sequencer.skipped)
    if sequencer.pending_count:
        logger.warning("replay_gap pending=%s last_processed=%s", sequencer.pending_count, sequencer.last_processed)
    return result
