"""Application service-layer helpers."""

from bananaships.game.app.services.event_sequencer import EventSequencer
from bananaships.game.app.services.game_client import DropTarget, GameClient, RejectedEvent, can_draw
from bananaships.game.app.services.replay import ReplayResult, fold_events, read_event_log

__all__ = [
    "DropTarget",
    "EventSequencer",
    "GameClient",
    "RejectedEvent",
    "ReplayResult",
    "can_draw",
    "fold_events",
    "read_event_log",
]
