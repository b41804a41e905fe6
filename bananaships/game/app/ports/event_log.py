"""Port for the shared, append-only event log a client folds its state from."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from bananaships.game.core.events import EventMessage, EventPayload
from bananaships.game.core.models import GameConfig
from bananaships.game.core.state import SharedGameState

EventHandler = Callable[[EventMessage], None]


@dataclass(frozen=True, slots=True)
class Checkpoint:
    """Snapshot of folded state up to and including event ``last_event``."""

    timestamp: int
    last_event: int
    state: SharedGameState


class EventLog(Protocol):
    """One client's connection to a game's event log.

    The log assigns increasing sequence ids and timestamps to public events.
    Private events go to a single recipient's inbox and carry no sequence id.
    """

    @property
    def user_id(self) -> str: ...

    @property
    def owner_id(self) -> str: ...

    @property
    def game_id(self) -> str: ...

    @property
    def config(self) -> GameConfig: ...

    def last_sequence_id(self) -> int:
        """Id of the newest public event, 0 when the log is empty."""

    def send(
        self,
        payload: EventPayload,
        reply_to_id: int | None = None,
        recipient: str | None = None,
    ) -> int | None:
        """Append ``payload`` publicly, or deliver it privately to ``recipient``.

        Returns the assigned sequence id for public events.
        """

    def listen(self, on_event: EventHandler, on_private: EventHandler) -> None:
        """Deliver the existing history, then every new event, to the handlers."""

    def fetch_checkpoint(self) -> Checkpoint | None:
        """Latest checkpoint, if one has been stored."""
