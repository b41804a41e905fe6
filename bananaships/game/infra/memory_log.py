"""In-process event log shared by any number of clients.

Deliveries are queued and drained first-in first-out, so a handler that sends
while it is being called never re-enters another handler.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Iterable

from bananaships.game.app.ports.event_log import Checkpoint, EventHandler
from bananaships.game.core.events import EventMessage, EventPayload
from bananaships.game.core.models import GameConfig

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryGameHub:
    """Ordered public history, per-user inboxes and the latest checkpoint of one game."""

    def __init__(
        self,
        *,
        game_id: str,
        owner_id: str,
        config: GameConfig | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.game_id = game_id
        self.owner_id = owner_id
        self.config = config or GameConfig()
        self._clock = clock or _now_ms
        self.events: list[EventMessage] = []
        self.inboxes: dict[str, list[EventMessage]] = {}
        self.checkpoint: Checkpoint | None = None
        self._listeners: list[tuple[str, EventHandler, EventHandler]] = []
        self._deliveries: deque[tuple[EventHandler, EventMessage]] = deque()
        self._delivering = False

    def connect(self, user_id: str) -> InMemoryEventLog:
        return InMemoryEventLog(self, user_id)

    def last_sequence_id(self) -> int:
        if not self.events:
            return 0
        return self.events[-1].sequence_id or 0

    def append(self, sender_id: str, payload: EventPayload, reply_to_id: int | None = None) -> int:
        seq = self.last_sequence_id() + 1
        self.publish(
            EventMessage(
                sequence_id=seq,
                sender_id=sender_id,
                timestamp=self._clock(),
                payload=payload,
                reply_to_id=reply_to_id,
            )
        )
        return seq

    def publish(self, event: EventMessage) -> None:
        """Add an already numbered event to the history and fan it out."""
        if event.sequence_id is None or event.sequence_id <= self.last_sequence_id():
            raise ValueError(f"Event id {event.sequence_id} does not extend the log.")
        self.events.append(event)
        logger.debug("log_append seq=%s kind=%s sender=%s", event.sequence_id, event.payload.kind.value, event.sender_id)
        for _user_id, on_event, _on_private in self._listeners:
            self._deliveries.append((on_event, event))
        self._drain()

    def deliver_private(
        self,
        sender_id: str,
        recipient: str,
        payload: EventPayload,
        reply_to_id: int | None = None,
    ) -> None:
        event = EventMessage(
            sequence_id=None,
            sender_id=sender_id,
            timestamp=self._clock(),
            payload=payload,
            reply_to_id=reply_to_id,
        )
        self.inboxes.setdefault(recipient, []).append(event)
        for user_id, _on_event, on_private in self._listeners:
            if user_id == recipient:
                self._deliveries.append((on_private, event))
        self._drain()

    def listen(self, user_id: str, on_event: EventHandler, on_private: EventHandler) -> None:
        self._listeners.append((user_id, on_event, on_private))
        for event in self.events:
            self._deliveries.append((on_event, event))
        for event in self.inboxes.get(user_id, ()):
            self._deliveries.append((on_private, event))
        self._drain()

    def store_checkpoint(self, checkpoint: Checkpoint) -> None:
        self.checkpoint = checkpoint

    def load(self, events: Iterable[EventMessage]) -> None:
        """Publish a recorded history in order."""
        for event in events:
            self.publish(event)

    def _drain(self) -> None:
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._deliveries:
                handler, event = self._deliveries.popleft()
                handler(event)
        finally:
            self._delivering = False


class InMemoryEventLog:
    """``EventLog`` connection for one user of an ``InMemoryGameHub``."""

    def __init__(self, hub: InMemoryGameHub, user_id: str) -> None:
        self._hub = hub
        self._user_id = user_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def owner_id(self) -> str:
        return self._hub.owner_id

    @property
    def game_id(self) -> str:
        return self._hub.game_id

    @property
    def config(self) -> GameConfig:
        return self._hub.config

    def last_sequence_id(self) -> int:
        return self._hub.last_sequence_id()

    def send(
        self,
        payload: EventPayload,
        reply_to_id: int | None = None,
        recipient: str | None = None,
    ) -> int | None:
        if recipient is not None:
            self._hub.deliver_private(self._user_id, recipient, payload, reply_to_id)
            return None
        return self._hub.append(self._user_id, payload, reply_to_id)

    def listen(self, on_event: EventHandler, on_private: EventHandler) -> None:
        self._hub.listen(self._user_id, on_event, on_private)

    def fetch_checkpoint(self) -> Checkpoint | None:
        return self._hub.checkpoint
