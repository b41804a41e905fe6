"""Total-order delivery of public log events."""

from __future__ import annotations

import logging

from bananaships.game.core.events import EventMessage

logger = logging.getLogger(__name__)

STALE_EVENT_MS = 30_000


class EventSequencer:
    """Release public events strictly in sequence-id order.

    Early arrivals wait in a pending buffer until their predecessors show up.
    Already processed ids are ignored. An event whose timestamp trails the last
    released one by at least ``stale_after_ms`` is dropped but still counts as
    processed, so the sequence keeps moving.
    """

    def __init__(
        self,
        *,
        stale_after_ms: int = STALE_EVENT_MS,
        last_processed: int = 0,
        last_timestamp: int = 0,
    ) -> None:
        self._stale_after_ms = stale_after_ms
        self._pending: dict[int, EventMessage] = {}
        self.last_processed = last_processed
        self.last_timestamp = last_timestamp
        self.skipped: list[EventMessage] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def reset(self, *, last_processed: int, last_timestamp: int) -> None:
        """Resume after a checkpoint that already covers ``last_processed``."""
        self._pending = {seq: event for seq, event in self._pending.items() if seq > last_processed}
        self.last_processed = last_processed
        self.last_timestamp = last_timestamp

    def offer(self, event: EventMessage) -> list[EventMessage]:
        """Accept one public event and return every event now ready, in order."""
        seq = event.sequence_id
        if seq is None:
            raise ValueError("Private events are not sequenced.")
        if seq <= self.last_processed or seq in self._pending:
            logger.debug("event_duplicate seq=%s", seq)
            return []
        self._pending[seq] = event
        if seq != self.last_processed + 1:
            logger.debug("event_buffered seq=%s waiting_for=%s", seq, self.last_processed + 1)

        ready: list[EventMessage] = []
        while (upcoming := self._pending.pop(self.last_processed + 1, None)) is not None:
            stale = upcoming.timestamp - self.last_timestamp <= -self._stale_after_ms
            self.last_processed += 1
            if stale:
                logger.info(
                    "event_stale seq=%s timestamp=%s last_timestamp=%s",
                    upcoming.sequence_id,
                    upcoming.timestamp,
                    self.last_timestamp,
                )
                self.skipped.append(upcoming)
                continue
            self.last_timestamp = upcoming.timestamp
            ready.append(upcoming)
        return ready
