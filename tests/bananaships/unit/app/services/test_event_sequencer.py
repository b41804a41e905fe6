from __future__ import annotations

import pytest

from bananaships.game.app.services.event_sequencer import EventSequencer
from bananaships.game.core.events import DrawPayload
from tests.bananaships.conftest import OWNER, make_event


def _ids(events) -> list[int | None]:
    return [event.sequence_id for event in events]


def test_in_order_events_are_released_immediately() -> None:
    sequencer = EventSequencer()
    assert _ids(sequencer.offer(make_event(1, OWNER, DrawPayload()))) == [1]
    assert _ids(sequencer.offer(make_event(2, OWNER, DrawPayload()))) == [2]
    assert sequencer.last_processed == 2


def test_early_events_wait_for_predecessors() -> None:
    sequencer = EventSequencer()
    assert sequencer.offer(make_event(3, OWNER, DrawPayload())) == []
    assert sequencer.offer(make_event(2, OWNER, DrawPayload())) == []
    assert sequencer.pending_count == 2

    assert _ids(sequencer.offer(make_event(1, OWNER, DrawPayload()))) == [1, 2, 3]
    assert sequencer.pending_count == 0


def test_duplicates_are_ignored() -> None:
    sequencer = EventSequencer()
    sequencer.offer(make_event(1, OWNER, DrawPayload()))
    sequencer.offer(make_event(3, OWNER, DrawPayload()))

    assert sequencer.offer(make_event(1, OWNER, DrawPayload())) == []
    assert sequencer.offer(make_event(3, OWNER, DrawPayload())) == []
    assert sequencer.pending_count == 1


def test_stale_event_is_skipped_but_sequence_moves_on() -> None:
    sequencer = EventSequencer(stale_after_ms=30_000)
    sequencer.offer(make_event(1, OWNER, DrawPayload(), timestamp=100_000))

    assert sequencer.offer(make_event(2, OWNER, DrawPayload(), timestamp=70_000)) == []
    assert _ids(sequencer.skipped) == [2]
    assert sequencer.last_processed == 2
    assert sequencer.last_timestamp == 100_000

    released = sequencer.offer(make_event(3, OWNER, DrawPayload(), timestamp=70_001))
    assert _ids(released) == [3]


def test_private_events_are_not_sequenced() -> None:
    with pytest.raises(ValueError):
        EventSequencer().offer(make_event(None, OWNER, DrawPayload()))


def test_reset_drops_covered_pending_events() -> None:
    sequencer = EventSequencer()
    sequencer.offer(make_event(4, OWNER, DrawPayload()))
    sequencer.offer(make_event(7, OWNER, DrawPayload()))

    sequencer.reset(last_processed=5, last_timestamp=1_000)

    assert sequencer.pending_count == 1
    assert _ids(sequencer.offer(make_event(6, OWNER, DrawPayload()))) == [6, 7]
