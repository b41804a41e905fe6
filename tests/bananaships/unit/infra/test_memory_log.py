from __future__ import annotations

import itertools

import pytest

from bananaships.game.app.ports.event_log import Checkpoint
from bananaships.game.core.events import DrawPayload, EventMessage, JoinPayload, StartPayload
from bananaships.game.infra.memory_log import InMemoryGameHub
from tests.bananaships.conftest import GUEST, OWNER, make_event, make_local_state


def _hub() -> InMemoryGameHub:
    ticks = itertools.count(1_000)
    return InMemoryGameHub(game_id="game-1", owner_id=OWNER, clock=lambda: next(ticks))


def test_append_numbers_and_timestamps_events() -> None:
    hub = _hub()
    log = hub.connect(GUEST)

    assert log.last_sequence_id() == 0
    assert log.send(JoinPayload(name="Bob")) == 1
    assert log.send(DrawPayload(), reply_to_id=1) == 2

    assert [event.timestamp for event in hub.events] == [1_000, 1_001]
    assert hub.events[1].reply_to_id == 1
    assert hub.events[1].sender_id == GUEST
    assert log.owner_id == OWNER


def test_listen_replays_history_then_follows() -> None:
    hub = _hub()
    hub.append(OWNER, StartPayload())
    seen: list[EventMessage] = []
    hub.connect(GUEST).listen(seen.append, seen.append)

    hub.append(OWNER, DrawPayload())

    assert [event.sequence_id for event in seen] == [1, 2]


def test_private_delivery_reaches_only_recipient() -> None:
    hub = _hub()
    public: list[EventMessage] = []
    private: list[EventMessage] = []
    other: list[EventMessage] = []
    hub.connect(GUEST).listen(public.append, private.append)
    hub.connect("carol").listen(other.append, other.append)

    assert hub.connect(OWNER).send(DrawPayload(), reply_to_id=3, recipient=GUEST) is None

    assert public == []
    assert other == []
    assert len(private) == 1
    assert private[0].private
    assert private[0].reply_to_id == 3
    assert hub.events == []


def test_inbox_is_delivered_on_listen() -> None:
    hub = _hub()
    hub.deliver_private(OWNER, GUEST, DrawPayload())
    private: list[EventMessage] = []
    hub.connect(GUEST).listen(lambda event: None, private.append)
    assert len(private) == 1


def test_handlers_sending_during_delivery_do_not_reenter() -> None:
    hub = _hub()
    log = hub.connect(GUEST)
    order: list[tuple[str, int | None]] = []

    def first(event: EventMessage) -> None:
        order.append(("first", event.sequence_id))
        if event.sequence_id == 1:
            log.send(DrawPayload())

    def second(event: EventMessage) -> None:
        order.append(("second", event.sequence_id))

    log.listen(first, first)
    hub.connect(OWNER).listen(second, second)
    hub.append(OWNER, StartPayload())

    assert order == [("first", 1), ("second", 1), ("first", 2), ("second", 2)]


def test_publish_rejects_ids_that_do_not_extend_the_log() -> None:
    hub = _hub()
    hub.load([make_event(1, OWNER, StartPayload()), make_event(2, GUEST, DrawPayload())])
    with pytest.raises(ValueError):
        hub.publish(make_event(2, GUEST, DrawPayload()))
    with pytest.raises(ValueError):
        hub.publish(make_event(None, GUEST, DrawPayload()))
    assert hub.last_sequence_id() == 2


def test_checkpoint_is_returned_to_every_connection() -> None:
    hub = _hub()
    checkpoint = Checkpoint(timestamp=1_500, last_event=4, state=make_local_state({}))
    hub.store_checkpoint(checkpoint)
    assert hub.connect(GUEST).fetch_checkpoint() is checkpoint
