"""Client orchestration over the reducer and an event log.

``GameClient`` owns one client's fold of the shared log: it pre-validates
outgoing events, applies incoming ones in order, sends the replies the
reducer asks for, and handles local-only piece moves.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from bananaships.game.app.ports.event_log import Checkpoint, EventLog
from bananaships.game.app.services.event_sequencer import STALE_EVENT_MS, EventSequencer
from bananaships.game.core.board import BoardState
from bananaships.game.core.errors import GameRuleError, ValidationError
from bananaships.game.core.events import (
    BattleshipPayload,
    DrawPayload,
    EventMessage,
    EventPayload,
    GuessPayload,
    InitPayload,
    JoinPayload,
    RevealPayload,
    StartPayload,
    WordPayload,
)
from bananaships.game.core.gravity import gravity_tick
from bananaships.game.core.models import Coord, Direction
from bananaships.game.core.placement import return_to_tray, swap_piece
from bananaships.game.core.reducer import ActionResult, handle_message
from bananaships.game.core.state import ClientParams, SharedGameState
from bananaships.game.core.words import WordFit, fit_word

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DropTarget:
    """Where a dragged piece was released: a board cell or another piece."""

    coord: Coord | None = None
    piece_id: int | None = None


@dataclass(frozen=True, slots=True)
class RejectedEvent:
    event: EventMessage
    error: GameRuleError


def can_draw(state: SharedGameState | None) -> tuple[bool, str | None]:
    """Return whether the local player may ask for a draw, with the reason if not."""
    if state is None:
        return False, "The game has not been set up yet"
    if state.tray:
        return False, "You have unused tiles in your tray"
    if not state.pool:
        return False, "There are no more tiles to draw"
    return True, None


def _now_ms() -> int:
    return int(time.time() * 1000)


class GameClient:
    """One player's view of a game, folded from an ``EventLog``."""

    def __init__(
        self,
        log: EventLog,
        *,
        stale_after_ms: int = STALE_EVENT_MS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._log = log
        self._clock = clock or _now_ms
        self._sequencer = EventSequencer(stale_after_ms=stale_after_ms)
        self._starting_id = 0
        self._queued_responses: dict[int, EventPayload] = {}
        self.state: SharedGameState | None = None
        self.rejected: list[RejectedEvent] = []

    @property
    def user_id(self) -> str:
        return self._log.user_id

    @property
    def sequencer(self) -> EventSequencer:
        return self._sequencer

    @property
    def catching_up(self) -> bool:
        """Whether history from before ``connect`` is still being replayed."""
        return self._sequencer.last_processed < self._starting_id

    def params(self) -> ClientParams:
        return ClientParams(
            user_id=self._log.user_id,
            owner_id=self._log.owner_id,
            game_id=self._log.game_id,
            config=self._log.config,
        )

    def connect(self) -> None:
        """Restore from the log's checkpoint, if any, and start folding events."""
        checkpoint = self._log.fetch_checkpoint()
        if checkpoint is not None:
            self._restore(checkpoint)
            self._starting_id = checkpoint.last_event
        else:
            self._starting_id = self._log.last_sequence_id()
        logger.info(
            "client_connect user=%s game=%s starting_id=%s checkpoint=%s",
            self.user_id,
            self._log.game_id,
            self._starting_id,
            checkpoint is not None,
        )
        self._log.listen(self.receive, self.receive_private)

    def _restore(self, checkpoint: Checkpoint) -> None:
        state = checkpoint.state
        if state.my_id != self.user_id:
            # Local fields in someone else's checkpoint describe their board.
            state = replace(
                state,
                my_id=self.user_id,
                tray=(),
                board=BoardState.empty(state.rows, state.columns),
                next_id=1,
            )
        self.state = state
        self._sequencer.reset(last_processed=checkpoint.last_event, last_timestamp=checkpoint.timestamp)

    # Outgoing events

    def simulate(self, payload: EventPayload) -> ActionResult:
        """Fold ``payload`` as if it were the next log event, without committing anything."""
        event = EventMessage(
            sequence_id=self._log.last_sequence_id() + 1,
            sender_id=self.user_id,
            timestamp=self._clock(),
            payload=payload,
        )
        return handle_message(self.state, event, self.params())

    def checked_send(self, payload: EventPayload) -> int | None:
        """Append ``payload`` to the log, raising the rule error if it would be rejected."""
        result = self.simulate(payload)
        if result.error is not None:
            logger.info("send_refused kind=%s reason=%s", payload.kind.value, result.error.message)
            raise result.error
        return self._log.send(payload)

    def create_game(
        self,
        owner_name: str,
        *,
        name: str = "",
        rows: int | None = None,
        columns: int | None = None,
    ) -> int | None:
        return self.checked_send(InitPayload(owner_name=owner_name, name=name, rows=rows, columns=columns))

    def join(self, name: str) -> int | None:
        return self.checked_send(JoinPayload(name=name))

    def start(self) -> int | None:
        return self.checked_send(StartPayload())

    def draw(self) -> int | None:
        allowed, reason = can_draw(self.state)
        if not allowed:
            raise ValidationError(reason or "You can't draw now")
        return self.checked_send(DrawPayload())

    def start_battleship(self) -> int | None:
        return self.checked_send(BattleshipPayload())

    def guess(self, target_id: str, coord: Coord) -> int | None:
        return self.checked_send(GuessPayload(target_id=target_id, coord=coord))

    def guess_word(self, target_id: str, coord: Coord, direction: Direction, word: str) -> int | None:
        return self.checked_send(WordPayload(target_id=target_id, coord=coord, direction=direction, guess=word))

    def reveal(self, cells: Iterable[tuple[Coord, str | None]]) -> int | None:
        return self.checked_send(RevealPayload(board=tuple(cells)))

    def preview_word(self, target_id: str, coord: Coord, word: str) -> dict[Direction, WordFit]:
        """How much of ``word`` fits what is known of ``target_id``'s board."""
        if self.state is None or target_id not in self.state.players:
            return {}
        known = self.state.players[target_id].known_board
        return fit_word(known, coord, word, self.state.rows, self.state.columns)

    # Incoming events

    def receive(self, event: EventMessage) -> None:
        """Handle one public event from the log."""
        for ready in self._sequencer.offer(event):
            self._apply(ready)
        if self._queued_responses and not self.catching_up:
            self._flush_responses()

    def receive_private(self, event: EventMessage) -> None:
        """Handle one event addressed only to this client."""
        self._apply(event)

    def _apply(self, event: EventMessage) -> None:
        result = handle_message(self.state, event, self.params())
        if result.error is not None:
            logger.info(
                "event_rejected seq=%s kind=%s sender=%s reason=%s",
                event.sequence_id,
                event.payload.kind.value,
                event.sender_id,
                result.error.message,
            )
            self.rejected.append(RejectedEvent(event=event, error=result.error))
        else:
            self.state = result.state
            logger.debug("event_applied seq=%s kind=%s", event.sequence_id, event.payload.kind.value)

        if event.reply_to_id is not None and event.sender_id == self.user_id:
            self._queued_responses.pop(event.reply_to_id, None)

        if result.response is not None:
            self._respond(event, result.response, result.response_recipient)

    def _respond(self, event: EventMessage, response: EventPayload, recipient: str | None) -> None:
        if recipient == self.user_id:
            self._apply(
                EventMessage(
                    sequence_id=None,
                    sender_id=self.user_id,
                    timestamp=event.timestamp,
                    payload=response,
                    reply_to_id=event.sequence_id,
                )
            )
            return
        if recipient is not None:
            self._log.send(response, event.sequence_id, recipient)
            return
        if event.sequence_id is not None and event.sequence_id <= self._starting_id:
            # The reply may already be further along in the history being replayed.
            self._queued_responses[event.sequence_id] = response
            return
        self._log.send(response, event.sequence_id)

    def _flush_responses(self) -> None:
        queued = list(self._queued_responses.items())
        self._queued_responses.clear()
        for reply_to_id, payload in queued:
            logger.info("response_flushed reply_to=%s kind=%s", reply_to_id, payload.kind.value)
            self._log.send(payload, reply_to_id)

    # Local-only moves

    def drop_piece(self, piece_id: int, target: DropTarget) -> bool:
        """Drop a dragged piece, swapping with whatever it lands on. Returns whether anything moved."""
        if self.state is None:
            return False
        coord = target.coord
        if coord is None and target.piece_id is not None:
            other = self.state.board.pieces.get(target.piece_id)
            coord = None if other is None else other.anchor
        if coord is None:
            return False
        moved = swap_piece(self.state, coord, piece_id)
        changed = moved is not self.state
        self.state = moved
        return changed

    def return_piece(self, piece_id: int) -> bool:
        if self.state is None:
            return False
        returned = return_to_tray(self.state, piece_id)
        changed = returned is not self.state
        self.state = returned
        return changed

    def tick(self) -> bool:
        """Let unsupported pieces fall one row. Returns whether anything fell."""
        if self.state is None:
            return False
        board = gravity_tick(self.state.board)
        if board is self.state.board:
            return False
        self.state = replace(self.state, board=board)
        return True
