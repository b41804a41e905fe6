"""Event payload algebra and its JSON-safe wire form.

Every payload is a frozen dataclass tagged with an ``EventKind``; the reducer
matches on the payload class, so each kind has exactly one handler.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from bananaships.game.core.models import Coord, Direction


class EventKind(StrEnum):
    """Wire tags of the closed set of events."""

    INIT = "init"
    JOIN = "join"
    LEAVE = "leave"
    START = "start"
    DRAW = "draw"
    BATTLESHIP = "battleship"
    GUESS = "guess"
    ANSWER = "answer"
    REVEAL = "reveal"
    WORD = "word"
    WORD_RESPONSE = "word_response"


@dataclass(frozen=True, slots=True)
class InitPayload:
    kind: ClassVar[EventKind] = EventKind.INIT

    owner_name: str
    name: str = ""
    rows: int | None = None
    columns: int | None = None


@dataclass(frozen=True, slots=True)
class JoinPayload:
    kind: ClassVar[EventKind] = EventKind.JOIN

    name: str


@dataclass(frozen=True, slots=True)
class LeavePayload:
    kind: ClassVar[EventKind] = EventKind.LEAVE


@dataclass(frozen=True, slots=True)
class StartPayload:
    kind: ClassVar[EventKind] = EventKind.START


@dataclass(frozen=True, slots=True)
class DrawPayload:
    kind: ClassVar[EventKind] = EventKind.DRAW


@dataclass(frozen=True, slots=True)
class BattleshipPayload:
    kind: ClassVar[EventKind] = EventKind.BATTLESHIP


@dataclass(frozen=True, slots=True)
class GuessPayload:
    kind: ClassVar[EventKind] = EventKind.GUESS

    target_id: str
    coord: Coord


@dataclass(frozen=True, slots=True)
class AnswerPayload:
    """Target's reply to a guess; ``answer`` is ``None`` on a miss."""

    kind: ClassVar[EventKind] = EventKind.ANSWER

    coord: Coord
    answer: str | None
    remaining: int


@dataclass(frozen=True, slots=True)
class RevealPayload:
    """Voluntary disclosure of cells on the sender's own board."""

    kind: ClassVar[EventKind] = EventKind.REVEAL

    board: tuple[tuple[Coord, str | None], ...]


@dataclass(frozen=True, slots=True)
class WordPayload:
    kind: ClassVar[EventKind] = EventKind.WORD

    target_id: str
    coord: Coord
    direction: Direction
    guess: str


@dataclass(frozen=True, slots=True)
class WordResponsePayload:
    kind: ClassVar[EventKind] = EventKind.WORD_RESPONSE

    coord: Coord
    direction: Direction
    guess: str
    is_hit: bool
    remaining: int


EventPayload = (
    InitPayload
    | JoinPayload
    | LeavePayload
    | StartPayload
    | DrawPayload
    | BattleshipPayload
    | GuessPayload
    | AnswerPayload
    | RevealPayload
    | WordPayload
    | WordResponsePayload
)


@dataclass(frozen=True, slots=True)
class EventMessage:
    """One event as delivered by the log.

    Private (point-to-point) messages carry no ``sequence_id``.
    """

    sequence_id: int | None
    sender_id: str
    timestamp: int
    payload: EventPayload
    reply_to_id: int | None = None

    @property
    def private(self) -> bool:
        return self.sequence_id is None


def _coord_out(coord: Coord) -> list[int]:
    return [coord.x, coord.y]


def _coord_in(raw: object) -> Coord:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ValueError(f"Coordinate must be a 2-item list, got {raw!r}.")
    try:
        return Coord(int(raw[0]), int(raw[1]))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Malformed coordinate {raw!r}.") from exc


def _bool_in(raw: object) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"Expected true or false, got {raw!r}.")
    return raw


def _optional_int(raw: object) -> int | None:
    if raw is None:
        return None
    if not isinstance(raw, (int, str)):
        raise ValueError(f"Expected an int-compatible value, got {raw!r}.")
    return int(raw)


def payload_to_dict(payload: EventPayload) -> dict[str, object]:
    """Convert a payload to a JSON-serializable dict tagged with ``type``."""
    data: dict[str, object] = {"type": payload.kind.value}
    match payload:
        case InitPayload():
            data.update(ownerName=payload.owner_name, name=payload.name)
            if payload.rows is not None:
                data["rows"] = payload.rows
            if payload.columns is not None:
                data["columns"] = payload.columns
        case JoinPayload():
            data["name"] = payload.name
        case LeavePayload() | StartPayload() | DrawPayload() | BattleshipPayload():
            pass
        case GuessPayload():
            data.update(targetId=payload.target_id, coord=_coord_out(payload.coord))
        case AnswerPayload():
            data.update(coord=_coord_out(payload.coord), answer=payload.answer, remaining=payload.remaining)
        case RevealPayload():
            data["board"] = [[_coord_out(coord), letter] for coord, letter in payload.board]
        case WordPayload():
            data.update(
                targetId=payload.target_id,
                coord=_coord_out(payload.coord),
                dir=list(payload.direction.value),
                guess=payload.guess,
            )
        case WordResponsePayload():
            data.update(
                coord=_coord_out(payload.coord),
                dir=list(payload.direction.value),
                guess=payload.guess,
                isHit=payload.is_hit,
                remaining=payload.remaining,
            )
    return data


def payload_from_dict(data: dict[str, object]) -> EventPayload:
    """Parse a wire dict back into a payload, raising ``ValueError`` when malformed."""
    try:
        kind = EventKind(str(data.get("type", "")))
    except ValueError as exc:
        raise ValueError(f"Unrecognized event type: {data.get('type')!r}") from exc
    try:
        match kind:
            case EventKind.INIT:
                return InitPayload(
                    owner_name=str(data["ownerName"]),
                    name=str(data.get("name", "")),
                    rows=_optional_int(data.get("rows")),
                    columns=_optional_int(data.get("columns")),
                )
            case EventKind.JOIN:
                return JoinPayload(name=str(data["name"]))
            case EventKind.LEAVE:
                return LeavePayload()
            case EventKind.START:
                return StartPayload()
            case EventKind.DRAW:
                return DrawPayload()
            case EventKind.BATTLESHIP:
                return BattleshipPayload()
            case EventKind.GUESS:
                return GuessPayload(target_id=str(data["targetId"]), coord=_coord_in(data["coord"]))
            case EventKind.ANSWER:
                answer = data.get("answer")
                return AnswerPayload(
                    coord=_coord_in(data["coord"]),
                    answer=None if answer is None else str(answer),
                    remaining=int(data["remaining"]),  # type: ignore[arg-type]
                )
            case EventKind.REVEAL:
                raw_board = data.get("board")
                if not isinstance(raw_board, list):
                    raise ValueError("Reveal board must be a list.")
                cells: list[tuple[Coord, str | None]] = []
                for item in raw_board:
                    if not isinstance(item, (list, tuple)) or not item:
                        raise ValueError("Each revealed cell must be a [coord, letter] pair.")
                    letter = item[1] if len(item) > 1 else None
                    cells.append((_coord_in(item[0]), None if letter is None else str(letter)))
                return RevealPayload(board=tuple(cells))
            case EventKind.WORD:
                return WordPayload(
                    target_id=str(data["targetId"]),
                    coord=_coord_in(data["coord"]),
                    direction=Direction.from_vector(data["dir"]),  # type: ignore[arg-type]
                    guess=str(data["guess"]),
                )
            case EventKind.WORD_RESPONSE:
                return WordResponsePayload(
                    coord=_coord_in(data["coord"]),
                    direction=Direction.from_vector(data["dir"]),  # type: ignore[arg-type]
                    guess=str(data["guess"]),
                    is_hit=_bool_in(data["isHit"]),
                    remaining=int(data["remaining"]),  # type: ignore[arg-type]
                )
    except KeyError as exc:
        raise ValueError(f"Missing field {exc.args[0]!r} in {kind.value} payload.") from exc
    except TypeError as exc:
        raise ValueError(f"Malformed {kind.value} payload.") from exc
    raise ValueError(f"Unhandled event type: {kind.value}")


def event_to_dict(event: EventMessage) -> dict[str, object]:
    data: dict[str, object] = {
        "id": event.sequence_id,
        "sender": event.sender_id,
        "timestamp": event.timestamp,
        "payload": payload_to_dict(event.payload),
    }
    if event.reply_to_id is not None:
        data["reId"] = event.reply_to_id
    return data


def event_from_dict(data: dict[str, object]) -> EventMessage:
    payload = data.get("payload")
    if not isinstance(payload, dict):
        raise ValueError("Event payload must be an object.")
    try:
        return EventMessage(
            sequence_id=_optional_int(data.get("id")),
            sender_id=str(data["sender"]),
            timestamp=int(data["timestamp"]),  # type: ignore[arg-type]
            payload=payload_from_dict(payload),
            reply_to_id=_optional_int(data.get("reId")),
        )
    except KeyError as exc:
        raise ValueError(f"Missing field {exc.args[0]!r} in event.") from exc
    except TypeError as exc:
        raise ValueError("Malformed event.") from exc
