"""Event reducer: folds one event into the shared game state.

``handle_message`` is pure. A rejected event yields the identical input state
together with the error; an accepted one yields a new state and, for guesses
aimed at the local player, the response payload to send back to the guesser.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import assert_never

from bananaships.game.core.errors import GameRuleError, ValidationError
from bananaships.game.core.events import (
    AnswerPayload,
    BattleshipPayload,
    DrawPayload,
    EventKind,
    EventMessage,
    EventPayload,
    GuessPayload,
    InitPayload,
    JoinPayload,
    LeavePayload,
    RevealPayload,
    StartPayload,
    WordPayload,
    WordResponsePayload,
)
from bananaships.game.core.guards import MEMBERSHIP_ONLY, OWNER_ONLY, Guard, first_violation, phase_only
from bananaships.game.core.models import (
    WORD_DIRECTIONS,
    BananagramsPhase,
    BattleshipPhase,
    KnownCell,
    PhaseName,
    Player,
    Tile,
)
from bananaships.game.core.pool import draw_token, fork_rng, get_letter_counts, make_pool
from bananaships.game.core.state import ClientParams, SharedGameState, hidden_tiles
from bananaships.game.core.topology import get_islands, largest_island
from bananaships.game.core.turns import next_key
from bananaships.game.core.words import letter_at, word_matches


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of folding one event.

    ``response`` is a payload the local client must send as a reply to the
    folded event. ``response_recipient`` makes that reply private: the client
    hands it to that user alone, or folds it locally when it names the local
    user. The built-in handlers always reply publicly and leave it unset.
    """

    state: SharedGameState | None
    error: GameRuleError | None = None
    response: EventPayload | None = None
    response_recipient: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


EVENT_GUARDS: dict[EventKind, tuple[Guard, ...]] = {
    EventKind.INIT: (OWNER_ONLY,),
    EventKind.JOIN: (),
    EventKind.LEAVE: (MEMBERSHIP_ONLY,),
    EventKind.START: (OWNER_ONLY, phase_only(PhaseName.PREGAME)),
    EventKind.DRAW: (MEMBERSHIP_ONLY, phase_only(PhaseName.BANANAGRAMS)),
    EventKind.BATTLESHIP: (OWNER_ONLY, phase_only(PhaseName.BANANAGRAMS)),
    EventKind.GUESS: (phase_only(PhaseName.BATTLESHIP),),
    EventKind.ANSWER: (phase_only(PhaseName.BATTLESHIP),),
    EventKind.REVEAL: (phase_only(PhaseName.BATTLESHIP), MEMBERSHIP_ONLY),
    EventKind.WORD: (phase_only(PhaseName.BATTLESHIP),),
    EventKind.WORD_RESPONSE: (phase_only(PhaseName.BATTLESHIP),),
}


def handle_message(state: SharedGameState | None, event: EventMessage, params: ClientParams) -> ActionResult:
    """Fold ``event`` into ``state``. ``state`` is ``None`` until the game is initialized."""
    payload = event.payload
    if state is None and not isinstance(payload, InitPayload):
        return _not_set_up()

    violation = first_violation(EVENT_GUARDS[payload.kind], state, event, params)
    if violation is not None:
        return ActionResult(state=state, error=violation)

    if state is None:
        return _init_game(event, payload, params) if isinstance(payload, InitPayload) else _not_set_up()

    match payload:
        case InitPayload():
            return _reject(state, "The game has already been set up")
        case JoinPayload():
            return _join_game(state, event.sender_id, payload.name)
        case LeavePayload():
            return ActionResult(state=state)
        case StartPayload():
            return _start_game(state, event)
        case DrawPayload():
            return _draw(state, event)
        case BattleshipPayload():
            return _start_battleship(state)
        case GuessPayload():
            return _guess(state, event, payload)
        case AnswerPayload():
            return _answer(state, event, payload)
        case RevealPayload():
            return _reveal(state, event, payload)
        case WordPayload():
            return _guess_word(state, event, payload)
        case WordResponsePayload():
            return _word_response(state, event, payload)
        case _:
            assert_never(payload)


def _reject(state: SharedGameState, message: str) -> ActionResult:
    return ActionResult(state=state, error=ValidationError(message))


def _not_set_up() -> ActionResult:
    return ActionResult(state=None, error=ValidationError("The game has not been set up yet"))


def _init_game(event: EventMessage, payload: InitPayload, params: ClientParams) -> ActionResult:
    rows = params.config.rows if payload.rows is None else payload.rows
    columns = params.config.columns if payload.columns is None else payload.columns
    if rows < 1 or columns < 1:
        return ActionResult(state=None, error=ValidationError("The board must have at least one row and column"))
    state = SharedGameState.create(
        name=payload.name,
        game_id=params.game_id,
        owner_id=event.sender_id,
        rows=rows,
        columns=columns,
        config=params.config,
        rng=fork_rng(params.seeded_rng()),
        my_id=params.user_id,
    )
    return _join_game(state, event.sender_id, payload.owner_name)


def _join_game(state: SharedGameState, user_id: str, name: str) -> ActionResult:
    if state.phase_name is not PhaseName.PREGAME:
        return _reject(state, "You can't join the game now!")
    if user_id in state.players:
        return _reject(state, "You're already in the game")
    player = Player(name=name) if name else Player()
    return ActionResult(state=replace(state, players={**state.players, user_id: player}))


def _draw_letters(state: SharedGameState, rounds: int = 1) -> SharedGameState:
    """Deal ``rounds`` tiles to every player in join order until the pool runs dry.

    Every client removes the same tokens from the pool; only the local
    player's tokens become pieces in the local tray.
    """
    rng = fork_rng(state.rng)
    pool = state.pool
    next_id = state.next_id
    drawn: list[Tile] = []
    for _ in range(rounds):
        for user_id in state.players:
            if not pool:
                break
            letter, pool = draw_token(pool, rng)
            if user_id == state.my_id:
                drawn.append(Tile(id=next_id, letter=letter))
                next_id += 1
        if not pool:
            break
    return replace(
        state,
        pool=pool,
        rng=rng,
        next_id=next_id,
        tray=(*state.tray, *(tile.id for tile in drawn)),
        board=state.board.with_pieces(drawn),
    )


def _start_game(state: SharedGameState, event: EventMessage) -> ActionResult:
    required = state.config.min_players
    if len(state.players) < required:
        return _reject(state, f"You must have at least {required} players to start the game")

    pool = make_pool(get_letter_counts(len(state.players), state.columns, state.rows))
    started = replace(state, phase=BananagramsPhase(started_at=event.timestamp), pool=pool)
    dealt = _draw_letters(started, state.config.starting_hand)
    if not dealt.pool:
        dealt = replace(dealt, phase=BananagramsPhase(started_at=event.timestamp, pool_drained_at=event.timestamp))
    return ActionResult(state=dealt)


def _draw(state: SharedGameState, event: EventMessage) -> ActionResult:
    if not state.pool:
        return _reject(state, "There are no tiles left in the pool")
    drawn = _draw_letters(state)
    if not drawn.pool and isinstance(drawn.phase, BananagramsPhase):
        drawn = replace(drawn, phase=replace(drawn.phase, pool_drained_at=event.timestamp))
    return ActionResult(state=drawn)


def _start_battleship(state: SharedGameState) -> ActionResult:
    if state.pool:
        return _reject(state, "There are still tiles left in the pool!")

    phase = BattleshipPhase(turn_player_id=next_key(state.players))
    islands = get_islands(state.board)
    if len(islands) <= 1:
        return ActionResult(state=replace(state, phase=phase))

    keep = largest_island(islands)
    builder = state.board.edit()
    returned: list[int] = []
    for idx, island in enumerate(islands):
        if idx == keep:
            continue
        for piece_id in island:
            builder.set_piece_coord(piece_id, None)
            returned.append(piece_id)
    return ActionResult(
        state=replace(state, phase=phase, board=builder.build(), tray=(*state.tray, *returned)),
    )


def _battleship_phase(state: SharedGameState) -> BattleshipPhase:
    phase = state.phase
    if not isinstance(phase, BattleshipPhase):
        raise RuntimeError(f"Expected the battleship phase, got {state.phase_name}")
    return phase


def _check_target(state: SharedGameState, sender_id: str, target_id: str) -> str | None:
    if target_id not in state.players:
        return "That player isn't in the game"
    if target_id == sender_id:
        return "You can't guess on your own board"
    return None


def _battleship_complete(players: dict[str, Player]) -> bool:
    """At most one player is left who may still have hidden tiles."""
    holding = sum(1 for player in players.values() if player.remaining is None or player.remaining > 0)
    return holding <= 1


def _with_completion(state: SharedGameState, phase: BattleshipPhase, timestamp: int) -> SharedGameState:
    if not phase.complete and _battleship_complete(state.players):
        phase = replace(phase, completed_at=timestamp)
    return replace(state, phase=phase)


def _guess(state: SharedGameState, event: EventMessage, payload: GuessPayload) -> ActionResult:
    phase = _battleship_phase(state)
    sender = event.sender_id
    if phase.complete:
        return _reject(state, "The game is over")
    if phase.turn_player_id != sender or phase.waiting_for_response:
        return _reject(state, "It's not your turn")
    problem = _check_target(state, sender, payload.target_id)
    if problem is not None:
        return _reject(state, problem)
    if not state.in_bounds(payload.coord):
        return _reject(state, "Invalid coordinate")

    target = state.players[payload.target_id]
    key = payload.coord.key
    if key in target.known_board:
        return _reject(state, "That coordinate has already been guessed")

    known_board = {**target.known_board, key: KnownCell(guesser_id=sender)}
    players = {**state.players, payload.target_id: replace(target, known_board=known_board)}
    new_state = replace(
        state,
        players=players,
        phase=replace(phase, turn_player_id=next_key(state.players, sender)),
    )
    if payload.target_id != state.my_id:
        return ActionResult(state=new_state)

    letter = letter_at(state.board, payload.coord)
    response = AnswerPayload(
        coord=payload.coord,
        answer=None if letter is None else letter.value,
        remaining=len(hidden_tiles(new_state)),
    )
    return ActionResult(state=new_state, response=response)


def _answer(state: SharedGameState, event: EventMessage, payload: AnswerPayload) -> ActionResult:
    target = state.players.get(event.sender_id)
    if target is None:
        return _reject(state, "That player isn't in the game")

    key = payload.coord.key
    known = target.known_board.get(key, KnownCell())
    known_board = {**target.known_board, key: replace(known, letter=payload.answer, revealed=True)}
    players = {
        **state.players,
        event.sender_id: replace(target, known_board=known_board, remaining=payload.remaining),
    }
    new_state = replace(state, players=players)
    return ActionResult(state=_with_completion(new_state, _battleship_phase(state), event.timestamp))


def _reveal(state: SharedGameState, event: EventMessage, payload: RevealPayload) -> ActionResult:
    for coord, _letter in payload.board:
        if not state.in_bounds(coord):
            return _reject(state, "Invalid coordinate")

    player = state.players[event.sender_id]
    known_board = dict(player.known_board)
    for coord, letter in payload.board:
        previous = known_board.get(coord.key)
        guesser = previous.guesser_id if previous is not None else None
        known_board[coord.key] = KnownCell(guesser_id=guesser, letter=letter, revealed=True)
    players = {**state.players, event.sender_id: replace(player, known_board=known_board)}
    return ActionResult(state=replace(state, players=players))


def _guess_word(state: SharedGameState, event: EventMessage, payload: WordPayload) -> ActionResult:
    phase = _battleship_phase(state)
    sender = event.sender_id
    if phase.complete:
        return _reject(state, "The game is over")
    if phase.turn_player_id != sender or phase.waiting_for_response:
        return _reject(state, "It's not your turn")
    problem = _check_target(state, sender, payload.target_id)
    if problem is not None:
        return _reject(state, problem)
    if not state.in_bounds(payload.coord):
        return _reject(state, "Invalid coordinate")
    if payload.direction not in WORD_DIRECTIONS:
        return _reject(state, "Invalid direction")
    if not payload.guess:
        return _reject(state, "Guess a word of at least one letter")

    new_state = replace(state, phase=replace(phase, waiting_for_response=True))
    if payload.target_id != state.my_id:
        return ActionResult(state=new_state)

    is_hit = word_matches(state.board, payload.guess, payload.coord, payload.direction)
    revealed = _word_cells(payload) if is_hit else set()
    # A hit reveals every cell of the word, so they no longer count as hidden.
    hidden = {tile.anchor.key for tile in hidden_tiles(new_state) if tile.anchor is not None}
    remaining = len(hidden - revealed)
    response = WordResponsePayload(
        coord=payload.coord,
        direction=payload.direction,
        guess=payload.guess,
        is_hit=is_hit,
        remaining=remaining,
    )
    return ActionResult(state=new_state, response=response)


def _word_cells(payload: WordPayload) -> set[str]:
    return {payload.coord.step(payload.direction, idx).key for idx in range(len(payload.guess))}


def _word_response(state: SharedGameState, event: EventMessage, payload: WordResponsePayload) -> ActionResult:
    phase = _battleship_phase(state)
    if not phase.waiting_for_response:
        return _reject(state, "No word guess is waiting for a response")
    target = state.players.get(event.sender_id)
    if target is None:
        return _reject(state, "That player isn't in the game")

    guesser = phase.turn_player_id
    known_board = dict(target.known_board)
    if payload.is_hit:
        for idx, char in enumerate(payload.guess):
            cell = payload.coord.step(payload.direction, idx)
            known_board[cell.key] = KnownCell(guesser_id=guesser, letter=char.upper(), revealed=True)
    players = {
        **state.players,
        event.sender_id: replace(target, known_board=known_board, remaining=payload.remaining),
    }
    turn = guesser if payload.is_hit else next_key(state.players, guesser)
    next_phase = replace(phase, turn_player_id=turn, waiting_for_response=False)
    return ActionResult(state=_with_completion(replace(state, players=players), next_phase, event.timestamp))
