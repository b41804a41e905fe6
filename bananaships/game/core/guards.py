"""Preconditions checked before an event handler runs.

A guard pairs a predicate with the error reported when it fails. The reducer
evaluates each event kind's guards in order and stops at the first failure.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from bananaships.game.core.errors import GameRuleError, MembershipError, PermissionDeniedError, PhaseError
from bananaships.game.core.events import EventMessage
from bananaships.game.core.models import PhaseName
from bananaships.game.core.state import ClientParams, SharedGameState

GuardPredicate: TypeAlias = Callable[[SharedGameState | None, EventMessage, ClientParams], bool]
GuardRejection: TypeAlias = Callable[[SharedGameState | None], GameRuleError]


@dataclass(frozen=True, slots=True)
class Guard:
    name: str
    allows: GuardPredicate
    rejection: GuardRejection


def _is_owner(_state: SharedGameState | None, event: EventMessage, params: ClientParams) -> bool:
    return event.sender_id == params.owner_id


def _is_member(state: SharedGameState | None, event: EventMessage, _params: ClientParams) -> bool:
    return state is not None and event.sender_id in state.players


OWNER_ONLY = Guard("owner", _is_owner, lambda _state: PermissionDeniedError())
MEMBERSHIP_ONLY = Guard("membership", _is_member, lambda _state: MembershipError())


def phase_only(phase: PhaseName) -> Guard:
    """Guard accepting events only while the game is in ``phase``."""

    def allows(state: SharedGameState | None, _event: EventMessage, _params: ClientParams) -> bool:
        return state is not None and state.phase_name is phase

    def rejection(state: SharedGameState | None) -> GameRuleError:
        actual = state.phase_name if state is not None else PhaseName.PREGAME
        return PhaseError(expected=phase, actual=actual)

    return Guard(f"phase:{phase.value}", allows, rejection)


def first_violation(
    guards: Sequence[Guard],
    state: SharedGameState | None,
    event: EventMessage,
    params: ClientParams,
) -> GameRuleError | None:
    """Error of the first guard that rejects the event, or ``None`` if all pass."""
    for guard in guards:
        if not guard.allows(state, event, params):
            return guard.rejection(state)
    return None
