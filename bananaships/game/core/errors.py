"""Rule violations reported by the reducer.

These are returned as values in ``ActionResult.error``; the reducer never
raises them. The client shim raises them to its callers.
"""

from __future__ import annotations

from bananaships.game.core.models import PhaseName


class GameRuleError(Exception):
    """An event the game rules reject. The state it was folded into is unchanged."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameRuleError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class PermissionDeniedError(GameRuleError):
    """Sender is not allowed to send this event (owner-only events)."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class MembershipError(GameRuleError):
    """Sender has not joined the game."""

    def __init__(self, message: str = "You haven't joined the game") -> None:
        super().__init__(message)


class PhaseError(GameRuleError):
    """Event is not valid in the current phase."""

    def __init__(self, expected: PhaseName, actual: PhaseName) -> None:
        super().__init__(f"This action requires the {expected.value} phase (game is in {actual.value})")
        self.expected = expected
        self.actual = actual


class ValidationError(GameRuleError):
    """Event payload or timing breaks a game rule."""
