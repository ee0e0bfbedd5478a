"""Session state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from work_tracker.errors import WorkTrackerError


class SessionState(str, Enum):
    """Session state values."""

    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


class InvalidTransitionError(WorkTrackerError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: str, to_state: str, reason: str | None = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason
        msg = f"Invalid transition from '{from_state}' to '{to_state}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class SessionStateMachine:
    """State machine for session transitions.

    Allowed transitions:
    - loading → authenticated (hydration finished or failed)
    - loading → unauthenticated (no identity, or signed out mid-load)
    - unauthenticated → loading (identity acquired)
    - authenticated → unauthenticated (identity lost or signed out)
    - authenticated → loading (switched to a different account)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        SessionState.LOADING: [SessionState.AUTHENTICATED, SessionState.UNAUTHENTICATED],
        SessionState.UNAUTHENTICATED: [SessionState.LOADING],
        SessionState.AUTHENTICATED: [SessionState.UNAUTHENTICATED, SessionState.LOADING],
    }

    # States in which the entity store accepts user mutations
    MUTATIONS_ALLOWED = {
        SessionState.AUTHENTICATED,
    }

    INITIAL_STATE = SessionState.LOADING

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_state, [])
        return to_state in allowed

    @classmethod
    def validate_transition(cls, from_state: str, to_state: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_state, to_state):
            raise InvalidTransitionError(from_state, to_state)

    @classmethod
    def accepts_mutations(cls, state: str) -> bool:
        """Check if the store may be edited in this state."""
        return state in cls.MUTATIONS_ALLOWED
