"""Tests for session state machine."""

import pytest

from work_tracker.services.state_machine import (
    InvalidTransitionError,
    SessionState,
    SessionStateMachine,
)


class TestSessionStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # loading → authenticated
        assert SessionStateMachine.can_transition("loading", "authenticated") is True

        # loading → unauthenticated
        assert SessionStateMachine.can_transition("loading", "unauthenticated") is True

        # unauthenticated → loading
        assert SessionStateMachine.can_transition("unauthenticated", "loading") is True

        # authenticated → unauthenticated (sign-out)
        assert SessionStateMachine.can_transition("authenticated", "unauthenticated") is True

        # authenticated → loading (account switch)
        assert SessionStateMachine.can_transition("authenticated", "loading") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Must load before authenticating
        assert SessionStateMachine.can_transition("unauthenticated", "authenticated") is False

        # No self transitions
        assert SessionStateMachine.can_transition("loading", "loading") is False
        assert SessionStateMachine.can_transition("authenticated", "authenticated") is False

        # Unknown states
        assert SessionStateMachine.can_transition("expired", "loading") is False

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            SessionStateMachine.validate_transition("unauthenticated", "authenticated")

        assert exc_info.value.from_state == "unauthenticated"
        assert exc_info.value.to_state == "authenticated"

    def test_accepts_mutations(self):
        """Only an authenticated session may edit the store."""
        assert SessionStateMachine.accepts_mutations(SessionState.AUTHENTICATED) is True
        assert SessionStateMachine.accepts_mutations(SessionState.LOADING) is False
        assert SessionStateMachine.accepts_mutations(SessionState.UNAUTHENTICATED) is False

    def test_initial_state(self):
        assert SessionStateMachine.INITIAL_STATE == SessionState.LOADING
