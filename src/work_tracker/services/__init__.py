"""Session services."""

from work_tracker.services.session_controller import SessionController
from work_tracker.services.state_machine import (
    InvalidTransitionError,
    SessionState,
    SessionStateMachine,
)

__all__ = [
    "SessionController",
    "SessionState",
    "SessionStateMachine",
    "InvalidTransitionError",
]
