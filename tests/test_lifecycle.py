"""
Tests for return authorization state transitions.
"""
import pytest

from return_requests.models.return_authorization import (
    InvalidTransitionError,
    ReturnAuthorizationState,
    SideEffect,
    transition,
)


class TestTransition:
    """Test the explicit transition function."""

    def test_creation_into_authorized_notifies(self):
        change = transition(None, ReturnAuthorizationState.AUTHORIZED)
        assert change.state == ReturnAuthorizationState.AUTHORIZED
        assert change.effects == (SideEffect.NOTIFY_AUTHORIZED,)

    def test_creation_into_received_is_silent(self):
        change = transition(None, ReturnAuthorizationState.RECEIVED)
        assert change.state == ReturnAuthorizationState.RECEIVED
        assert change.effects == ()

    def test_reapplying_authorized_is_silent(self):
        change = transition(ReturnAuthorizationState.AUTHORIZED, ReturnAuthorizationState.AUTHORIZED)
        assert change.effects == ()

    @pytest.mark.parametrize("target", [ReturnAuthorizationState.RECEIVED, ReturnAuthorizationState.CANCELED])
    def test_authorized_moves_forward(self, target):
        change = transition(ReturnAuthorizationState.AUTHORIZED, target)
        assert change.state == target
        assert change.effects == ()

    def test_cannot_leave_terminal_state(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition(ReturnAuthorizationState.CANCELED, ReturnAuthorizationState.AUTHORIZED)
        assert "canceled" in str(exc_info.value)
