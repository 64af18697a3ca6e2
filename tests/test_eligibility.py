"""
Tests for the return window and authorization expiry policy.
"""
from datetime import timedelta

from return_requests.config import ReturnRequestsConfig
from return_requests.core.eligibility import (
    NOT_YET_SHIPPED_TEXT,
    EligibilityFailure,
    authorized_and_expired,
    can_request_return,
    is_authorized_past_expiration,
)
from return_requests.models.order import InventoryUnitState
from return_requests.models.return_authorization import ReturnAuthorizationState

from conftest import NOW, build_order, build_return_authorization


class TestCanRequestReturn:
    """Test the return window check."""

    def test_recent_order_is_eligible(self, config):
        decision = can_request_return(build_order(), NOW, config)
        assert decision.eligible
        assert decision.failure is None

    def test_past_window_uses_configured_text(self):
        config = ReturnRequestsConfig(
            return_request_max_order_age_in_days=10,
            return_request_past_return_window_text="Too late, friend.",
        )
        order = build_order(completed_at=NOW - timedelta(days=11))

        decision = can_request_return(order, NOW, config)

        assert decision.failure == EligibilityFailure.PAST_RETURN_WINDOW
        assert decision.message == "Too late, friend."

    def test_boundary_day_is_still_eligible(self):
        config = ReturnRequestsConfig(return_request_max_order_age_in_days=10)
        order = build_order(completed_at=NOW - timedelta(days=10))

        assert can_request_return(order, NOW, config).eligible

    def test_incomplete_order_is_not_shipped(self, config):
        order = build_order(completed_at=None)

        decision = can_request_return(order, NOW, config)

        assert decision.failure == EligibilityFailure.NOT_YET_SHIPPED
        assert decision.message == NOT_YET_SHIPPED_TEXT
        assert "shipped" in decision.message

    def test_order_without_shipped_units_is_not_shipped(self, config):
        order = build_order(unit_state=InventoryUnitState.ON_HAND)
        assert can_request_return(order, NOW, config).failure == EligibilityFailure.NOT_YET_SHIPPED

    def test_not_shipped_wins_over_window(self):
        config = ReturnRequestsConfig(return_request_max_order_age_in_days=1)
        order = build_order(completed_at=NOW - timedelta(days=30), unit_state=InventoryUnitState.ON_HAND)

        assert can_request_return(order, NOW, config).failure == EligibilityFailure.NOT_YET_SHIPPED

    def test_config_change_applies_to_next_check(self):
        order = build_order(completed_at=NOW - timedelta(days=20))

        assert can_request_return(order, NOW, ReturnRequestsConfig(return_request_max_order_age_in_days=30)).eligible
        assert not can_request_return(order, NOW, ReturnRequestsConfig(return_request_max_order_age_in_days=15)).eligible


class TestAuthorizedExpiration:
    """Test the authorized-and-expired predicate and filter."""

    def test_boundary_set(self):
        config = ReturnRequestsConfig(return_request_max_authorized_age_in_days=30)
        old_authorized = build_return_authorization("RA-1", created_at=NOW - timedelta(days=31))
        received = build_return_authorization(
            "RA-2", state=ReturnAuthorizationState.RECEIVED, created_at=NOW - timedelta(days=28)
        )
        young_authorized = build_return_authorization("RA-3", created_at=NOW - timedelta(days=29))

        expired = authorized_and_expired([old_authorized, received, young_authorized], NOW, config)

        assert [ra.number for ra in expired] == ["RA-1"]

    def test_other_states_never_expire(self):
        config = ReturnRequestsConfig(return_request_max_authorized_age_in_days=30)
        for state in (ReturnAuthorizationState.RECEIVED, ReturnAuthorizationState.CANCELED):
            ra = build_return_authorization("RA-9", state=state, created_at=NOW - timedelta(days=90))
            assert not is_authorized_past_expiration(ra, NOW, config)

    def test_exactly_at_limit_is_not_expired(self):
        config = ReturnRequestsConfig(return_request_max_authorized_age_in_days=30)
        ra = build_return_authorization("RA-5", created_at=NOW - timedelta(days=30))
        assert not is_authorized_past_expiration(ra, NOW, config)
