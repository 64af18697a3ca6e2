"""Return window and authorization expiry policy"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from return_requests.config import ReturnRequestsConfig
from return_requests.models.order import Order
from return_requests.models.return_authorization import ReturnAuthorization, ReturnAuthorizationState

NOT_YET_SHIPPED_TEXT = "This order has not shipped yet, so it cannot be returned."


class EligibilityFailure(str, Enum):
    """Why an order cannot take a return request"""
    NOT_YET_SHIPPED = "not_yet_shipped"
    PAST_RETURN_WINDOW = "past_return_window"


@dataclass(frozen=True)
class EligibilityDecision:
    """Outcome of an eligibility check; ``failure`` is None when eligible"""
    failure: Optional[EligibilityFailure] = None
    message: Optional[str] = None

    @property
    def eligible(self) -> bool:
        return self.failure is None


def can_request_return(order: Order, now: datetime, config: ReturnRequestsConfig) -> EligibilityDecision:
    """
    Decide whether ``order`` may still take a return request.

    The order must be completed and have at least one shipped unit; after
    that it must be no older than the configured maximum age. An order that
    is exactly at the limit is still eligible.
    """
    if not order.completed or not order.shipped_units:
        return EligibilityDecision(EligibilityFailure.NOT_YET_SHIPPED, NOT_YET_SHIPPED_TEXT)

    max_age = timedelta(days=config.return_request_max_order_age_in_days)
    if now - order.completed_at > max_age:
        return EligibilityDecision(
            EligibilityFailure.PAST_RETURN_WINDOW,
            config.return_request_past_return_window_text,
        )

    return EligibilityDecision()


def authorized_expiration_cutoff(now: datetime, config: ReturnRequestsConfig) -> datetime:
    """Authorizations created before this instant are expired"""
    return now - timedelta(days=config.return_request_max_authorized_age_in_days)


def is_authorized_past_expiration(
    return_authorization: ReturnAuthorization,
    now: datetime,
    config: ReturnRequestsConfig,
) -> bool:
    return (
        return_authorization.state == ReturnAuthorizationState.AUTHORIZED
        and return_authorization.created_at < authorized_expiration_cutoff(now, config)
    )


def authorized_and_expired(
    return_authorizations: Iterable[ReturnAuthorization],
    now: datetime,
    config: ReturnRequestsConfig,
) -> List[ReturnAuthorization]:
    """Filter to the authorizations that stayed authorized for too long"""
    return [ra for ra in return_authorizations if is_authorized_past_expiration(ra, now, config)]
