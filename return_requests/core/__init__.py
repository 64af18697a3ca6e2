"""Core return request logic"""

from return_requests.core.security import authorize_order_access, verify_token
from return_requests.core.proration import price_after_discounts, compute_returned_amount
from return_requests.core.eligibility import can_request_return, is_authorized_past_expiration
from return_requests.core.email import ReturnAuthorizationMailer

__all__ = [
    "authorize_order_access",
    "verify_token",
    "price_after_discounts",
    "compute_returned_amount",
    "can_request_return",
    "is_authorized_past_expiration",
    "ReturnAuthorizationMailer",
]
