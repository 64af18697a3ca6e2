"""Security utilities for JWT callers and order tokens"""

from jose import jwt, JWTError
from return_requests.config import settings
from typing import Optional
import hmac


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dictionary or None if invalid
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None


def authorize_order_access(
    order_user_id: Optional[str],
    order_token: Optional[str],
    user_id: Optional[str] = None,
    token: Optional[str] = None,
) -> bool:
    """
    Check whether a caller may view or act on an order.

    The caller passes when they are the order's owner, or when they present
    exactly the order's token. Anonymous orders have no owner, so only the
    token can open them.

    Args:
        order_user_id: Owner of the order, None for guest checkouts
        order_token: The order's secret token
        user_id: Logged-in caller, if any
        token: Token presented with the request, if any

    Returns:
        True if access is granted
    """
    if user_id is not None and order_user_id is not None and user_id == order_user_id:
        return True

    if not token or not order_token:
        return False

    return hmac.compare_digest(token.encode("utf-8"), order_token.encode("utf-8"))
