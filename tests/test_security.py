"""
Tests for order access authorization and JWT helpers.
"""
from datetime import datetime, timedelta, timezone
from jose import jwt

from return_requests.config import settings
from return_requests.core.security import authorize_order_access, verify_token


def encode_token(sub: str, expires_in: timedelta = timedelta(minutes=5)) -> str:
    return jwt.encode(
        {"sub": sub, "exp": datetime.now(timezone.utc) + expires_in},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


class TestAuthorizeOrderAccess:
    """Test owner and token based access."""

    def test_owner_without_token(self):
        assert authorize_order_access("user-1", "tok-abc", user_id="user-1")

    def test_owner_with_wrong_token(self):
        assert authorize_order_access("user-1", "tok-abc", user_id="user-1", token="nope")

    def test_exact_token_without_user(self):
        assert authorize_order_access("user-1", "tok-abc", token="tok-abc")

    def test_exact_token_for_different_user(self):
        assert authorize_order_access("user-1", "tok-abc", user_id="user-2", token="tok-abc")

    def test_token_with_extra_trailing_character(self):
        assert not authorize_order_access("user-1", "tok-abc", token="tok-abcz")

    def test_token_prefix(self):
        assert not authorize_order_access("user-1", "tok-abc", token="tok-ab")

    def test_nothing_presented(self):
        assert not authorize_order_access("user-1", "tok-abc")

    def test_other_user_without_token(self):
        assert not authorize_order_access("user-1", "tok-abc", user_id="user-2")

    def test_anonymous_order_needs_token(self):
        assert not authorize_order_access(None, "tok-abc", user_id=None)
        assert not authorize_order_access(None, "tok-abc", token="")
        assert authorize_order_access(None, "tok-abc", token="tok-abc")


class TestVerifyToken:
    """Test JWT verification."""

    def test_access_token_round_trip(self):
        token = encode_token("507f1f77bcf86cd799439011")
        payload = verify_token(token)
        assert payload["sub"] == "507f1f77bcf86cd799439011"

    def test_expired_access_token(self):
        token = encode_token("abc", expires_in=timedelta(seconds=-10))
        assert verify_token(token) is None

    def test_garbage_access_token(self):
        assert verify_token("not-a-jwt") is None
