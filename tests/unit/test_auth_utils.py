"""
Unit tests for password hashing, session tokens, roles and sign-up codes.
"""

import time
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import jwt
import pytest

from processhub.core.auth.decorators import (
    ROLE_HIERARCHY,
    check_user_role,
    get_user_role_level,
    is_admin,
    is_supervisor_or_admin,
)
from processhub.core.auth.otp import OTPStore
from processhub.core.auth.password import (
    generate_otp,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from processhub.core.auth.tokens import (
    InvalidTokenError,
    build_claims,
    create_access_token,
    decode_access_token,
)
from processhub.core.auth.tortoise_models import UserRole
from processhub.core.config import get_config
from processhub.core.redis import RedisManager


@pytest.fixture
def sample_user():
    """Create a user-like object with the fields tokens read."""
    return SimpleNamespace(
        id=uuid4(),
        email="alice@example.com",
        name="Alice",
        role=UserRole.SUPERVISOR,
        phone_number=None,
        address="1 Main St",
        state=None,
        country="NL",
        zip_code=None,
        profile_picture=None,
    )


class TestPasswords:
    """Test password utilities."""

    def test_hash_and_verify(self) -> None:
        """A hash verifies only its own password."""
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("other", hashed)

    def test_verify_without_hash(self) -> None:
        """Accounts without a password never verify."""
        assert not verify_password("anything", None)
        assert not verify_password("anything", "")

    def test_generate_otp(self) -> None:
        """Codes are six digits without a leading zero."""
        for _ in range(50):
            code = generate_otp()
            assert len(code) == 6
            assert code.isdigit()
            assert code[0] != "0"

    def test_reset_tokens(self) -> None:
        """Reset tokens are random hex; only their sha256 is stored."""
        token = generate_reset_token()
        assert len(token) == 64
        assert token != generate_reset_token()
        digest = hash_reset_token(token)
        assert len(digest) == 64
        assert digest == hash_reset_token(token)
        assert digest != token


class TestTokens:
    """Test session token creation and validation."""

    def test_claims(self, sample_user) -> None:
        """Claims carry the public profile with camelCase keys."""
        claims = build_claims(sample_user)
        assert claims["userId"] == str(sample_user.id)
        assert claims["role"] == "supervisor"
        assert claims["address"] == "1 Main St"
        assert "hashedPassword" not in claims

    def test_round_trip(self, sample_user) -> None:
        """A fresh token decodes to its claims."""
        token = create_access_token(sample_user)
        claims = decode_access_token(token)
        assert claims["email"] == "alice@example.com"
        assert claims["exp"] > time.time()

    def test_expired_token(self, sample_user) -> None:
        """Expired tokens are rejected."""
        token = create_access_token(sample_user, expires_in=-10)
        with pytest.raises(InvalidTokenError, match="Token expired"):
            decode_access_token(token)

    def test_wrong_signature(self, sample_user) -> None:
        """Tokens signed with another key are rejected."""
        token = jwt.encode(build_claims(sample_user), "x" * 40, algorithm="HS256")
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            decode_access_token(token)

    def test_garbage_and_missing_user_id(self) -> None:
        """Malformed tokens and tokens without a user id are rejected."""
        with pytest.raises(InvalidTokenError):
            decode_access_token("not-a-token")

        security = get_config().security
        token = jwt.encode(
            {"email": "a@b.c"}, security.secret_key, algorithm=security.algorithm
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)


class TestRoles:
    """Test the role hierarchy."""

    def test_levels(self) -> None:
        """Roles are ordered user < supervisor < admin."""
        assert ROLE_HIERARCHY == {"user": 1, "supervisor": 2, "admin": 3}
        assert get_user_role_level(UserRole.ADMIN) == 3
        assert get_user_role_level("unknown") == 0

    def test_checks(self) -> None:
        """Role checks accept strings and enums."""
        assert is_admin("admin")
        assert is_admin(UserRole.ADMIN)
        assert not is_admin("supervisor")
        assert is_supervisor_or_admin("supervisor")
        assert is_supervisor_or_admin(UserRole.ADMIN)
        assert not is_supervisor_or_admin("user")
        assert check_user_role("admin", "user")
        assert not check_user_role("user", "supervisor")


class TestOTPStore:
    """Test the Redis backed sign-up code store."""

    @pytest.fixture
    def mock_redis(self):
        """Create a mock Redis manager."""
        redis = AsyncMock(spec=RedisManager)
        redis.get.return_value = None
        return redis

    @pytest.mark.asyncio
    async def test_save_uses_ttl_and_normalized_key(self, mock_redis) -> None:
        """Codes are stored under the lower-cased email with a TTL."""
        store = OTPStore(mock_redis, ttl_seconds=300)
        await store.save(" Alice@Example.com ", "123456")
        mock_redis.setex.assert_called_once_with(
            "otp:alice@example.com", 300, "123456"
        )

    @pytest.mark.asyncio
    async def test_verify_consumes_code(self, mock_redis) -> None:
        """A matching code is accepted once."""
        mock_redis.get.return_value = "123456"
        store = OTPStore(mock_redis, ttl_seconds=300)

        assert await store.verify("alice@example.com", "123456")
        mock_redis.delete.assert_called_once_with("otp:alice@example.com")

    @pytest.mark.asyncio
    async def test_verify_rejects_wrong_or_missing_code(self, mock_redis) -> None:
        """Wrong and expired codes are refused and kept."""
        store = OTPStore(mock_redis, ttl_seconds=300)
        assert not await store.verify("alice@example.com", "123456")

        mock_redis.get.return_value = "654321"
        assert not await store.verify("alice@example.com", "123456")
        mock_redis.delete.assert_not_called()
