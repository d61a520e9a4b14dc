"""
One-time sign-up codes backed by Redis.

Codes expire after ``SECURITY_OTP_LIFETIME_SECONDS`` and are single use.
"""

from typing import Optional

from ..config import get_config
from ..logging import get_logger
from ..redis import RedisManager

logger = get_logger(__name__)


class OTPStore:
    """Stores pending sign-up codes keyed by email."""

    key_prefix = "otp:"

    def __init__(self, redis: RedisManager, ttl_seconds: Optional[int] = None):
        """Initialize the store.

        Args:
            redis: Connected Redis manager
            ttl_seconds: Code lifetime, defaults to the configured lifetime
        """
        self.redis = redis
        self.ttl_seconds = ttl_seconds or get_config().security.otp_lifetime_seconds

    def _key(self, email: str) -> str:
        return f"{self.key_prefix}{email.strip().lower()}"

    async def save(self, email: str, code: str) -> None:
        """Store a code, replacing any earlier one for the same email."""
        await self.redis.setex(self._key(email), self.ttl_seconds, code)
        logger.debug("OTP stored", email=email, ttl=self.ttl_seconds)

    async def verify(self, email: str, code: str) -> bool:
        """Check a code and consume it on success.

        Returns:
            True when the code matches an unexpired entry
        """
        key = self._key(email)
        stored = await self.redis.get(key)
        if stored is None or stored != str(code).strip():
            return False
        await self.redis.delete(key)
        return True

    async def discard(self, email: str) -> None:
        """Drop any pending code for an email."""
        await self.redis.delete(self._key(email))
