"""
Redis client for ProcessHub.

This module provides Redis connection management, health checks and the
small set of commands used for short-lived state such as sign-up codes.
"""

from typing import Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from .config import get_config
from .logging import get_logger


class RedisManager:
    """Redis connection manager with connection pooling and health checks."""

    def __init__(self) -> None:
        """Initialize Redis manager."""
        self.config = get_config().redis
        self.logger = get_logger("core.redis")

        self.pool: Optional[ConnectionPool] = None
        self.client: Optional[Redis] = None
        self._healthy = False

    async def initialize(self) -> None:
        """Initialize Redis connection pool and client."""
        try:
            self.pool = ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                password=self.config.password,
                db=self.config.db,
                max_connections=self.config.max_connections,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                retry_on_timeout=self.config.retry_on_timeout,
                decode_responses=True,
            )
            self.client = Redis(connection_pool=self.pool)

            await self.client.ping()
            self._healthy = True

            self.logger.info(
                "Redis connection established",
                host=self.config.host,
                port=self.config.port,
            )
        except (RedisError, OSError) as e:
            self.logger.error("Failed to initialize Redis connection", error=str(e))
            self._healthy = False
            raise

    async def close(self) -> None:
        """Close Redis connections and cleanup."""
        try:
            if self.client:
                await self.client.aclose()
            if self.pool:
                await self.pool.disconnect()
            self.logger.info("Redis connections closed")
        except RedisError as e:
            self.logger.error("Error closing Redis connections", error=str(e))
        finally:
            self._healthy = False
            self.client = None
            self.pool = None

    async def ping(self) -> bool:
        """Check Redis connection health."""
        if not self.client:
            return False
        try:
            await self.client.ping()
            self._healthy = True
        except (RedisError, OSError) as e:
            self._healthy = False
            self.logger.warning("Redis health check failed", error=str(e))
        return self._healthy

    async def get_client(self) -> Redis:
        """Get Redis client instance."""
        if not self.client or not self._healthy:
            raise RedisError("Redis connection not available")
        return self.client

    async def get(self, key: str) -> Optional[str]:
        """Get value from Redis."""
        try:
            client = await self.get_client()
            result = await client.get(key)
            return result if result is None else str(result)
        except RedisError as e:
            self.logger.error("Redis GET error", key=key, error=str(e))
            raise

    async def setex(self, key: str, ex: int, value: str) -> bool:
        """Set value in Redis with expiration."""
        try:
            client = await self.get_client()
            result = await client.setex(key, ex, value)
            return bool(result)
        except RedisError as e:
            self.logger.error("Redis SETEX error", key=key, error=str(e))
            raise

    async def delete(self, key: str) -> int:
        """Delete key from Redis."""
        try:
            client = await self.get_client()
            result = await client.delete(key)
            return int(result)
        except RedisError as e:
            self.logger.error("Redis DELETE error", key=key, error=str(e))
            raise


# Global Redis manager instance
redis_manager = RedisManager()


async def initialize_redis() -> None:
    """Initialize Redis connection."""
    await redis_manager.initialize()


async def close_redis() -> None:
    """Close Redis connection."""
    await redis_manager.close()
