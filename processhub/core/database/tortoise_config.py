"""
Tortoise ORM configuration for ProcessHub.

Simple, single-file configuration for all database operations. The driver
keeps one pool per process (sized by ``DB_POOL_SIZE``) and every request
reuses it.
"""

from typing import Any, Dict, Optional

from tortoise import Tortoise, connections
from tortoise.exceptions import BaseORMException

from ..config import get_config
from ..logging import get_logger

logger = get_logger("core.database")

MODEL_MODULES = [
    "processhub.core.models.tortoise_models",
    "processhub.core.auth.tortoise_models",
]

_initialized = False


def get_database_url() -> str:
    """Get database connection URL from configuration."""
    return get_config().get_database_url()


def get_tortoise_config(db_url: Optional[str] = None) -> Dict[str, Any]:
    """Build the Tortoise ORM configuration dict.

    Args:
        db_url: Optional URL override, defaults to the configured database

    Returns:
        Configuration accepted by ``Tortoise.init(config=...)``
    """
    return {
        "connections": {"default": db_url or get_database_url()},
        "apps": {
            "models": {
                "models": MODEL_MODULES,
                "default_connection": "default",
            },
        },
        "use_tz": True,
        "timezone": "UTC",
    }


async def init_tortoise(db_url: Optional[str] = None) -> None:
    """Initialize Tortoise ORM."""
    global _initialized
    config = get_config()
    await Tortoise.init(config=get_tortoise_config(db_url))
    if config.database.generate_schemas or config.is_testing():
        await Tortoise.generate_schemas(safe=True)
    _initialized = True
    logger.info(
        "Tortoise ORM initialized",
        environment=config.environment.value,
        pool_size=config.database.pool_size,
    )


async def close_tortoise() -> None:
    """Close Tortoise ORM connections."""
    global _initialized
    await Tortoise.close_connections()
    _initialized = False
    logger.info("Tortoise ORM connections closed")


async def ping_database() -> bool:
    """Run a trivial query against the default connection.

    Returns:
        True when the database answered, False otherwise
    """
    if not _initialized:
        return False
    try:
        await connections.get("default").execute_query("SELECT 1")
        return True
    except (BaseORMException, OSError, KeyError) as e:
        logger.warning("Database ping failed", error=str(e))
        return False


async def ensure_connection() -> None:
    """Reinitialise the ORM when the cached pool no longer answers."""
    if await ping_database():
        return

    logger.warning("Database connection lost, reconnecting")
    if _initialized:
        try:
            await close_tortoise()
        except (BaseORMException, OSError) as e:
            logger.warning("Error closing stale connections", error=str(e))
    await init_tortoise()
