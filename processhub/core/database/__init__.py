"""
Database package for ProcessHub.

This package provides Tortoise ORM configuration and connection utilities.
"""

from .tortoise_config import (
    close_tortoise,
    ensure_connection,
    get_tortoise_config,
    init_tortoise,
    ping_database,
)

__all__ = [
    "get_tortoise_config",
    "init_tortoise",
    "close_tortoise",
    "ping_database",
    "ensure_connection",
]
