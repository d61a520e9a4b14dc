"""
Core module for ProcessHub.

This module contains the fundamental components of ProcessHub including
configuration management, logging setup, persistence and domain services.
"""

from .config import ProcessHubConfig
from .errors import (
    BadRequestError,
    ErrorType,
    ForbiddenError,
    NotFoundError,
    ProcessHubHTTPError,
    ServiceError,
    UnauthorizedError,
    create_error_response,
)

__all__ = [
    "ProcessHubConfig",
    "ErrorType",
    "ProcessHubHTTPError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ServiceError",
    "create_error_response",
]
