"""
General error handling for ProcessHub.

This module provides error categorization and the HTTP exceptions services
raise. Every exception carries the JSON envelope returned to the client in
its ``detail`` so route handlers stay free of response shaping.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ErrorType(Enum):
    """Types of errors that can occur in the system."""

    VALIDATION_ERROR = "validation_error"  # Invalid input/data format
    AUTHENTICATION_ERROR = "authentication_error"  # Missing or invalid token
    AUTHORIZATION_ERROR = "authorization_error"  # Insufficient role/ownership
    NOT_FOUND_ERROR = "not_found_error"  # Target record does not exist
    CONFLICT_ERROR = "conflict_error"  # Uniqueness violation
    PROCESSING_ERROR = "processing_error"  # Processing/execution failure
    UNKNOWN_ERROR = "unknown_error"  # Unexpected errors


def create_error_response(
    message: str,
    error_type: ErrorType = ErrorType.UNKNOWN_ERROR,
    path: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create the error envelope returned to API clients.

    Args:
        message: One-line, human readable reason
        error_type: Category of the error
        path: Request path, filled in by the exception handler when omitted
        context: Extra keys merged into the envelope

    Returns:
        Envelope of the form ``{"success": False, "error": message, ...}``
    """
    response: Dict[str, Any] = {
        "success": False,
        "error": message,
        "errorType": error_type.value,
    }
    if path is not None:
        response["path"] = path
    if context:
        response.update(context)
    return response


class ProcessHubHTTPError(HTTPException):
    """Base HTTP exception carrying the ProcessHub error envelope."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type_default = ErrorType.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_type: Optional[ErrorType] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the error with its envelope."""
        self.message = message
        self.error_type = error_type or self.error_type_default
        detail = create_error_response(message, self.error_type, context=context)
        super().__init__(
            status_code=status_code or self.status_code_default, detail=detail
        )


class BadRequestError(ProcessHubHTTPError):
    """Invalid or incomplete request input (400)."""

    status_code_default = status.HTTP_400_BAD_REQUEST
    error_type_default = ErrorType.VALIDATION_ERROR


class UnauthorizedError(ProcessHubHTTPError):
    """Missing or invalid credentials (401)."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    error_type_default = ErrorType.AUTHENTICATION_ERROR


class ForbiddenError(ProcessHubHTTPError):
    """Authenticated caller lacks permission (403)."""

    status_code_default = status.HTTP_403_FORBIDDEN
    error_type_default = ErrorType.AUTHORIZATION_ERROR


class NotFoundError(ProcessHubHTTPError):
    """Requested record does not exist (404)."""

    status_code_default = status.HTTP_404_NOT_FOUND
    error_type_default = ErrorType.NOT_FOUND_ERROR


class ServiceError(ProcessHubHTTPError):
    """Operation failed on the server side (500)."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type_default = ErrorType.PROCESSING_ERROR
