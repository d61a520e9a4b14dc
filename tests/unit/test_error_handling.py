"""
Tests for error categorization and the HTTP error envelope.
"""

import pytest

from processhub.core.errors import (
    BadRequestError,
    ErrorType,
    ForbiddenError,
    NotFoundError,
    ProcessHubHTTPError,
    ServiceError,
    UnauthorizedError,
    create_error_response,
)


@pytest.mark.unit
class TestErrorHandling:
    """Test the error handling implementation."""

    def test_error_type_enum(self) -> None:
        """Test error type enum values."""
        assert ErrorType.VALIDATION_ERROR.value == "validation_error"
        assert ErrorType.AUTHENTICATION_ERROR.value == "authentication_error"
        assert ErrorType.AUTHORIZATION_ERROR.value == "authorization_error"
        assert ErrorType.NOT_FOUND_ERROR.value == "not_found_error"
        assert ErrorType.UNKNOWN_ERROR.value == "unknown_error"

    def test_create_error_response(self) -> None:
        """Test the envelope with and without optional keys."""
        response = create_error_response("Broken", ErrorType.PROCESSING_ERROR)
        assert response == {
            "success": False,
            "error": "Broken",
            "errorType": "processing_error",
        }

        response = create_error_response(
            "Missing", path="/api/kpis", context={"fields": ["kpi"]}
        )
        assert response["path"] == "/api/kpis"
        assert response["fields"] == ["kpi"]
        assert response["errorType"] == "unknown_error"

    @pytest.mark.parametrize(
        "error_class,status_code,error_type",
        [
            (BadRequestError, 400, ErrorType.VALIDATION_ERROR),
            (UnauthorizedError, 401, ErrorType.AUTHENTICATION_ERROR),
            (ForbiddenError, 403, ErrorType.AUTHORIZATION_ERROR),
            (NotFoundError, 404, ErrorType.NOT_FOUND_ERROR),
            (ServiceError, 500, ErrorType.PROCESSING_ERROR),
        ],
    )
    def test_http_errors(self, error_class, status_code, error_type) -> None:
        """Each error carries its status and envelope."""
        error = error_class("Something happened")

        assert isinstance(error, ProcessHubHTTPError)
        assert error.status_code == status_code
        assert error.message == "Something happened"
        assert error.detail == {
            "success": False,
            "error": "Something happened",
            "errorType": error_type.value,
        }

    def test_status_override_and_context(self) -> None:
        """Status codes and extra keys can be supplied per raise."""
        error = BadRequestError("Conflict", status_code=409, context={"id": "x"})
        assert error.status_code == 409
        assert error.detail["id"] == "x"
