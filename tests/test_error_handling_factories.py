"""
Unit tests for the error construction helpers.

Validates the fixed code/status pairs, variant tagging, inner error
conversion and the raising counterparts.
"""

from __future__ import annotations

from typing import Any

import pytest

from service_errors import (
    ErrorCode,
    ServiceError,
    create_access_denied_error,
    create_authorization_required_error,
    create_input_validation_error,
    raise_access_denied,
    raise_authorization_required,
    raise_input_validation_error,
)


@pytest.fixture
def test_details() -> dict[str, Any]:
    """Provide consistent error details for testing."""
    return {"field": "email", "reason": "format"}


class TestCreateHelpers:
    """Test create_* helpers."""

    def test_access_denied(self, test_details: dict[str, Any]) -> None:
        error = create_access_denied_error(
            "Not allowed", details=test_details, service="order-service", trace_id="t-1"
        )

        assert error.error_code == ErrorCode.ACCESS_DENIED.value == "access_denied"
        assert error.http_status_code == 403
        assert error.exception_type == "AccessDenied"
        assert error.details == test_details
        assert error.service == "order-service"
        assert error.trace_id == "t-1"
        assert error.stack_trace is not None
        assert "test_error_handling_factories.py" in error.stack_trace[0]

    def test_authorization_required_default_message(self) -> None:
        error = create_authorization_required_error()

        assert error.error_code == "authorization_required"
        assert error.message == "Authorization is required for this endpoint"
        assert error.http_status_code == 401
        assert error.exception_type == "AuthorizationRequired"
        assert error.details is None

    def test_input_validation(self, test_details: dict[str, Any]) -> None:
        error = create_input_validation_error("Invalid email", details=test_details)

        assert error.error_code == "input_validation_error"
        assert error.http_status_code == 400
        assert error.exception_type == "InputValidation"
        assert error.service is None

    def test_inner_native_error_converted(self) -> None:
        cause = ValueError("not an email")

        error = create_input_validation_error("Invalid email", inner_error=cause, service="svc")

        inner = error.inner_error
        assert inner is not None
        assert inner.error_code == ErrorCode.INVALID_ARGUMENT.value
        assert inner.exception_type == "ValueError"
        assert inner.service == "svc"
        assert error.__cause__ is cause
        assert error.all_messages() == ["Invalid email", "not an email"]

    def test_inner_service_error_reused(self) -> None:
        cause = create_authorization_required_error(service="auth-service")

        error = create_access_denied_error("Denied", inner_error=cause)

        assert error.payload.inner_error == cause.payload
        assert error.root_cause().error_code == "authorization_required"


class TestRaiseHelpers:
    """Test raise_* helpers."""

    def test_raise_access_denied(self) -> None:
        with pytest.raises(ServiceError) as exc_info:
            raise_access_denied("Not allowed", service="svc")

        assert exc_info.value.error_code == "access_denied"
        assert exc_info.value.http_status_code == 403

    def test_raise_authorization_required(self) -> None:
        with pytest.raises(ServiceError) as exc_info:
            raise_authorization_required()

        assert exc_info.value.http_status_code == 401
        assert str(exc_info.value) == (
            "[authorization_required] Authorization is required for this endpoint"
        )

    def test_raise_input_validation_error(self, test_details: dict[str, Any]) -> None:
        with pytest.raises(ServiceError) as exc_info:
            raise_input_validation_error("Invalid email", details=test_details)

        assert exc_info.value.error_code == "input_validation_error"
        assert exc_info.value.details == test_details
