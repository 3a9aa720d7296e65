"""
Construction helpers for common service errors.

Each helper builds a ServiceError pre-populated with a fixed error code and
HTTP status, tagged with a variant name that ends up as exception_type.
The ``raise_*`` counterparts raise the error directly.
"""

from __future__ import annotations

from typing import Any, NoReturn

from ..error_enums import DEFAULT_HTTP_STATUS_CODES, ErrorCode
from ..models.error_models import ErrorPayload
from .service_error import ServiceError


def _create_tagged_error(
    error_code: ErrorCode,
    variant: str,
    message: str,
    details: dict[str, Any] | None = None,
    inner_error: BaseException | None = None,
    service: str | None = None,
    trace_id: str | None = None,
) -> ServiceError:
    inner_payload = None
    if inner_error is not None:
        inner_payload = ServiceError.from_failure(inner_error, service).payload

    payload = ErrorPayload(
        message=message,
        error_code=error_code.value,
        service=service,
        trace_id=trace_id,
        details=details,
        inner_error=inner_payload,
    )
    return ServiceError(
        payload,
        DEFAULT_HTTP_STATUS_CODES[error_code],
        previous=inner_error,
        variant=variant,
    )


# =============================================================================
# Access control
# =============================================================================


def create_access_denied_error(
    message: str,
    details: dict[str, Any] | None = None,
    inner_error: BaseException | None = None,
    service: str | None = None,
    trace_id: str | None = None,
) -> ServiceError:
    """Caller is authenticated but not allowed to perform the operation (403)."""
    return _create_tagged_error(
        ErrorCode.ACCESS_DENIED,
        "AccessDenied",
        message,
        details=details,
        inner_error=inner_error,
        service=service,
        trace_id=trace_id,
    )


def create_authorization_required_error(
    message: str = "Authorization is required for this endpoint",
    service: str | None = None,
    trace_id: str | None = None,
) -> ServiceError:
    """Request carries no usable credentials (401)."""
    return _create_tagged_error(
        ErrorCode.AUTHORIZATION_REQUIRED,
        "AuthorizationRequired",
        message,
        service=service,
        trace_id=trace_id,
    )


# =============================================================================
# Input validation
# =============================================================================


def create_input_validation_error(
    message: str,
    details: dict[str, Any] | None = None,
    inner_error: BaseException | None = None,
    service: str | None = None,
    trace_id: str | None = None,
) -> ServiceError:
    """Request input failed validation (400). Put per-field problems in ``details``."""
    return _create_tagged_error(
        ErrorCode.INPUT_VALIDATION_ERROR,
        "InputValidation",
        message,
        details=details,
        inner_error=inner_error,
        service=service,
        trace_id=trace_id,
    )


def raise_access_denied(
    message: str,
    details: dict[str, Any] | None = None,
    inner_error: BaseException | None = None,
    service: str | None = None,
    trace_id: str | None = None,
) -> NoReturn:
    raise create_access_denied_error(
        message, details=details, inner_error=inner_error, service=service, trace_id=trace_id
    )


def raise_authorization_required(
    message: str = "Authorization is required for this endpoint",
    service: str | None = None,
    trace_id: str | None = None,
) -> NoReturn:
    raise create_authorization_required_error(message, service=service, trace_id=trace_id)


def raise_input_validation_error(
    message: str,
    details: dict[str, Any] | None = None,
    inner_error: BaseException | None = None,
    service: str | None = None,
    trace_id: str | None = None,
) -> NoReturn:
    raise create_input_validation_error(
        message, details=details, inner_error=inner_error, service=service, trace_id=trace_id
    )
