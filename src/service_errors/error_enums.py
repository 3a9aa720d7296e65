"""
service_errors.error_enums - Centralized error code definitions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    # Codes assigned when converting native exceptions
    INVALID_ARGUMENT = "INVALID_ARGUMENT"  # Caller supplied bad input
    INTERNAL_ERROR = "INTERNAL_ERROR"  # Programming or runtime fault
    EXCEPTION = "EXCEPTION"  # Anything else

    # Codes used by the construction helpers in error_handling.factories
    ACCESS_DENIED = "access_denied"
    AUTHORIZATION_REQUIRED = "authorization_required"
    INPUT_VALIDATION_ERROR = "input_validation_error"


# Suggested HTTP status for codes that carry one
DEFAULT_HTTP_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.ACCESS_DENIED: 403,
    ErrorCode.AUTHORIZATION_REQUIRED: 401,
    ErrorCode.INPUT_VALIDATION_ERROR: 400,
}
