"""
Service Errors Package.

Structured, serializable errors for service-to-service communication:
a frozen ErrorPayload with a cause chain, the raiseable ServiceError that
wraps it, and helpers for creating, parsing and rendering both.
"""

from .config import Settings
from .config_enums import DetailLevel, Environment
from .error_enums import ErrorCode
from .error_handling import (
    ServiceError,
    ServiceErrorKernel,
    classify_failure,
    create_access_denied_error,
    create_authorization_required_error,
    create_input_validation_error,
    raise_access_denied,
    raise_authorization_required,
    raise_input_validation_error,
)
from .models import MAX_CHAIN_DEPTH, ErrorPayload, MalformedPayload
from .utils import Result

__all__ = [
    "DetailLevel",
    "Environment",
    "ErrorCode",
    "ErrorPayload",
    "MAX_CHAIN_DEPTH",
    "MalformedPayload",
    "Result",
    "ServiceError",
    "ServiceErrorKernel",
    "Settings",
    "classify_failure",
    "create_access_denied_error",
    "create_authorization_required_error",
    "create_input_validation_error",
    "raise_access_denied",
    "raise_authorization_required",
    "raise_input_validation_error",
]
