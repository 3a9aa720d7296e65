"""
Structured error handling for services.

ServiceError is the raiseable unit; the factories build common variants and
ServiceErrorKernel bundles per-service defaults.
"""

from .factories import (
    create_access_denied_error,
    create_authorization_required_error,
    create_input_validation_error,
    raise_access_denied,
    raise_authorization_required,
    raise_input_validation_error,
)
from .kernel import ServiceErrorKernel
from .service_error import ServiceError, classify_failure

__all__ = [
    "ServiceError",
    "ServiceErrorKernel",
    "classify_failure",
    "create_access_denied_error",
    "create_authorization_required_error",
    "create_input_validation_error",
    "raise_access_denied",
    "raise_authorization_required",
    "raise_input_validation_error",
]
