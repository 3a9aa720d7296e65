"""
ServiceErrorKernel - per-service convenience wrapper.

Holds the values every error raised by one service shares (service name,
trace id, environment, default status, detail level) so call sites only
supply what is specific to the failure.
"""

from __future__ import annotations

import uuid
from typing import Any

from opentelemetry import trace

from ..config import Settings
from ..config_enums import DetailLevel, Environment
from ..error_enums import ErrorCode
from ..logging_utils import create_service_logger, log_service_error
from ..models.error_models import ErrorPayload
from .service_error import ServiceError

logger = create_service_logger("service_errors.kernel")


class ServiceErrorKernel:
    """Creates, converts and renders ServiceErrors on behalf of one service."""

    def __init__(
        self,
        service_name: str,
        environment: Environment | str = Environment.PRODUCTION,
        trace_id: str | None = None,
        default_http_status_code: int = 500,
        detail_level: DetailLevel | int = DetailLevel.MINIMAL,
    ) -> None:
        self.service_name = service_name
        self.environment = environment
        self.trace_id = trace_id or self.generate_trace_id()
        self.default_http_status_code = default_http_status_code
        self.detail_level = detail_level

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, trace_id: str | None = None
    ) -> ServiceErrorKernel:
        settings = settings or Settings()
        return cls(
            service_name=settings.SERVICE_NAME,
            environment=settings.ENVIRONMENT,
            trace_id=trace_id,
            default_http_status_code=settings.DEFAULT_HTTP_STATUS_CODE,
            detail_level=settings.DETAIL_LEVEL,
        )

    @staticmethod
    def generate_trace_id() -> str:
        """Return the active OpenTelemetry trace id, or a fresh random id."""
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            return format(span_context.trace_id, "032x")
        return uuid.uuid4().hex

    def create_error(
        self,
        error_code: ErrorCode | str,
        message: str,
        http_status_code: int | None = None,
        details: dict[str, Any] | None = None,
        inner_error: BaseException | None = None,
        exception_type: str | None = None,
    ) -> ServiceError:
        inner_payload = None
        if inner_error is not None:
            inner_payload = self.from_failure(inner_error).payload

        code = error_code.value if isinstance(error_code, ErrorCode) else error_code
        payload = ErrorPayload(
            message=message,
            error_code=code,
            service=self.service_name,
            trace_id=self.trace_id,
            exception_type=exception_type,
            details=details,
            inner_error=inner_payload,
        )
        return ServiceError(
            payload,
            http_status_code or self.default_http_status_code,
            previous=inner_error,
        )

    def from_failure(
        self, failure: BaseException, http_status_code: int | None = None
    ) -> ServiceError:
        """Convert any exception, stamping this kernel's service name and trace id."""
        error = ServiceError.from_failure(
            failure,
            self.service_name,
            http_status_code or self.default_http_status_code,
        )
        error._backfill(trace_id=self.trace_id)
        logger.debug(
            "Converted failure to ServiceError",
            error_code=error.error_code,
            exception_type=error.exception_type,
            trace_id=error.trace_id,
        )
        return error

    def to_api_response(self, error: BaseException) -> tuple[dict[str, Any], int]:
        """
        Render an error for an HTTP response.

        Returns:
            The ``{"error": {...}}`` body and the HTTP status code to send
        """
        service_error = self.from_failure(error)
        log_service_error(logger, service_error, "Returning error response")
        body = service_error.to_api_response(self.detail_level, self.environment)
        status = service_error.http_status_code or self.default_http_status_code
        return body, status
