"""
Structured logging utilities using structlog.

Key Features:
- Environment-based output formatting (JSON in production, console elsewhere)
- Service context processor aligned with OpenTelemetry semantic conventions
- Helper for logging a ServiceError together with its cause chain
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.typing import Processor

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .error_handling.service_error import ServiceError


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Add service context to all logs.

    Fields added:
    - service.name: Logical service name (from SERVICE_NAME env var)
    - deployment.environment: Environment (development/staging/production)
    """
    event_dict["service.name"] = os.getenv("SERVICE_NAME", "unknown")
    event_dict["deployment.environment"] = os.getenv("ENVIRONMENT", "development")
    return event_dict


def configure_service_logging(
    service_name: str,
    environment: str | None = None,
    log_level: str = "INFO",
) -> None:
    """
    Configure structlog for a service.

    Args:
        service_name: Name of the service (e.g., "billing-service")
        environment: Environment name (defaults to ENVIRONMENT env var)
        log_level: Logging level (defaults to "INFO")

    Environment Variables:
        LOG_FORMAT: Output format - "json" for JSON, "console" for human-readable
            (default: json in production, console elsewhere)
    """
    if environment is None:
        environment = os.getenv("ENVIRONMENT", "development")

    os.environ.setdefault("SERVICE_NAME", service_name)
    os.environ.setdefault("ENVIRONMENT", environment)

    log_format = os.getenv("LOG_FORMAT", "").lower()
    use_json = log_format == "json" or (not log_format and environment == "production")

    shared: list[Processor] = [
        merge_contextvars,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if use_json:
        processors = [
            *shared,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared,
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    logging.basicConfig(
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_service_logger(name: str | None = None) -> Any:
    """
    Create a service logger with optional name binding.

    Args:
        name: Optional logger name (e.g., "kernel", "api")

    Returns:
        A structlog bound logger
    """
    logger = structlog.get_logger()

    if name:
        logger = logger.bind(logger_name=name)

    return logger


def log_service_error(
    logger: Any,
    error: ServiceError,
    message: str = "Service error",
    **additional_context: Any,
) -> None:
    """
    Log a ServiceError with its structured fields and cause chain.

    Errors with a 5xx (or unset) status are logged at error level, everything
    else at warning level.
    """
    status = error.http_status_code
    log = logger.error if status is None or status >= 500 else logger.warning
    log(
        message,
        error_code=error.error_code,
        error_message=error.message,
        service=error.service,
        trace_id=error.trace_id,
        exception_type=error.exception_type,
        http_status_code=status,
        caused_by=error.all_messages()[1:],
        **additional_context,
    )
