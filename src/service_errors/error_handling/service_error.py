"""
ServiceError - raiseable carrier for a structured ErrorPayload.

ServiceError is what application code raises and catches. All data lives in
the wrapped ErrorPayload; this class adds interop with native Python
exceptions (stack capture, conversion of arbitrary failures, ``__cause__``
chaining) and OpenTelemetry span recording.
"""

from __future__ import annotations

import json
import os
import traceback
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..config_enums import DetailLevel, Environment
from ..error_enums import ErrorCode
from ..logging_utils import create_service_logger
from ..models.error_models import MAX_CHAIN_DEPTH, ErrorPayload, MalformedPayload

logger = create_service_logger("service_errors.service_error")

# Frames from inside this package are left out of captured stacks
_PACKAGE_ROOT = str(Path(__file__).parent.parent) + os.sep

_INTERNAL_FAULTS: tuple[type[BaseException], ...] = (
    TypeError,
    AttributeError,
    NameError,
    LookupError,
    ArithmeticError,
    AssertionError,
    RuntimeError,
    ImportError,
    MemoryError,
    SystemError,
)


def classify_failure(failure: BaseException) -> ErrorCode:
    """Map a native exception onto INVALID_ARGUMENT, INTERNAL_ERROR or EXCEPTION."""
    if isinstance(failure, ValueError):
        return ErrorCode.INVALID_ARGUMENT
    if isinstance(failure, _INTERNAL_FAULTS):
        return ErrorCode.INTERNAL_ERROR
    return ErrorCode.EXCEPTION


def _format_frames(frames: traceback.StackSummary | list[traceback.FrameSummary]) -> list[str]:
    """Format frames (oldest first) as 'Thrown in' header plus most-recent-first lines."""
    if not frames:
        return ["Thrown in <unknown> on line 0"]
    origin = frames[-1]
    lines = [f"Thrown in {origin.filename} on line {origin.lineno}"]
    for index, frame in enumerate(reversed(frames)):
        lines.append(f"#{index} {frame.filename}({frame.lineno}): {frame.name}()")
    return lines


def format_current_stack() -> list[str]:
    """Capture the caller's stack, skipping frames that belong to this package."""
    frames = traceback.extract_stack()
    outside = [frame for frame in frames if not frame.filename.startswith(_PACKAGE_ROOT)]
    return _format_frames(outside or frames)


def format_failure_stack(failure: BaseException) -> list[str]:
    """Format the traceback of a raised exception, or the current stack if never raised."""
    tb: TracebackType | None = failure.__traceback__
    if tb is None:
        return format_current_stack()
    return _format_frames(traceback.extract_tb(tb))


def _chained_cause(failure: BaseException) -> BaseException | None:
    if failure.__cause__ is not None:
        return failure.__cause__
    if failure.__suppress_context__:
        return None
    return failure.__context__


def _restore(payload: ErrorPayload) -> ServiceError:
    return ServiceError._wrap(payload)


class ServiceError(Exception):
    """
    Raiseable structured error.

    Construction back-fills the payload copy-on-write: exception_type with the
    variant tag, stack_trace with the construction call stack, and
    http_status_code with ``code`` whenever ``code`` is non-zero.

    Args:
        payload: The structured error data
        code: HTTP status code that overrides the payload's own one (0 = keep)
        previous: Native exception this error was raised from (becomes __cause__)
        variant: Type name recorded when the payload carries no exception_type
    """

    def __init__(
        self,
        payload: ErrorPayload,
        code: int = 0,
        previous: BaseException | None = None,
        *,
        variant: str = "ServiceError",
    ) -> None:
        updates: dict[str, Any] = {}
        if payload.exception_type is None:
            updates["exception_type"] = variant
        if payload.stack_trace is None:
            updates["stack_trace"] = format_current_stack()
        if code != 0:
            updates["http_status_code"] = code

        self._payload = payload.model_copy(update=updates) if updates else payload
        super().__init__(self._payload.message)
        if previous is not None:
            self.__cause__ = previous

        self._record_to_span()

    @classmethod
    def _wrap(cls, payload: ErrorPayload) -> ServiceError:
        """Wrap an existing payload as-is, without any back-fill or span recording."""
        error = cls.__new__(cls)
        error._payload = payload
        Exception.__init__(error, payload.message)
        return error

    def _backfill(self, **fields: Any) -> None:
        """Set payload fields that are currently absent; present values are kept."""
        updates = {
            name: value
            for name, value in fields.items()
            if value is not None and getattr(self._payload, name) is None
        }
        if updates:
            self._payload = self._payload.model_copy(update=updates)

    def __reduce__(self) -> tuple[Any, ...]:
        return (_restore, (self._payload,))

    def _record_to_span(self) -> None:
        """Record the error on the active OpenTelemetry span, if one is recording."""
        span = trace.get_current_span()
        if span is None or not span.is_recording():
            return

        span.record_exception(self)
        span.set_status(Status(StatusCode.ERROR, self.message))
        span.set_attribute("error", True)
        span.set_attribute("error.code", self.error_code)
        span.set_attribute("error.message", self.message)
        if self.service is not None:
            span.set_attribute("error.service", self.service)
        if self.exception_type is not None:
            span.set_attribute("error.type", self.exception_type)
        if self.http_status_code is not None:
            span.set_attribute("http.response.status_code", self.http_status_code)
        if self.trace_id is not None:
            span.set_attribute("error.trace_id", self.trace_id)

        for key, value in (self.details or {}).items():
            if isinstance(value, (str, bool, int, float)):
                span.set_attribute(f"error.details.{key}", value)
            else:
                span.set_attribute(f"error.details.{key}", str(value))

    # ------------------------------------------------------------------
    # Construction from native failures and external representations
    # ------------------------------------------------------------------

    @classmethod
    def from_failure(
        cls,
        failure: BaseException,
        service: str | None,
        http_status_code: int = 500,
    ) -> ServiceError:
        """
        Convert any exception into a ServiceError.

        An existing ServiceError is returned unchanged apart from a one-time
        back-fill of its service name. Other exceptions are classified, their
        traceback captured and their cause chain converted recursively into
        the payload's inner_error.
        """
        return cls._from_failure(failure, service, http_status_code, depth=1)

    @classmethod
    def _from_failure(
        cls,
        failure: BaseException,
        service: str | None,
        http_status_code: int,
        *,
        depth: int,
    ) -> ServiceError:
        if isinstance(failure, ServiceError):
            failure._backfill(service=service)
            return failure

        inner_payload: ErrorPayload | None = None
        cause = _chained_cause(failure)
        if cause is not None and depth < MAX_CHAIN_DEPTH:
            inner_payload = cls._from_failure(cause, service, 500, depth=depth + 1).payload

        payload = ErrorPayload(
            message=str(failure) or type(failure).__name__,
            error_code=classify_failure(failure).value,
            service=service,
            exception_type=type(failure).__name__,
            inner_error=inner_payload,
            stack_trace=format_failure_stack(failure),
            http_status_code=http_status_code,
        )
        return cls(payload, http_status_code, previous=failure)

    @classmethod
    def _reject(cls, reason: str, strict: bool) -> None:
        if strict:
            raise MalformedPayload(reason)
        logger.debug("Discarding malformed error payload", reason=reason)
        return None

    @classmethod
    def from_json(cls, text: str | bytes | bytearray, strict: bool = False) -> ServiceError | None:
        """
        Parse a JSON ``{"error": {...}}`` envelope.

        Args:
            text: JSON document, as text or UTF-8 encoded bytes
            strict: Raise MalformedPayload on invalid input instead of returning None
        """
        if isinstance(text, (bytes, bytearray)):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as exc:
                return cls._reject(f"Invalid encoding: {exc.reason}", strict)
        if not isinstance(text, str) or not text.lstrip().startswith("{"):
            return cls._reject("Invalid JSON provided: JSON must be an object.", strict)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            return cls._reject(f"Invalid JSON provided: {exc.msg}", strict)
        except RecursionError:
            return cls._reject("Invalid JSON provided: nesting too deep", strict)
        return cls.from_dict(data, strict)

    @classmethod
    def from_dict(cls, data: Any, strict: bool = False) -> ServiceError | None:
        """
        Parse a ``{"error": {...}}`` envelope mapping.

        The parsed payload is wrapped as received: no local stack trace or
        exception type is filled in for a remote error.
        """
        if not isinstance(data, Mapping):
            return cls._reject("Invalid error format: expected an object.", strict)
        body = data.get("error")
        if not isinstance(body, Mapping):
            return cls._reject('Invalid error format: "error" key missing or not an object.', strict)

        result = ErrorPayload.parse(body)
        if result.is_err:
            if strict:
                raise result.error
            logger.debug("Discarding malformed error payload", reason=str(result.error))
            return None
        return cls._wrap(result.value)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def payload(self) -> ErrorPayload:
        return self._payload

    @property
    def message(self) -> str:
        return self._payload.message

    @property
    def error_code(self) -> str:
        return self._payload.error_code

    @property
    def service(self) -> str | None:
        return self._payload.service

    @property
    def timestamp(self) -> str:
        return self._payload.timestamp

    @property
    def trace_id(self) -> str | None:
        return self._payload.trace_id

    @property
    def exception_type(self) -> str | None:
        return self._payload.exception_type

    @property
    def details(self) -> dict[str, Any] | None:
        return self._payload.details

    @property
    def inner_error(self) -> ServiceError | None:
        if self._payload.inner_error is None:
            return None
        return ServiceError._wrap(self._payload.inner_error)

    @property
    def stack_trace(self) -> list[str] | None:
        return self._payload.stack_trace

    @property
    def http_status_code(self) -> int | None:
        return self._payload.http_status_code

    def root_cause(self) -> ServiceError:
        root = self._payload.root_cause()
        return self if root is self._payload else ServiceError._wrap(root)

    def all_messages(self) -> list[str]:
        return self._payload.all_messages()

    # ------------------------------------------------------------------
    # Serialization and rendering
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the wrapped payload (without envelope)."""
        return self._payload.to_dict()

    def to_envelope(self) -> dict[str, Any]:
        return {"error": self._payload.to_dict()}

    def to_json(self) -> str:
        return json.dumps(self.to_envelope(), default=str)

    def to_api_response(
        self,
        detail_level: DetailLevel | int = DetailLevel.MINIMAL,
        environment: Environment | str = Environment.PRODUCTION,
    ) -> dict[str, Any]:
        """Envelope the payload rendered for an API consumer."""
        return {"error": self._payload.render_for_api(detail_level, environment)}

    def with_details(self, **details: Any) -> ServiceError:
        """
        Create a new ServiceError with additional details merged in.

        The original error is left unchanged.
        """
        merged = {**(self._payload.details or {}), **details}
        error = ServiceError._wrap(self._payload.model_copy(update={"details": merged}))
        error.__cause__ = self.__cause__
        return error

    def render_as_text(self, verbose: bool = False) -> str:
        """
        Human-readable summary of the error and its causes.

        The compact form is one line per error; the verbose form dumps every
        populated field. Causes follow under a "Caused by:" marker.
        """
        blocks = [
            _render_payload_verbose(p) if verbose else _render_payload_line(p)
            for p in self._payload.iter_chain()
        ]
        return "\nCaused by: ".join(blocks)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"ServiceError(code={self.error_code}, message={self.message!r}, "
            f"service={self.service}, http_status_code={self.http_status_code}, "
            f"trace_id={self.trace_id})"
        )


def _render_payload_line(payload: ErrorPayload) -> str:
    status = payload.http_status_code if payload.http_status_code is not None else "n/a"
    location = payload.stack_trace[0] if payload.stack_trace else "Thrown in <unknown>"
    return (
        f"{payload.exception_type or 'ServiceError'} [{payload.error_code}]: "
        f"'{payload.message}' (Service: '{payload.service or 'unknown'}', "
        f"HTTP Status Code: {status}, {location})"
    )


def _render_payload_verbose(payload: ErrorPayload) -> str:
    lines = [f"{payload.exception_type or 'ServiceError'} [{payload.error_code}]: {payload.message}"]
    fields: list[tuple[str, Any]] = [
        ("Service", payload.service),
        ("HTTP Status Code", payload.http_status_code),
        ("Timestamp", payload.timestamp),
        ("Trace Id", payload.trace_id),
    ]
    for label, value in fields:
        if value is not None:
            lines.append(f"  {label}: {value}")
    if payload.details:
        lines.append(f"  Details: {json.dumps(payload.details, default=str, sort_keys=True)}")
    if payload.stack_trace:
        lines.append("  Stack Trace:")
        lines.extend(f"    {frame}" for frame in payload.stack_trace)
    return "\n".join(lines)
