"""Structured error payload exchanged between services.

ErrorPayload: immutable record describing one error occurrence, with an
optional nested ErrorPayload forming the cause chain.
MalformedPayload: raised (or returned inside a Result) when an external
representation cannot be turned into an ErrorPayload.

Wire shape produced by ErrorPayload.to_dict():
    {
        "message": str,
        "code": str,
        "service": str | None,
        "timestamp": str,               # ISO-8601
        "traceId": str | None,
        "exception_type": str | None,
        "details": dict | None,
        "inner_error": {...} | None,    # same shape, recursively
        "stack_trace": list[str] | None,
        "http_status_code": int | None,
    }
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config_enums import DetailLevel, Environment
from ..utils.result import Result

__all__ = ["ErrorPayload", "MalformedPayload", "MAX_CHAIN_DEPTH"]

# Upper bound on inner_error nesting accepted from external input
MAX_CHAIN_DEPTH = 32


class MalformedPayload(ValueError):
    """An external error representation is missing or mistypes a required field."""


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the value of the first key that is set to a non-None value."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _normalize_environment(environment: Environment | str) -> str:
    if isinstance(environment, Environment):
        return environment.value
    return str(environment).strip().lower()


def _clamp_detail_level(detail_level: Any) -> int:
    try:
        level = int(detail_level)
    except (TypeError, ValueError):
        return DetailLevel.MINIMAL
    return max(DetailLevel.MINIMAL, min(DetailLevel.VERBOSE, level))


class ErrorPayload(BaseModel):
    """All data describing a single error occurrence.

    The model is frozen: enrichment (service, status code, ...) produces a new
    instance through ``model_copy(update=...)``. Because no instance can be
    mutated after construction, an inner_error can never point back to one
    of its ancestors and every cause chain is finite.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    message: str = Field(min_length=1, description="Human-readable description")
    error_code: str = Field(
        min_length=1, description="Machine-readable category, e.g. 'access_denied'"
    )
    service: str | None = Field(default=None, description="Name of the originating service")
    timestamp: str = Field(
        default_factory=_now_iso,
        min_length=1,
        description="ISO-8601 creation time, stamped if absent",
    )
    trace_id: str | None = Field(default=None, description="Correlation id across services")
    exception_type: str | None = Field(
        default=None, description="Short type name of the originating failure"
    )
    details: dict[str, Any] | None = Field(default=None, description="Structured context")
    inner_error: ErrorPayload | None = Field(default=None, description="Cause of this error")
    stack_trace: list[str] | None = Field(default=None, description="Formatted stack frames")
    http_status_code: int | None = Field(
        default=None, description="Suggested HTTP status for transport layers"
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def _default_timestamp(cls, value: Any) -> Any:
        return _now_iso() if value is None else value

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse(
        cls, data: Any, *, max_depth: int = MAX_CHAIN_DEPTH
    ) -> Result[ErrorPayload, MalformedPayload]:
        """Parse a raw mapping without raising.

        Accepts both naming schemes seen on the wire: ``code``/``errorCode``
        for the error code and ``traceId``/``trace_id`` for the trace id.
        A malformed inner_error fails the whole parse.
        """
        return cls._parse(data, depth=1, max_depth=max_depth)

    @classmethod
    def _parse(
        cls, data: Any, *, depth: int, max_depth: int
    ) -> Result[ErrorPayload, MalformedPayload]:
        if not isinstance(data, Mapping):
            return Result.err(MalformedPayload("Error payload must be an object."))
        if depth > max_depth:
            return Result.err(
                MalformedPayload(f"Error payload nesting exceeds {max_depth} levels.")
            )

        message = data.get("message")
        if not isinstance(message, str):
            return Result.err(MalformedPayload("Required field 'message' not set."))
        error_code = _first_present(data, "code", "errorCode")
        if not isinstance(error_code, str):
            return Result.err(MalformedPayload("Required field 'code' not set."))

        inner_error: ErrorPayload | None = None
        raw_inner = data.get("inner_error")
        if raw_inner is not None:
            inner_result = cls._parse(raw_inner, depth=depth + 1, max_depth=max_depth)
            if inner_result.is_err:
                return inner_result
            inner_error = inner_result.value

        fields: dict[str, Any] = {
            "message": message,
            "error_code": error_code,
            "service": data.get("service"),
            "timestamp": data.get("timestamp"),
            "trace_id": _first_present(data, "traceId", "trace_id"),
            "exception_type": data.get("exception_type"),
            "details": data.get("details"),
            "inner_error": inner_error,
            "stack_trace": data.get("stack_trace"),
            "http_status_code": data.get("http_status_code"),
        }
        try:
            payload = cls.model_validate(
                {key: value for key, value in fields.items() if value is not None}, strict=True
            )
        except ValidationError as exc:
            fields_in_error = ", ".join(
                ".".join(str(part) for part in error["loc"]) for error in exc.errors()
            )
            return Result.err(MalformedPayload(f"Invalid error payload field(s): {fields_in_error}"))
        return Result.ok(payload)

    @classmethod
    def from_dict(cls, data: Any, strict: bool = False) -> ErrorPayload | None:
        """Parse a raw mapping.

        Args:
            data: Mapping in the shape produced by ``to_dict``
            strict: Raise MalformedPayload on invalid input instead of returning None

        Returns:
            The parsed payload, or None if the input is invalid and strict is False
        """
        result = cls.parse(data)
        if result.is_ok:
            return result.value
        if strict:
            raise result.error
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.error_code,
            "service": self.service,
            "timestamp": self.timestamp,
            "traceId": self.trace_id,
            "exception_type": self.exception_type,
            "details": self.details,
            "inner_error": self.inner_error.to_dict() if self.inner_error else None,
            "stack_trace": self.stack_trace,
            "http_status_code": self.http_status_code,
        }

    # ------------------------------------------------------------------
    # Cause chain
    # ------------------------------------------------------------------

    def iter_chain(self) -> Iterator[ErrorPayload]:
        """Yield this payload followed by each inner payload."""
        current: ErrorPayload | None = self
        while current is not None:
            yield current
            current = current.inner_error

    def root_cause(self) -> ErrorPayload:
        root = self
        while root.inner_error is not None:
            root = root.inner_error
        return root

    def all_messages(self) -> list[str]:
        return [payload.message for payload in self.iter_chain()]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_for_api(
        self,
        detail_level: DetailLevel | int = DetailLevel.MINIMAL,
        environment: Environment | str = Environment.PRODUCTION,
    ) -> dict[str, Any]:
        """Render the payload for an API consumer.

        Level 0 exposes code, message, service and http_status_code only.
        Level 1 and above add timestamp, trace_id and exception_type, plus the
        inner error rendered the same way. Details and stack trace are added
        only outside production and only from level 1 upward.
        """
        level = _clamp_detail_level(detail_level)
        include_sensitive = (
            _normalize_environment(environment) != Environment.PRODUCTION.value
            and level > DetailLevel.MINIMAL
        )

        rendered: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
            "service": self.service,
            "http_status_code": self.http_status_code,
        }
        if level >= DetailLevel.NORMAL:
            rendered["timestamp"] = self.timestamp
            rendered["trace_id"] = self.trace_id
            rendered["exception_type"] = self.exception_type
        if include_sensitive:
            if self.details:
                rendered["details"] = self.details
            if self.stack_trace is not None:
                rendered["stack_trace"] = self.stack_trace
        if self.inner_error is not None and level >= DetailLevel.NORMAL:
            rendered["inner_error"] = self.inner_error.render_for_api(level, environment)
        return rendered
