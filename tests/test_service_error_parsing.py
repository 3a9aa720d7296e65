"""
Unit tests for parsing ServiceErrors from the ``{"error": {...}}`` envelope.

Covers JSON text and bytes input, strict and non-strict failure modes, and
the envelope round trip across a process boundary.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from structlog.testing import capture_logs

from service_errors import ErrorPayload, MalformedPayload, ServiceError


@pytest.fixture
def wire_envelope() -> dict[str, Any]:
    """Provide an envelope as another service would send it."""
    return {
        "error": {
            "code": "access_denied",
            "message": "Not your order",
            "service": "order-service",
            "http_status_code": 403,
            "timestamp": "2024-05-01T12:00:00+00:00",
            "trace_id": "4bf92f3577b34da6",
            "exception_type": "AccessDenied",
            "details": {"order_id": 7},
            "stack_trace": ["Thrown in /srv/orders.py on line 12"],
            "inner_error": {
                "code": "INVALID_ARGUMENT",
                "message": "owner mismatch",
                "service": "order-service",
            },
        }
    }


class TestFromDict:
    """Test ServiceError.from_dict."""

    def test_parses_wire_envelope(self, wire_envelope: dict[str, Any]) -> None:
        error = ServiceError.from_dict(wire_envelope, strict=True)

        assert isinstance(error, ServiceError)
        assert error.error_code == "access_denied"
        assert error.message == "Not your order"
        assert error.trace_id == "4bf92f3577b34da6"
        assert error.http_status_code == 403
        assert error.details == {"order_id": 7}
        assert error.all_messages() == ["Not your order", "owner mismatch"]

    def test_parsed_error_not_backfilled(self) -> None:
        """Test a remote error keeps absent fields absent instead of local values."""
        error = ServiceError.from_dict({"error": {"message": "m", "code": "c"}}, strict=True)

        assert error is not None
        assert error.exception_type is None
        assert error.stack_trace is None
        assert error.http_status_code is None

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"message": "m", "code": "c"},
            {"error": None},
            {"error": "access_denied"},
            {"error": ["m", "c"]},
            {"error": {}},
            {"error": {"message": "m"}},
            {"error": {"message": "m", "code": "c", "inner_error": {"code": "x"}}},
            [],
            "error",
        ],
    )
    def test_invalid_envelopes(self, data: Any) -> None:
        with pytest.raises(MalformedPayload):
            ServiceError.from_dict(data, strict=True)
        assert ServiceError.from_dict(data, strict=False) is None

    def test_non_strict_failure_logged(self) -> None:
        with capture_logs() as logs:
            assert ServiceError.from_dict({"error": {}}) is None

        assert any(
            entry["event"] == "Discarding malformed error payload"
            and entry["log_level"] == "debug"
            for entry in logs
        )


class TestFromJson:
    """Test ServiceError.from_json."""

    def test_parses_text(self, wire_envelope: dict[str, Any]) -> None:
        error = ServiceError.from_json(json.dumps(wire_envelope), strict=True)

        assert error is not None
        assert error.service == "order-service"

    def test_parses_bytes(self, wire_envelope: dict[str, Any]) -> None:
        error = ServiceError.from_json(json.dumps(wire_envelope).encode("utf-8"), strict=True)

        assert error is not None
        assert error.error_code == "access_denied"

    def test_leading_whitespace_allowed(self) -> None:
        error = ServiceError.from_json('  \n{"error": {"message": "m", "code": "c"}}')

        assert error is not None

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "null",
            "[]",
            '"error"',
            "{not json",
            '{"error": {"message": "m"}}',
            '{"error": 5}',
            b"\xff\xfe{}",
        ],
    )
    def test_invalid_documents(self, text: Any) -> None:
        with pytest.raises(MalformedPayload):
            ServiceError.from_json(text, strict=True)
        assert ServiceError.from_json(text) is None

    def test_invalid_json_reason(self) -> None:
        with pytest.raises(MalformedPayload, match="Invalid JSON provided"):
            ServiceError.from_json("{not json", strict=True)

    def test_deeply_nested_document_rejected(self) -> None:
        """Test JSON nested beyond the decoder's recursion limit is treated as invalid."""
        text = '{"error": ' + '{"a": ' * 100000 + "1" + "}" * 100001

        with pytest.raises(MalformedPayload, match="nesting too deep"):
            ServiceError.from_json(text, strict=True)
        assert ServiceError.from_json(text) is None

    def test_envelope_round_trip(self, full_payload: ErrorPayload) -> None:
        """Test an error survives serialization to JSON and back."""
        original = ServiceError(full_payload)

        restored = ServiceError.from_json(original.to_json(), strict=True)

        assert restored is not None
        assert restored.payload == original.payload
        assert restored.all_messages() == original.all_messages()

    def test_round_trip_of_converted_failure(self) -> None:
        try:
            raise ValueError("bad input")
        except ValueError as exc:
            original = ServiceError.from_failure(exc, "svc")

        restored = ServiceError.from_json(original.to_json(), strict=True)

        assert restored is not None
        assert restored.payload == original.payload
        assert restored.stack_trace == original.stack_trace
