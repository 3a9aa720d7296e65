from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from service_errors import ErrorPayload


@pytest.fixture
def full_payload() -> ErrorPayload:
    """Provide a payload with every field populated and a one-level cause."""
    cause = ErrorPayload(
        message="Connection refused",
        error_code="CONNECTION_ERROR",
        service="inventory-service",
        exception_type="ConnectionRefusedError",
        stack_trace=["Thrown in /app/db.py on line 10", "#0 /app/db.py(10): connect()"],
        http_status_code=503,
    )
    return ErrorPayload(
        message="Could not load order",
        error_code="access_denied",
        service="order-service",
        timestamp="2024-05-01T12:00:00+00:00",
        trace_id="abc123",
        exception_type="AccessDenied",
        details={"order_id": 42, "reason": "owner mismatch"},
        inner_error=cause,
        stack_trace=["Thrown in /app/orders.py on line 7", "#0 /app/orders.py(7): load()"],
        http_status_code=403,
    )


@pytest.fixture
def minimal_payload() -> ErrorPayload:
    """Provide a payload with only the required fields."""
    return ErrorPayload(message="Something failed", error_code="EXCEPTION")


@pytest.fixture
def nested_payload_dict() -> Callable[[int], dict[str, Any]]:
    """Provide a builder for raw payload mappings with ``levels`` chained payloads."""

    def build(levels: int) -> dict[str, Any]:
        data: dict[str, Any] = {"message": "level 0", "code": "c"}
        for index in range(1, levels):
            data = {"message": f"level {index}", "code": "c", "inner_error": data}
        return data

    return build
