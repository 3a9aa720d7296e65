"""Data models for structured service errors."""

from .error_models import MAX_CHAIN_DEPTH, ErrorPayload, MalformedPayload

__all__ = ["ErrorPayload", "MalformedPayload", "MAX_CHAIN_DEPTH"]
