"""
service_errors.config_enums - Enums related to runtime configuration.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class Environment(str, Enum):
    """Defines application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class DetailLevel(IntEnum):
    """How much of an error payload is exposed in an API response."""

    MINIMAL = 0
    NORMAL = 1
    VERBOSE = 2
