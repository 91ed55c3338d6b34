"""
jsonrescue — Fault-tolerant JSON recovery.

Turns arbitrary text (valid JSON, JSON wrapped in prose, or JSON with
corrupt lines) into a best-effort value plus an ordered list of warnings
explaining every repair.
"""

from jsonrescue.config import RecoverySettings, get_settings
from jsonrescue.core import (
    CIRCULAR_MARKER,
    DiagnosticsLog,
    JsonRecoveryEngine,
    extract_largest_fragment,
    get_engine,
    parse_strict,
    recover_json,
    serialize_safe,
)
from jsonrescue.errors import JsonParseError, JsonRescueError, SizeLimitExceededError
from jsonrescue.logging import setup_logging
from jsonrescue.models import (
    RecoveryResult,
    RecoverySource,
    RecoveryWarning,
    WarningCode,
)
from jsonrescue.version import VERSION

__version__ = VERSION

__all__ = [
    # Operations
    "parse_strict",
    "extract_largest_fragment",
    "recover_json",
    "serialize_safe",
    "CIRCULAR_MARKER",
    # Service
    "JsonRecoveryEngine",
    "get_engine",
    "DiagnosticsLog",
    # Models
    "RecoveryResult",
    "RecoverySource",
    "RecoveryWarning",
    "WarningCode",
    # Errors
    "JsonRescueError",
    "JsonParseError",
    "SizeLimitExceededError",
    # Configuration
    "RecoverySettings",
    "get_settings",
    "setup_logging",
]
