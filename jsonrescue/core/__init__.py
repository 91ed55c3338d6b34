"""
Recovery Core — the components behind `recover_json`.

  - guard: size limit enforced before any parsing
  - strict: single-document RFC 8259 parsing
  - fragments: largest valid object/array embedded in free text
  - lines: line-oriented corruption isolation and reconstruction
  - diagnostics: append-only warning log
  - serializer: cycle-safe JSON rendering
  - engine: the fail-soft pipeline tying them together
"""

from jsonrescue.core.diagnostics import DiagnosticsLog
from jsonrescue.core.engine import JsonRecoveryEngine, get_engine, recover_json
from jsonrescue.core.fragments import (
    Fragment,
    extract_largest_fragment,
    find_largest_fragment,
    iter_balanced_spans,
)
from jsonrescue.core.guard import check_size
from jsonrescue.core.lines import PLACEHOLDER_PREFIX, LineRecovery, detect_shape
from jsonrescue.core.serializer import CIRCULAR_MARKER, serialize_safe
from jsonrescue.core.strict import parse_strict, parse_strict_span

__all__ = [
    "DiagnosticsLog",
    "JsonRecoveryEngine",
    "get_engine",
    "recover_json",
    "Fragment",
    "extract_largest_fragment",
    "find_largest_fragment",
    "iter_balanced_spans",
    "check_size",
    "PLACEHOLDER_PREFIX",
    "LineRecovery",
    "detect_shape",
    "CIRCULAR_MARKER",
    "serialize_safe",
    "parse_strict",
    "parse_strict_span",
]
