"""
Recovery Engine — the fail-soft pipeline behind `recover_json`.

Stages, in order:

  1. Size guard          (the only stage allowed to raise)
  2. Strict parse        (success ends the pipeline, zero warnings)
  3. Shape check         (object/array-wrapped text goes to line recovery)
  4. Line recovery       (placeholders for corrupt lines, then re-parse)
  5. Fragment fallback   (largest valid embedded object/array)

Every stage past the guard reports problems through the call's
`DiagnosticsLog` instead of raising.
"""

import time
from functools import lru_cache
from typing import Any

import structlog

from jsonrescue.config import RecoverySettings, get_settings
from jsonrescue.core.diagnostics import DiagnosticsLog
from jsonrescue.core.fragments import extract_largest_fragment
from jsonrescue.core.guard import check_size
from jsonrescue.core.lines import LineRecovery, detect_shape
from jsonrescue.core.serializer import serialize_safe
from jsonrescue.core.strict import parse_strict
from jsonrescue.errors import JsonParseError
from jsonrescue.models import RecoveryResult, RecoverySource, WarningCode
from jsonrescue.observability import RECOVERY_CALLS, RECOVERY_LATENCY, trace_recovery_stage

logger = structlog.get_logger(__name__)

NO_JSON_MESSAGE = "Could not recover any valid JSON (no valid JSON found)"


def _describe(error: JsonParseError) -> tuple[str, int | None]:
    if error.line is not None and error.column is not None:
        return f"Invalid JSON: {error} (line {error.line}, column {error.column})", error.line
    return f"Invalid JSON: {error}", error.line


def _fragment_fallback(
    text: str, log: DiagnosticsLog, found_code: WarningCode | None, found_message: str
) -> tuple[Any, RecoverySource]:
    with trace_recovery_stage("fragment_scan", text_length=len(text)):
        value = extract_largest_fragment(text)

    if value is None:
        log.add(WarningCode.NO_RECOVERABLE_JSON, NO_JSON_MESSAGE)
        return None, RecoverySource.NONE
    if found_code is not None:
        log.add(found_code, found_message)
    return value, RecoverySource.FRAGMENT


def _recover(text: str, log: DiagnosticsLog) -> tuple[Any, RecoverySource]:
    with trace_recovery_stage("strict_parse", text_length=len(text)):
        try:
            return parse_strict(text), RecoverySource.STRICT
        except JsonParseError as e:
            message, line = _describe(e)
            log.add(WarningCode.INVALID_JSON, message, line=line)

    shape = detect_shape(text)
    if shape is None:
        log.add(
            WarningCode.STRUCTURE_UNDETERMINED,
            "Could not determine JSON structure, falling back to fragment extraction",
        )
        return _fragment_fallback(text, log, None, "")

    with trace_recovery_stage("line_recovery", shape=shape):
        try:
            value = LineRecovery(text, shape, log).recover()
        except JsonParseError as e:
            logger.info("reconstruction_failed", reason=str(e))
        else:
            return value, RecoverySource.RECONSTRUCTED

    return _fragment_fallback(
        text,
        log,
        WarningCode.RECONSTRUCTION_FAILED,
        "Reconstruction failed, using largest valid fragment",
    )


def recover_json(text: str, max_length: int | None = None) -> RecoveryResult:
    """
    Recover a best-effort JSON value from arbitrary text.

    Args:
        text: Raw input — a JSON document, JSON inside prose, or a
              JSON-shaped document with corrupt lines.
        max_length: Size guard limit in characters. Defaults to
              `RecoverySettings.max_input_length`.

    Returns:
        RecoveryResult with the value (``None`` on total failure) and the
        ordered warnings explaining every fallback taken.

    Raises:
        SizeLimitExceededError: if the input is longer than ``max_length``.
    """
    if max_length is None:
        max_length = get_settings().max_input_length
    check_size(text, max_length)

    if not text.strip():
        return RecoveryResult(value=None, warnings=(), source=RecoverySource.NONE)

    start = time.monotonic()
    log = DiagnosticsLog()
    value, source = _recover(text, log)

    RECOVERY_CALLS.labels(source=source.value).inc()
    RECOVERY_LATENCY.labels(source=source.value).observe(time.monotonic() - start)
    logger.info(
        "json_recovery_complete",
        source=source.value,
        warnings=len(log),
        length=len(text),
    )
    return RecoveryResult(value=value, warnings=log.freeze(), source=source)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  JsonRecoveryEngine — settings-bound facade for presentation layers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class JsonRecoveryEngine:
    """
    The engine's operations bound to one `RecoverySettings`.

    Holds no per-call state, so one instance can serve concurrent callers.
    """

    def __init__(self, settings: RecoverySettings | None = None):
        self.settings = settings or get_settings()

    def parse_strict(self, text: str) -> Any:
        return parse_strict(text)

    def extract_largest_fragment(self, text: str) -> Any | None:
        check_size(text, self.settings.max_input_length)
        return extract_largest_fragment(text)

    def recover(self, text: str) -> RecoveryResult:
        return recover_json(text, max_length=self.settings.max_input_length)

    def serialize(self, value: Any, indent: int | None = None, *, compact: bool = False) -> str:
        if compact:
            return serialize_safe(value, indent=None)
        if indent is None:
            indent = self.settings.serializer_indent
        return serialize_safe(value, indent=indent)

    def __repr__(self) -> str:
        return f"JsonRecoveryEngine(max_input_length={self.settings.max_input_length})"


@lru_cache
def get_engine() -> JsonRecoveryEngine:
    """Default engine built from the cached settings."""
    return JsonRecoveryEngine()
