"""
Recovery Models — Shared Pydantic models for the recovery pipeline.

Defines the data structures handed back to callers:
  - WarningCode: Machine-readable category of a diagnostic
  - RecoveryWarning: One immutable entry of the diagnostics log
  - RecoverySource: Which stage produced the returned value
  - RecoveryResult: Value plus ordered warnings
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Diagnostics ──────────────────────────────────────────────────────


class WarningCode(str, enum.Enum):
    """Categories of problems reported while recovering a document."""

    INVALID_JSON = "invalid_json"
    MISMATCHED_BRACKETS = "mismatched_brackets"
    CONTROL_CHARACTER = "control_character"
    UNCLOSED_STRING = "unclosed_string"
    CORRUPT_LINE = "corrupt_line"
    STRUCTURE_UNDETERMINED = "structure_undetermined"
    RECONSTRUCTION_FAILED = "reconstruction_failed"
    NO_RECOVERABLE_JSON = "no_recoverable_json"


class RecoveryWarning(BaseModel):
    """A single diagnostic. Never mutated once appended to a log."""

    model_config = ConfigDict(frozen=True)

    code: WarningCode
    message: str
    line: int | None = Field(default=None, ge=1)

    def __str__(self) -> str:
        return self.message


# ── Results ──────────────────────────────────────────────────────────


class RecoverySource(str, enum.Enum):
    STRICT = "strict"
    RECONSTRUCTED = "reconstructed"
    FRAGMENT = "fragment"
    NONE = "none"


class RecoveryResult(BaseModel):
    """
    Outcome of one recovery call.

    ``value`` is ``None`` both for a recovered JSON ``null`` and for total
    failure; ``source`` tells the two apart.
    """

    model_config = ConfigDict(frozen=True)

    value: Any = None
    warnings: tuple[RecoveryWarning, ...] = ()
    source: RecoverySource = RecoverySource.NONE

    @property
    def recovered(self) -> bool:
        return self.source is not RecoverySource.NONE

    def messages(self) -> list[str]:
        return [w.message for w in self.warnings]
