"""
Structured Error Taxonomy — Typed exceptions for the recovery engine.

Design principles:
  - Every error carries `error_code` for automated decisions
  - Only the size guard is allowed to abort a recovery call; everything
    else is absorbed by the pipeline and reported as a warning
  - Structured logging friendly: all errors serialize cleanly to JSON
"""

from __future__ import annotations

__all__ = [
    "JsonRescueError",
    "SizeLimitExceededError",
    "JsonParseError",
]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Base
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class JsonRescueError(Exception):
    """Root exception for the recovery engine.

    Attributes:
        error_code: Machine-readable code for dashboards and alerting.
        recoverable: If True, the pipeline absorbs the error and falls back.
    """

    error_code: str = "JSONRESCUE_ERROR"
    recoverable: bool = False

    def __init__(self, message: str, *, detail: str | None = None):
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serialize for structured logging."""
        return {
            "error_code": self.error_code,
            "message": str(self),
            "detail": self.detail,
            "recoverable": self.recoverable,
        }


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Guard Layer — Hard refusals before any parsing happens
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class SizeLimitExceededError(JsonRescueError):
    """Input is longer than the configured maximum and was not processed."""

    error_code = "SIZE_LIMIT_EXCEEDED"

    def __init__(self, message: str, *, length: int = 0, max_length: int = 0, **kwargs):
        self.length = length
        self.max_length = max_length
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["length"] = self.length
        d["max_length"] = self.max_length
        return d


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Parser Layer — Strict grammar failures (absorbed by the pipeline)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class JsonParseError(JsonRescueError):
    """Text is not exactly one valid JSON document.

    Attributes:
        position: Offset into the parsed text where the decoder stopped.
        depth_exceeded: True if nesting ran past what the decoder supports.
    """

    error_code = "JSON_PARSE_ERROR"
    recoverable = True

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        position: int | None = None,
        depth_exceeded: bool = False,
        **kwargs,
    ):
        self.line = line
        self.column = column
        self.position = position
        self.depth_exceeded = depth_exceeded
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["line"] = self.line
        d["column"] = self.column
        d["position"] = self.position
        return d
