"""
Diagnostics Log — ordered, append-only record of what recovery found.

One log is created per recovery call and frozen into the result.
"""

from typing import Iterator

import structlog

from jsonrescue.models import RecoveryWarning, WarningCode

logger = structlog.get_logger(__name__)


class DiagnosticsLog:
    """Append-only sequence of `RecoveryWarning` in detection order."""

    def __init__(self) -> None:
        self._entries: list[RecoveryWarning] = []

    def add(
        self, code: WarningCode, message: str, line: int | None = None
    ) -> RecoveryWarning:
        warning = RecoveryWarning(code=code, message=message, line=line)
        self._entries.append(warning)
        logger.debug("recovery_warning", code=code.value, line=line, message=message)
        return warning

    def freeze(self) -> tuple[RecoveryWarning, ...]:
        return tuple(self._entries)

    def count(self, code: WarningCode) -> int:
        return sum(1 for w in self._entries if w.code is code)

    def __iter__(self) -> Iterator[RecoveryWarning]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<DiagnosticsLog entries={len(self._entries)}>"
