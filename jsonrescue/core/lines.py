"""
Line Recovery — isolate corrupt lines in an object/array-shaped document.

Two passes over the lines between the document's outer brackets:

  1. Classification. A lexical scan flags lines with mismatched brackets,
     raw control characters inside strings, or unclosed strings. Lines are
     then grouped into entries (an entry starts at bracket depth 0 and ends
     when the depth returns to 0), and each entry is validated inside the
     outer bracket pair. Entries that fail are flagged at their first line.
  2. Reconstruction. The document is rebuilt from the accepted entries,
     with a placeholder standing in for every corrupt entry, and strictly
     parsed again.

All scan state lives on a `LineRecovery` instance, which is built for one
document and discarded afterwards.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from jsonrescue.core.diagnostics import DiagnosticsLog
from jsonrescue.core.strict import parse_strict
from jsonrescue.errors import JsonParseError
from jsonrescue.models import WarningCode
from jsonrescue.observability import CORRUPT_LINES

logger = structlog.get_logger(__name__)

PLACEHOLDER_PREFIX = "__corrupt_line_"

_CLOSER_FOR = {"{": "}", "[": "]"}
_OPENER_FOR = {"}": "{", "]": "["}


def detect_shape(text: str) -> str | None:
    """Return ``"{"`` or ``"["`` if the trimmed text is wrapped in a matching pair."""
    trimmed = text.strip()
    if len(trimmed) >= 2 and _CLOSER_FOR.get(trimmed[0]) == trimmed[-1]:
        return trimmed[0]
    return None


def placeholder_for(shape: str, line: int) -> str:
    if shape == "{":
        return f'"{PLACEHOLDER_PREFIX}{line}": null'
    return "null"


@dataclass
class _ScanState:
    """String and bracket state carried from one line into the next."""

    in_string: bool = False
    brackets: list[str] = field(default_factory=list)


@dataclass
class _Entry:
    """Consecutive lines that together form one member of the outer container."""

    lines: list[tuple[int, str]]
    corrupt_line: int | None = None

    @property
    def first_line(self) -> int:
        return self.lines[0][0]

    @property
    def text(self) -> str:
        joined = "\n".join(text for _, text in self.lines)
        return joined.rstrip().removesuffix(",").rstrip()


class LineRecovery:
    """
    Classify and rebuild one object/array-shaped document.

    Args:
        text: The original document text (line numbers refer to it).
        shape: ``"{"`` or ``"["``, as returned by `detect_shape`.
        log: Diagnostics log the warnings are appended to.
    """

    def __init__(self, text: str, shape: str, log: DiagnosticsLog):
        self.shape = shape
        self.closer = _CLOSER_FOR[shape]
        self.log = log
        self.corrupt_lines: set[int] = set()
        self.context: list[str] = []
        self._lines = self._body_lines(text)
        self._entries: list[_Entry] = []

    @staticmethod
    def _body_lines(text: str) -> list[tuple[int, str]]:
        lead = len(text) - len(text.lstrip())
        trimmed = text.strip()
        first_line = text.count("\n", 0, lead) + 1
        body = text[lead + 1 : lead + len(trimmed) - 1]
        return [
            (first_line + offset, raw.removesuffix("\r"))
            for offset, raw in enumerate(body.split("\n"))
        ]

    # ── Pass 1: classification ────────────────────────────────────────

    def _scan_line(self, line: str, number: int, state: _ScanState, report: bool) -> bool:
        """Advance ``state`` over one line. Returns True on a lexical fault."""
        fault: tuple[WarningCode, str] | None = None
        escaped = False

        for ch in line:
            if state.in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    state.in_string = False
                elif ch < " " and ch != "\t":
                    fault = (WarningCode.CONTROL_CHARACTER, "Invalid control character")
                    break
                continue

            if ch == '"':
                state.in_string = True
            elif ch in "{[":
                state.brackets.append(ch)
            elif ch in "}]":
                opener = state.brackets.pop() if state.brackets else None
                if opener != _OPENER_FOR[ch]:
                    fault = (WarningCode.MISMATCHED_BRACKETS, "Mismatched brackets")
                    break

        if state.in_string:
            # Strings cannot span lines; resynchronize on the next one.
            state.in_string = False
            if fault is None:
                fault = (WarningCode.UNCLOSED_STRING, "Unclosed string")

        if fault is None:
            return False
        if report:
            code, message = fault
            self.log.add(code, f"{message} at line {number}", line=number)
        return True

    def _group_entries(self) -> list[_Entry]:
        entries: list[_Entry] = []
        state = _ScanState()
        current: list[tuple[int, str]] = []

        for number, line in self._lines:
            self._scan_line(line, number, state, report=False)
            stripped = line.strip()
            if not stripped:
                continue
            current.append((number, stripped))
            # A trailing colon means the value continues on the next line.
            if state.brackets or stripped.endswith(":"):
                continue
            entries.append(_Entry(current))
            current = []

        if current:
            if state.brackets:
                # Never closed: judge the remaining lines one by one.
                entries.extend(_Entry([item]) for item in current)
            else:
                entries.append(_Entry(current))
        return entries

    def _validate(self, entry: _Entry) -> None:
        flagged = [n for n, _ in entry.lines if n in self.corrupt_lines]
        if flagged:
            entry.corrupt_line = flagged[0]
            return

        text = entry.text
        try:
            parse_strict(f"{self.shape}{text}{self.closer}")
        except JsonParseError:
            number = entry.first_line
            self.log.add(
                WarningCode.CORRUPT_LINE,
                f"Potentially corrupt JSON at line {number}",
                line=number,
            )
            self.corrupt_lines.add(number)
            entry.corrupt_line = number
            return
        # Members are independent, so validating an entry on its own inside
        # the outer pair is the same as validating it after the context.
        self.context.append(text)

    def classify(self) -> set[int]:
        """Run pass 1 and return the set of corrupt line numbers."""
        state = _ScanState()
        for number, line in self._lines:
            if self._scan_line(line, number, state, report=True):
                self.corrupt_lines.add(number)

        self._entries = [e for e in self._group_entries() if e.text]
        for entry in self._entries:
            self._validate(entry)

        logger.debug(
            "lines_classified",
            lines=len(self._lines),
            entries=len(self._entries),
            corrupt=sorted(self.corrupt_lines),
        )
        return set(self.corrupt_lines)

    # ── Pass 2: reconstruction ────────────────────────────────────────

    def rebuild(self) -> str:
        """Render the document with placeholders in place of corrupt entries."""
        items = [
            placeholder_for(self.shape, entry.corrupt_line)
            if entry.corrupt_line is not None
            else entry.text
            for entry in self._entries
        ]
        if not items:
            return f"{self.shape}{self.closer}"
        return self.shape + "\n  " + ",\n  ".join(items) + "\n" + self.closer

    def recover(self) -> Any:
        """
        Classify, rebuild and strictly parse the document.

        Raises:
            JsonParseError: if nothing survived classification or the
                rebuilt document does not parse.
        """
        self.classify()
        if not self.context:
            raise JsonParseError("No intact lines survived classification")

        rebuilt = self.rebuild()
        value = parse_strict(rebuilt)
        CORRUPT_LINES.inc(len(self.corrupt_lines))
        logger.info(
            "document_reconstructed",
            shape=self.shape,
            corrupt_lines=len(self.corrupt_lines),
            kept_entries=len(self.context),
        )
        return value
