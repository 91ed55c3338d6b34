"""
Safe Serializer — render recovered values without tripping on cycles.

`json.dumps` refuses cyclic graphs outright. Presentation code still has
to show *something* for them, so composite nodes are tracked by identity
along the current path and a node that is revisited while still open is
rendered as `CIRCULAR_MARKER`. Shared but acyclic references serialize in
full, so acyclic values always round-trip through `parse_strict`.

The traversal keeps open composites on an explicit stack, so nesting depth
is limited by memory, not by the interpreter's recursion limit.
"""

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterator

from pydantic import BaseModel

CIRCULAR_MARKER = "[Circular Reference]"

_DONE = object()


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float) and not math.isfinite(value):
        return "null"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return json.dumps(str(value), ensure_ascii=False)


@dataclass
class _Frame:
    """A composite whose members are still being rendered."""

    node: Any
    items: Iterator[Any]
    keyed: bool
    level: int
    open_: str
    close: str
    parts: list[str] = field(default_factory=list)
    key: str | None = None

    def add(self, text: str) -> None:
        if self.key is not None:
            text = f"{self.key}: {text}"
            self.key = None
        self.parts.append(text)


class _SafeEncoder:
    """One traversal. ``seen`` holds ids of the composites currently open."""

    def __init__(self, indent: int | None):
        self.indent = indent
        self.seen: set[int] = set()
        self.stack: list[_Frame] = []

    def encode(self, value: Any) -> str:
        result = self._enter(value, 0)

        while self.stack:
            frame = self.stack[-1]
            item = next(frame.items, _DONE)

            if item is _DONE:
                self.stack.pop()
                self.seen.discard(id(frame.node))
                text = self._render(frame)
                if self.stack:
                    self.stack[-1].add(text)
                else:
                    result = text
                continue

            if frame.keyed:
                key, item = item
                frame.key = _scalar(str(key))
            text = self._enter(item, frame.level + 1)
            if text is not None:
                frame.add(text)

        return result

    def _enter(self, value: Any, level: int) -> str | None:
        """Render a leaf, or open a frame for a composite and return None."""
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if isinstance(value, Mapping):
            keyed, open_, close = True, "{", "}"
            items = iter(list(value.items()))
        elif isinstance(value, (list, tuple)):
            keyed, open_, close = False, "[", "]"
            items = iter(list(value))
        else:
            return _scalar(value)

        if id(value) in self.seen:
            return _scalar(CIRCULAR_MARKER)
        if not value:
            return open_ + close

        self.seen.add(id(value))
        self.stack.append(_Frame(value, items, keyed, level, open_, close))
        return None

    def _render(self, frame: _Frame) -> str:
        if self.indent is None:
            return frame.open_ + ", ".join(frame.parts) + frame.close
        pad = "\n" + " " * (self.indent * (frame.level + 1))
        tail = "\n" + " " * (self.indent * frame.level)
        return frame.open_ + pad + ("," + pad).join(frame.parts) + tail + frame.close


def serialize_safe(value: Any, indent: int | None = 2) -> str:
    """
    Serialize ``value`` to JSON text, replacing cyclic references.

    Args:
        value: Any recovered value or object graph.
        indent: Spaces per nesting level; ``None`` for single-line output.
    """
    return _SafeEncoder(indent).encode(value)
