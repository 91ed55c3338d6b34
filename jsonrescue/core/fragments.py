"""
Fragment Extractor — largest valid JSON object/array embedded in free text.

Locates JSON payloads wrapped in prose, markdown fences, log prefixes or
other non-JSON content. Candidates come from a single left-to-right walk
that tracks pending openers on an explicit stack, so nesting depth is
unbounded and there is no backtracking. String literals are opaque to the
walk (escape-aware), which keeps brackets inside strings out of the
balance count.

Candidates are validated longest first, in place (no slicing). A failed
parse rules out every shorter candidate that contains the offset where the
decoder stopped, and a nesting overflow rules out every candidate nested
deeper than the decoder accepts, so deep adversarial input stays cheap.
"""

import bisect
import re
from dataclasses import dataclass
from typing import Any, Iterator

import structlog

from jsonrescue.core.strict import parse_strict, parse_strict_span
from jsonrescue.errors import JsonParseError

logger = structlog.get_logger(__name__)

# Only these characters can change the walk's state.
_TOKEN = re.compile(r'[{}\[\]"\\\n]')
_OPENER_FOR = {"}": "{", "]": "["}
# In JSON a string can only follow one of these (whitespace aside).
_STRING_LEADS = "[{,:"
_WHITESPACE = " \t\r\n"


@dataclass(frozen=True)
class Fragment:
    """A validated candidate: ``text[start:end]`` parsed to ``value``."""

    start: int
    end: int
    value: Any

    @property
    def length(self) -> int:
        return self.end - self.start


def _opens_string(text: str, i: int) -> bool:
    j = i - 1
    while j >= 0 and text[j] in _WHITESPACE:
        j -= 1
    return j >= 0 and text[j] in _STRING_LEADS


def _walk(text: str) -> Iterator[tuple[int, int, int]]:
    """Yield ``(start, end, height)``; height 1 means no nested brackets."""
    pending: list[int] = []
    heights: list[int] = []
    in_string = False
    escaped_at = -1

    for m in _TOKEN.finditer(text):
        i = m.start()
        ch = m.group()

        if in_string:
            if i == escaped_at:
                continue
            if ch == "\\":
                escaped_at = i + 1
            elif ch == '"' or ch == "\n":
                in_string = False
            continue

        if ch == '"':
            in_string = bool(pending) and _opens_string(text, i)
        elif ch in "{[":
            pending.append(i)
            heights.append(0)
        elif ch in "}]":
            if not pending:
                continue
            start = pending.pop()
            height = heights.pop() + 1
            if text[start] != _OPENER_FOR[ch]:
                pending.clear()
                heights.clear()
                continue
            if heights:
                heights[-1] = max(heights[-1], height)
            yield start, i + 1, height


def iter_balanced_spans(text: str) -> Iterator[tuple[int, int]]:
    """
    Yield ``(start, end)`` for every balanced ``{…}`` / ``[…]`` substring.

    Spans are yielded in closing order, so nested spans come before the
    span that contains them. Quotes only open a string while some bracket
    is pending and only where JSON allows a string to start (after an
    opener, a comma or a colon), so stray quotes in surrounding prose are
    ignored. A string never continues past a newline. A closer of the
    wrong type discards every pending opener.
    """
    for start, end, _ in _walk(text):
        yield start, end


def _accepts_depth(depth: int) -> bool:
    try:
        parse_strict("[" * depth + "]" * depth)
    except JsonParseError:
        return False
    return True


def max_decodable_depth(upper: int) -> int:
    """Deepest array nesting below ``upper`` that `parse_strict` accepts."""
    low, step = 0, 1
    while step < upper and _accepts_depth(step):
        low, step = step, step * 2
    high = min(step, upper)
    while high - low > 1:
        mid = (low + high) // 2
        if _accepts_depth(mid):
            low = mid
        else:
            high = mid
    return low


def find_largest_fragment(text: str) -> Fragment | None:
    """
    Return the longest balanced span that passes strict parsing.

    Ties on length go to the earliest start offset.
    """
    spans = sorted(_walk(text), key=lambda s: (s[0] - s[1], s[0]))

    stops: list[int] = []
    max_depth: int | None = None
    rejected = skipped = 0

    for start, end, height in spans:
        if max_depth is not None and height > max_depth:
            skipped += 1
            continue
        k = bisect.bisect_right(stops, start)
        if k < len(stops) and stops[k] < end:
            # Parsing this span would stop at the same offset.
            skipped += 1
            continue

        try:
            value = parse_strict_span(text, start, end)
        except JsonParseError as e:
            rejected += 1
            if e.depth_exceeded:
                max_depth = max_decodable_depth(height) if max_depth is None else height - 1
            elif e.position is not None and start < e.position < end:
                bisect.insort(stops, e.position)
            continue

        logger.debug(
            "fragment_selected",
            start=start,
            end=end,
            candidates=len(spans),
            rejected=rejected,
            skipped=skipped,
        )
        return Fragment(start=start, end=end, value=value)

    logger.debug("fragment_not_found", candidates=len(spans), rejected=rejected, skipped=skipped)
    return None


def extract_largest_fragment(text: str) -> Any | None:
    """
    Extract the largest valid JSON object or array embedded in ``text``.

    Returns ``None`` if no candidate validates.
    """
    fragment = find_largest_fragment(text)
    return fragment.value if fragment is not None else None
