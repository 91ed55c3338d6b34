"""
Strict Parser — exactly one RFC 8259 document, or a `JsonParseError`.

Wraps the standard library decoder so that every way it can reject
input surfaces as the same recoverable error type.
"""

import json
from typing import Any

from jsonrescue.errors import JsonParseError


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON number")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _parse_error(e: Exception) -> JsonParseError:
    if isinstance(e, json.JSONDecodeError):
        return JsonParseError(
            e.msg, line=e.lineno, column=e.colno, position=e.pos, detail=str(e)
        )
    if isinstance(e, RecursionError):
        return JsonParseError("Nesting depth exceeds parser limit", depth_exceeded=True)
    return JsonParseError(str(e))


def parse_strict(text: str) -> Any:
    """
    Parse ``text`` as a single JSON value.

    Surrounding JSON whitespace is allowed; anything else around the value
    is an error. Object key order is preserved and duplicate keys keep the
    last value.

    Raises:
        JsonParseError: with ``line``/``column``/``position`` hints where
            the decoder reports a position.
    """
    try:
        return _DECODER.decode(text)
    except (ValueError, RecursionError) as e:
        raise _parse_error(e) from e


def parse_strict_span(text: str, start: int, end: int) -> Any:
    """
    Parse ``text[start:end]`` as a single JSON value without copying it.

    ``start`` must be the value's first character and ``end`` one past its
    last; no surrounding whitespace is allowed. Error positions are offsets
    into the whole of ``text``.
    """
    try:
        value, stop = _DECODER.raw_decode(text, start)
    except (ValueError, RecursionError) as e:
        raise _parse_error(e) from e
    if stop != end:
        raise JsonParseError("Extra data", position=stop)
    return value
