"""
Tests for jsonrescue.core.lines — line classification and reconstruction.

Covers:
  - Shape detection
  - Lexical faults: mismatched brackets, control characters, unclosed strings
  - Entry grouping across multi-line values
  - Placeholders for object and array documents
  - Separator placement when the last line is corrupt
"""

import pytest

from jsonrescue.core.diagnostics import DiagnosticsLog
from jsonrescue.core.lines import (
    PLACEHOLDER_PREFIX,
    LineRecovery,
    detect_shape,
    placeholder_for,
)
from jsonrescue.core.strict import parse_strict
from jsonrescue.errors import JsonParseError
from jsonrescue.models import WarningCode


def _recover(text: str) -> tuple[object, DiagnosticsLog, LineRecovery]:
    log = DiagnosticsLog()
    recovery = LineRecovery(text, detect_shape(text), log)
    return recovery.recover(), log, recovery


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Shape Detection
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestDetectShape:
    @pytest.mark.parametrize(
        "text, shape",
        [
            ('{"a": 1', None),
            ("  {broken}\n", "{"),
            ("[1, 2,]", "["),
            ("{]", None),
            ("[}", None),
            ("{", None),
            ("prefix {}", None),
        ],
    )
    def test_detect(self, text, shape):
        assert detect_shape(text) == shape

    def test_placeholders(self):
        assert placeholder_for("{", 7) == f'"{PLACEHOLDER_PREFIX}7": null'
        assert placeholder_for("[", 7) == "null"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Classification
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestClassify:
    def test_mismatched_bracket_line(self):
        text = '{"a": 1,\nBROKEN LINE }\n"b": 2}'
        log = DiagnosticsLog()
        corrupt = LineRecovery(text, "{", log).classify()

        assert corrupt == {2}
        assert [w.code for w in log] == [WarningCode.MISMATCHED_BRACKETS]
        assert log.freeze()[0].message == "Mismatched brackets at line 2"
        assert log.freeze()[0].line == 2

    def test_control_character_in_string(self):
        text = '{\n"a": "ok",\n"b": "bell\x07",\n"c": 3\n}'
        log = DiagnosticsLog()
        corrupt = LineRecovery(text, "{", log).classify()

        assert corrupt == {3}
        assert log.freeze()[0].code is WarningCode.CONTROL_CHARACTER
        assert log.freeze()[0].message == "Invalid control character at line 3"

    def test_unclosed_string(self):
        text = '{\n"a": "never closed,\n"b": 2\n}'
        log = DiagnosticsLog()
        corrupt = LineRecovery(text, "{", log).classify()

        assert corrupt == {2}
        assert log.freeze()[0].code is WarningCode.UNCLOSED_STRING
        assert log.freeze()[0].message == "Unclosed string at line 2"

    def test_unparseable_entry_flagged(self):
        text = '{\n"a": 1,\n"b" 2,\n"c": 3\n}'
        log = DiagnosticsLog()
        corrupt = LineRecovery(text, "{", log).classify()

        assert corrupt == {3}
        assert log.freeze()[0].code is WarningCode.CORRUPT_LINE
        assert log.freeze()[0].message == "Potentially corrupt JSON at line 3"

    def test_multiline_values_are_not_corrupt(self):
        text = '{\n"a": {\n  "x": [\n    1,\n    2\n  ]\n},\n"b":\n  "split value"\n}'
        log = DiagnosticsLog()
        recovery = LineRecovery(text, "{", log)

        assert recovery.classify() == set()
        assert len(log) == 0
        assert len(recovery.context) == 2

    def test_escaped_quote_keeps_string_open(self):
        text = '{\n"a": "quote \\" inside",\n"b": 1\n}'
        log = DiagnosticsLog()
        assert LineRecovery(text, "{", log).classify() == set()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Reconstruction
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestRecover:
    def test_object_placeholder(self):
        value, log, _ = _recover('{"a": 1,\nBROKEN LINE }\n"b": 2}')
        assert value == {"a": 1, "__corrupt_line_2": None, "b": 2}
        assert list(value) == ["a", "__corrupt_line_2", "b"]

    def test_array_placeholder(self):
        text = '[\n  {"id": 1},\n  {"id": 2, oops},\n  {"id": 3}\n]'
        value, log, _ = _recover(text)
        assert value == [{"id": 1}, None, {"id": 3}]
        assert [w.line for w in log] == [3]

    def test_corrupt_last_line_keeps_separators_valid(self):
        text = '{\n"a": 1,\n"b": 2,\n"c": ]\n}'
        value, log, _ = _recover(text)
        assert value == {"a": 1, "b": 2, "__corrupt_line_4": None}

    def test_corrupt_first_line_keeps_separators_valid(self):
        text = '{"a": ]\n"b": 2,\n"c": 3}'
        value, _, _ = _recover(text)
        assert value == {"__corrupt_line_1": None, "b": 2, "c": 3}

    def test_line_numbers_account_for_leading_blank_lines(self):
        text = '\n\n{\n"a": 1,\n"b": ]\n}'
        value, log, _ = _recover(text)
        assert value == {"a": 1, "__corrupt_line_5": None}
        assert log.freeze()[0].line == 5

    def test_unterminated_opener_judged_line_by_line(self):
        text = '{\n"a": 1,\nBROKEN {\n"b": 2\n}'
        value, log, recovery = _recover(text)
        assert value == {"a": 1, "__corrupt_line_3": None, "b": 2}
        assert recovery.corrupt_lines == {3}

    def test_crlf_lines(self):
        text = '{\r\n"a": 1,\r\n"b": [1,}\r\n"c": 3\r\n}'
        value, _, _ = _recover(text)
        assert value == {"a": 1, "__corrupt_line_3": None, "c": 3}

    def test_k_corrupt_lines_give_k_placeholders(self):
        good = [f'"k{i}": {i},' for i in range(10)]
        bad_rows = {2, 5, 9}
        rows = [
            "BROKEN ] ROW" if i in bad_rows else line for i, line in enumerate(good)
        ]
        text = "{\n" + "\n".join(rows) + "\n}"

        value, log, _ = _recover(text)

        placeholders = [k for k in value if k.startswith(PLACEHOLDER_PREFIX)]
        assert len(placeholders) == len(bad_rows)
        assert len(log) >= len(bad_rows)
        assert {f"k{i}" for i in range(10) if i not in bad_rows} <= set(value)

    def test_rebuild_is_strict_json(self):
        log = DiagnosticsLog()
        recovery = LineRecovery('{"a": 1,\n"b": }', "{", log)
        recovery.classify()
        rebuilt = recovery.rebuild()
        assert parse_strict(rebuilt) == {"a": 1, "__corrupt_line_2": None}

    def test_nothing_intact_raises(self):
        log = DiagnosticsLog()
        with pytest.raises(JsonParseError):
            LineRecovery("{ this is not json }", "{", log).recover()
        assert [w.code for w in log] == [WarningCode.CORRUPT_LINE]

    def test_state_is_per_instance(self):
        first = LineRecovery('{"a": [\n1}', "{", DiagnosticsLog())
        first.classify()
        second = LineRecovery('{"a": 1}', "{", DiagnosticsLog())
        assert second.classify() == set()
