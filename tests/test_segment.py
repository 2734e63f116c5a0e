from __future__ import annotations

import pytest

from sidenote.segment import LineCursor, escape_code_line, segment, strip_comment


def _seg(text: str, delimiter: str = "#", **kwargs) -> list[tuple[str, str]]:
    return list(segment(text.split("\n"), delimiter, **kwargs))


def test_cursor_peek_does_not_consume() -> None:
    cur = LineCursor(["a", "b"])
    assert cur.peek() == "a"
    assert cur.peek() == "a"
    cur.advance()
    assert cur.peek() == "b"
    cur.advance()
    assert cur.peek() is None
    cur.advance()
    assert cur.peek() is None


def test_cursor_advance_without_peek() -> None:
    cur = LineCursor(iter(["a", "b"]))
    cur.advance()
    assert cur.peek() == "b"


def test_empty_input_yields_nothing() -> None:
    assert list(segment([], "#")) == []
    assert _seg("\n\n\n") == []


def test_doc_then_code_is_one_section() -> None:
    assert _seg("# Adds numbers.\ndef add(a, b):\n    return a + b\n") == [
        ("Adds numbers.\n", "def add(a, b):\n    return a + b\n"),
    ]


def test_consecutive_comment_lines_share_a_doc_block() -> None:
    assert _seg("# one\n# two\nx = 1\n# three\ny = 2") == [
        ("one\ntwo\n", "x = 1\n"),
        ("three\n", "y = 2\n"),
    ]


def test_blank_line_splits_code_into_two_sections() -> None:
    pairs = _seg("a = 1\nb = 2\n\nc = 3\n")
    assert pairs == [("", "a = 1\nb = 2\n"), ("", "c = 3\n")]


def test_blank_line_after_comment_ends_the_section() -> None:
    assert _seg("# header\n\n# body\nx = 1") == [
        ("header\n", ""),
        ("body\n", "x = 1\n"),
    ]


def test_whitespace_only_line_counts_as_blank() -> None:
    assert _seg("a = 1\n   \t\nb = 2") == [("", "a = 1\n"), ("", "b = 2\n")]


def test_leading_and_repeated_blank_lines_are_dropped() -> None:
    pairs = _seg("\n\n# doc\n\n\n\ncode()\n\n")
    assert pairs == [("doc\n", ""), ("", "code()\n")]


def test_indented_comment_is_documentation() -> None:
    pairs = _seg("def f():\n    # explain\n    return 1")
    assert pairs == [("", "def f():\n"), ("explain\n", "    return 1\n")]


def test_code_keeps_indentation() -> None:
    pairs = _seg("if x:\n        y()\n")
    assert pairs == [("", "if x:\n        y()\n")]


def test_only_a_single_delimiter_is_stripped() -> None:
    pairs = _seg("## Heading\n#no space\n#   indented")
    assert pairs == [("# Heading\nno space\n  indented\n", "")]


def test_outer_doc_marker_is_kept_verbatim() -> None:
    pairs = _seg("   /// Adds two numbers.\n// plain\nfn add() {}", "//")
    assert pairs == [("/// Adds two numbers.\nplain\n", "fn add() {}\n")]


def test_multi_character_delimiter() -> None:
    pairs = _seg("-- query all rows\nSELECT * FROM t;", "--")
    assert pairs == [("query all rows\n", "SELECT * FROM t;\n")]


def test_code_is_escaped_with_legacy_entities() -> None:
    pairs = _seg("if a < b and c > d:\n    pass")
    assert pairs == [("", "if a &lt b and c &gt d:\n    pass\n")]


def test_strict_entities_are_terminated() -> None:
    pairs = _seg("a < b && c > d", entities="strict")
    assert pairs == [("", "a &lt; b &amp;&amp; c &gt; d\n")]


def test_doc_text_is_not_escaped() -> None:
    pairs = _seg("# compare with <b>\nx")
    assert pairs == [("compare with <b>\n", "x\n")]


def test_empty_delimiter_is_rejected() -> None:
    with pytest.raises(ValueError):
        list(segment(["x"], ""))


def test_segment_reads_lines_lazily() -> None:
    seen: list[str] = []

    def lines():
        for line in ["# a", "x", "", "# b", "y"]:
            seen.append(line)
            yield line

    it = segment(lines(), "#")
    assert next(it) == ("a\n", "x\n")
    # Only the terminating blank line has been pulled past the first section.
    assert seen == ["# a", "x", ""]


def test_escape_code_line_modes() -> None:
    assert escape_code_line("Vec<u8>") == "Vec&ltu8&gt"
    assert escape_code_line("Vec<u8>", "strict") == "Vec&lt;u8&gt;"
    assert escape_code_line("a & b") == "a & b"


def test_strip_comment() -> None:
    assert strip_comment("// text", "//") == "text"
    assert strip_comment("//text", "//") == "text"
    assert strip_comment("/// doc", "//") == "/// doc"
