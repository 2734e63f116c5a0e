"""Split a stream of source lines into alternating documentation/code runs.

The scan works on a one-line lookahead: a run ends when the *next* line no longer
belongs to it, and that line is left in place for whoever scans next. Blank
lines are only ever consumed by the outer loop, which is what makes a blank
line inside a code run start a fresh section with no documentation.
"""

from __future__ import annotations

import html
from collections.abc import Iterable, Iterator
from typing import Literal

# Lines starting with this keep their marker when collected as documentation.
OUTER_DOC_MARKER = "///"

EntityMode = Literal["legacy", "strict"]
ENTITY_MODES: tuple[str, ...] = ("legacy", "strict")


class LineCursor:
    """Lookahead-1 cursor over an iterable of lines (without line terminators)."""

    _EXHAUSTED = object()

    def __init__(self, lines: Iterable[str]) -> None:
        self._it = iter(lines)
        self._next: object = None
        self._filled = False

    def peek(self) -> str | None:
        """Return the next line without consuming it, or None at end of input."""
        if not self._filled:
            self._next = next(self._it, self._EXHAUSTED)
            self._filled = True
        if self._next is self._EXHAUSTED:
            return None
        return self._next  # type: ignore[return-value]

    def advance(self) -> None:
        if not self._filled:
            self.peek()
        if self._next is not self._EXHAUSTED:
            self._filled = False


def is_blank(line: str) -> bool:
    return not line.strip()


def escape_code_line(line: str, mode: EntityMode = "legacy") -> str:
    """Escape one line of code for embedding in HTML.

    `legacy` replaces `<`/`>` with the unterminated `&lt`/`&gt` that existing
    pages were rendered with. `strict` emits well-formed entities.
    """
    if mode == "strict":
        return html.escape(line, quote=False)
    return line.replace("<", "&lt").replace(">", "&gt")


def strip_comment(line: str, delimiter: str) -> str:
    """Return the documentation text of a comment line (already left-trimmed)."""
    if line.startswith(OUTER_DOC_MARKER):
        return line
    text = line[len(delimiter) :]
    if text.startswith(" "):
        text = text[1:]
    return text


def scan_doc(cursor: LineCursor, delimiter: str) -> str:
    buf: list[str] = []
    while True:
        line = cursor.peek()
        if line is None:
            break
        trimmed = line.lstrip()
        if not trimmed.startswith(delimiter):
            break
        buf.append(strip_comment(trimmed, delimiter))
        buf.append("\n")
        cursor.advance()
    return "".join(buf)


def scan_code(cursor: LineCursor, delimiter: str, mode: EntityMode = "legacy") -> str:
    buf: list[str] = []
    while True:
        line = cursor.peek()
        if line is None:
            break
        if is_blank(line) or line.lstrip().startswith(delimiter):
            break
        buf.append(escape_code_line(line, mode))
        buf.append("\n")
        cursor.advance()
    return "".join(buf)


def segment(
    lines: Iterable[str], delimiter: str, *, entities: EntityMode = "legacy"
) -> Iterator[tuple[str, str]]:
    """Yield `(doc_text, code_text)` pairs, one per section, in source order.

    `doc_text` is raw Markdown with comment delimiters removed; `code_text` is
    already HTML-escaped.
    """

    if not delimiter:
        raise ValueError("comment delimiter must be non-empty")

    cursor = LineCursor(lines)
    while True:
        line = cursor.peek()
        if line is None:
            break
        if is_blank(line):
            cursor.advance()
            continue
        doc = scan_doc(cursor, delimiter)
        code = scan_code(cursor, delimiter, entities)
        yield doc, code
