"""Markdown and page-template rendering.

Both renderers are thin wrappers over their libraries: `markdown-it-py` in plain
CommonMark mode for prose, and Jinja2 for the page. Page templates are expected
to stick to variable and `for` substitution.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any

import jinja2
from markdown_it import MarkdownIt

from sidenote.errors import DocParseError, InvalidTemplateSourceError, RenderError


@functools.lru_cache(maxsize=1)
def _markdown() -> MarkdownIt:
    return MarkdownIt("commonmark")


def render_prose(text: str) -> str:
    """Render a documentation block to HTML. Blank input renders to ""."""
    if not text.strip():
        return ""
    try:
        return _markdown().render(text)
    except Exception as e:  # noqa: BLE001 - any engine failure is a doc parse failure
        raise DocParseError(f"Doc parse failed: {type(e).__name__}: {e}") from e


def compile_template(source: str) -> jinja2.Template:
    env = jinja2.Environment(autoescape=False, keep_trailing_newline=True)
    try:
        return env.from_string(source)
    except jinja2.TemplateSyntaxError as e:
        raise InvalidTemplateSourceError(
            f"Template creation failed (line {e.lineno}): {e.message}"
        ) from e


def render_template(source: str, context: Mapping[str, Any]) -> str:
    """Compile `source` and render it with `context`."""
    template = compile_template(source)
    try:
        return template.render(**context)
    except jinja2.TemplateError as e:
        raise RenderError(f"Failed rendering template: {e}") from e
