"""The `Document` aggregate: one source file, its sections, and its output page."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sidenote.errors import (
    InvalidSourceFileError,
    NoExtensionError,
    RenderError,
    SidenoteIOError,
)
from sidenote.languages import Language, load_asset, lookup
from sidenote.render import render_prose, render_template
from sidenote.segment import ENTITY_MODES, EntityMode, segment

logger = logging.getLogger("sidenote.document")


@dataclass(frozen=True, slots=True)
class Section:
    index: int
    doc_html: str
    code_html: str


def source_extension(source: Path) -> str:
    """Return the text after the last `.` of the file name, or raise `NoExtensionError`."""
    suffix = source.suffix
    if not suffix or suffix == ".":
        raise NoExtensionError(f"Could not find extension of source file: {source}")
    return suffix[1:]


def resolve_output_path(source: Path, output: Path | None) -> Path:
    """Map the optional output argument to the concrete HTML path.

    An existing directory receives `<stem>.html`; any other path is used as-is;
    no output means `<stem>.html` in the current directory.
    """

    if output is not None and not output.is_dir():
        return output

    stem = source.stem
    if not stem:
        raise InvalidSourceFileError(f"Invalid source file: {source}")
    filename = f"{stem}.html"
    if output is None:
        return Path(filename)
    return output / filename


def _read_lines(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8") as fh:
        for raw in fh:
            yield raw.removesuffix("\n")


class Document:
    """A single source-to-HTML conversion.

    Construction validates the source and resolves the language and output
    path. `parse()` fills `sections`; `render()` writes the page. The two phases
    are independent: rendering an unparsed document writes a page with no
    sections.
    """

    def __init__(
        self,
        source: str | Path,
        output: str | Path | None = None,
        *,
        languages: Mapping[str, Language] | None = None,
        html_template: str | None = None,
        css: str | None = None,
        entities: EntityMode = "legacy",
    ) -> None:
        source = Path(source)
        if not source.is_file():
            raise InvalidSourceFileError(f"Invalid source file: {source}")
        if entities not in ENTITY_MODES:
            raise ValueError(f"Unknown entity mode: {entities!r}")

        self.source_path = source
        self.output_path = resolve_output_path(source, Path(output) if output is not None else None)
        self.extension = source_extension(source)

        lang = lookup(self.extension, extra=languages)
        self.language_name = lang.name
        self.comment_delimiter = lang.comment
        self.entities: EntityMode = entities

        try:
            self.html_template = (
                html_template if html_template is not None else load_asset("template.html")
            )
            self.css = css if css is not None else load_asset("template.css")
        except OSError as e:
            raise SidenoteIOError(f"Failed reading packaged asset: {e}") from e

        self.sections: list[Section] = []
        logger.debug(
            "Resolved %s as %s (comment %r) -> %s",
            self.source_path,
            self.language_name,
            self.comment_delimiter,
            self.output_path,
        )

    def parse(self) -> None:
        """Segment the source file and render every section.

        On failure the previous section list is left untouched.
        """

        sections: list[Section] = []
        try:
            with contextlib.closing(_read_lines(self.source_path)) as lines:
                pairs = segment(lines, self.comment_delimiter, entities=self.entities)
                for idx, (doc, code) in enumerate(pairs):
                    sections.append(
                        Section(index=idx, doc_html=render_prose(doc), code_html=code)
                    )
        except (OSError, UnicodeDecodeError) as e:
            raise SidenoteIOError(f"I/O error reading {self.source_path}: {e}") from e

        self.sections = sections
        logger.debug("Parsed %d section(s) from %s", len(sections), self.source_path)

    def context(self) -> dict[str, Any]:
        """Template variables for this document."""
        return {
            "sections": self.sections,
            "css": self.css,
            "filename": str(self.source_path),
            "title": self.source_path.name,
            "output": str(self.output_path),
            "extension": self.extension,
            "language": self.language_name,
            "comment": self.comment_delimiter,
        }

    def render(self) -> Path:
        """Write the HTML page, creating missing parent directories."""
        if not self.output_path.name:
            raise RenderError(f"Output path has no file name: {self.output_path}")

        page = render_template(self.html_template, self.context())
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.output_path.write_text(page, encoding="utf-8")
        except OSError as e:
            raise SidenoteIOError(f"I/O error writing {self.output_path}: {e}") from e

        logger.debug("Wrote %s (%d section(s))", self.output_path, len(self.sections))
        return self.output_path


def convert(
    source: str | Path,
    output: str | Path | None = None,
    **kwargs: Any,
) -> Path:
    """Parse `source` and render it; return the output path."""
    doc = Document(source, output, **kwargs)
    doc.parse()
    return doc.render()
