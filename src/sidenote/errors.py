"""Sidenote exception hierarchy.

Keep this module small and dependency-free: it is imported broadly across the
project and by tests.

Every error kind is a member of `ErrorKind` and has exactly one exception class.
All classes derive directly from `SidenoteError`; there is no deeper nesting.
"""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    IO = "io"
    INVALID_SOURCE_FILE = "invalid-source-file"
    UNSUPPORTED_EXT = "unsupported-ext"
    NO_EXTENSION = "no-extension"
    LANG_MAP_INIT_FAILED = "lang-map-init-failed"
    INVALID_TEMPLATE_SOURCE = "invalid-template-source"
    RENDER_FAILED = "render-failed"
    DOC_PARSE_FAILED = "doc-parse-failed"
    CONFIG = "config"


class SidenoteError(Exception):
    """Base exception for all Sidenote errors."""

    kind: ErrorKind


class SidenoteIOError(SidenoteError):
    """Raised when reading a source or writing an output fails."""

    kind = ErrorKind.IO


class InvalidSourceFileError(SidenoteError):
    """Raised when the source path is missing or has no usable base name."""

    kind = ErrorKind.INVALID_SOURCE_FILE


class UnsupportedExtensionError(SidenoteError):
    """Raised when the source extension is not in the language table."""

    kind = ErrorKind.UNSUPPORTED_EXT

    def __init__(self, extension: str) -> None:
        super().__init__(f"Extension not yet supported: {extension!r}")
        self.extension = extension


class NoExtensionError(SidenoteError):
    """Raised when the source path carries no file-name extension."""

    kind = ErrorKind.NO_EXTENSION


class LangMapInitError(SidenoteError):
    """Raised when the packaged language table cannot be loaded.

    This indicates a broken installation, not bad input.
    """

    kind = ErrorKind.LANG_MAP_INIT_FAILED


class InvalidTemplateSourceError(SidenoteError):
    """Raised when the HTML template fails to compile."""

    kind = ErrorKind.INVALID_TEMPLATE_SOURCE


class RenderError(SidenoteError):
    """Raised when the page cannot be rendered to its output path."""

    kind = ErrorKind.RENDER_FAILED


class DocParseError(SidenoteError):
    """Raised when Markdown conversion of a documentation block fails."""

    kind = ErrorKind.DOC_PARSE_FAILED


class SidenoteConfigError(SidenoteError):
    """Raised for invalid user configuration."""

    kind = ErrorKind.CONFIG
