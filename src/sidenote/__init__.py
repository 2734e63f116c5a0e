from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from sidenote.document import Document, Section, convert
from sidenote.errors import (
    DocParseError,
    ErrorKind,
    InvalidSourceFileError,
    InvalidTemplateSourceError,
    LangMapInitError,
    NoExtensionError,
    RenderError,
    SidenoteConfigError,
    SidenoteError,
    SidenoteIOError,
    UnsupportedExtensionError,
)
from sidenote.languages import Language


def _package_version() -> str:
    try:
        return version("sidenote")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "__version__",
    "Document",
    "DocParseError",
    "ErrorKind",
    "InvalidSourceFileError",
    "InvalidTemplateSourceError",
    "LangMapInitError",
    "Language",
    "NoExtensionError",
    "RenderError",
    "Section",
    "SidenoteConfigError",
    "SidenoteError",
    "SidenoteIOError",
    "UnsupportedExtensionError",
    "convert",
]
