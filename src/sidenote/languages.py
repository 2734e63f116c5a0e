"""Extension to language lookup backed by the packaged `languages.json`."""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from types import MappingProxyType

from sidenote.errors import LangMapInitError, UnsupportedExtensionError

logger = logging.getLogger("sidenote.languages")


@dataclass(frozen=True, slots=True)
class Language:
    name: str
    # Literal line-comment prefix, e.g. "#" or "//".
    comment: str


def load_asset(name: str) -> str:
    """Read a text asset shipped inside the package."""
    p = resources.files("sidenote") / "assets" / name
    return p.read_text(encoding="utf-8")


def parse_language_table(raw: str) -> dict[str, Language]:
    """Parse a JSON object of `{ext: {"name": ..., "comment": ...}}` entries."""
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("language table must be a JSON object")

    table: dict[str, Language] = {}
    for ext, entry in data.items():
        if not isinstance(entry, dict):
            raise ValueError(f"entry for {ext!r} must be an object")
        name = entry.get("name")
        comment = entry.get("comment")
        if not isinstance(name, str) or not isinstance(comment, str) or not comment:
            raise ValueError(f"entry for {ext!r} needs string 'name' and non-empty 'comment'")
        table[ext] = Language(name=name, comment=comment)
    return table


@functools.lru_cache(maxsize=1)
def language_table() -> Mapping[str, Language]:
    """Return the process-wide, read-only language table.

    Built on first use; a broken asset raises `LangMapInitError`.
    """

    try:
        table = parse_language_table(load_asset("languages.json"))
    except (OSError, ValueError) as e:
        raise LangMapInitError(f"Language map initialization failed: {e}") from e

    logger.debug("Loaded %d language(s)", len(table))
    return MappingProxyType(table)


def lookup(extension: str, *, extra: Mapping[str, Language] | None = None) -> Language:
    """Resolve `extension` (without the leading dot) to its `Language`.

    Entries in `extra` take precedence over the packaged table.
    """

    if extra and extension in extra:
        return extra[extension]
    lang = language_table().get(extension)
    if lang is None:
        raise UnsupportedExtensionError(extension)
    return lang
