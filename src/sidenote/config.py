"""Project configuration loading for Sidenote.

This module is intentionally small and deterministic: it only reads
`sidenote.toml` and performs light validation/existence checks. A project
without a config file gets the defaults.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sidenote.errors import SidenoteConfigError
from sidenote.languages import Language
from sidenote.segment import ENTITY_MODES

CONFIG_FILENAME = "sidenote.toml"


@dataclass(frozen=True)
class OutputConfig:
    dir: Path | None = None


@dataclass(frozen=True)
class RenderConfig:
    entities: str = "legacy"
    template: Path | None = None
    css: Path | None = None


@dataclass(frozen=True)
class SidenoteConfig:
    version: int = 1
    output: OutputConfig = field(default_factory=OutputConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    languages: dict[str, Language] = field(default_factory=dict)

    def read_template(self) -> str | None:
        if self.render.template is None:
            return None
        return self.render.template.read_text(encoding="utf-8")

    def read_css(self) -> str | None:
        if self.render.css is None:
            return None
        return self.render.css.read_text(encoding="utf-8")


def find_config(start: Path) -> Path | None:
    """Walk upward from `start` (file or directory) looking for `sidenote.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        candidate = cur / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            return None
        cur = cur.parent


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SidenoteConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise SidenoteConfigError(f"Expected {name} to be an integer.")
    return value


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise SidenoteConfigError(f"Expected {name} to be a string.")
    return value


def _as_file(value: Any, *, name: str, base: Path) -> Path:
    p = base / _as_str(value, name=name)
    if not p.is_file():
        raise SidenoteConfigError(f"Invalid config: {name} does not exist: {p}")
    return p


def _parse_languages(tbl: dict[str, Any]) -> dict[str, Language]:
    out: dict[str, Language] = {}
    for ext, entry in tbl.items():
        entry_tbl = _as_table(entry, name=f"languages.{ext}")
        name = _as_str(entry_tbl.get("name"), name=f"languages.{ext}.name")
        comment = _as_str(entry_tbl.get("comment"), name=f"languages.{ext}.comment")
        if not name or not comment:
            raise SidenoteConfigError(
                f"Invalid config: languages.{ext} needs a non-empty name and comment."
            )
        out[ext.lstrip(".")] = Language(name=name, comment=comment)
    return out


def load_config(*, config_path: Path | None = None, start: Path | None = None) -> SidenoteConfig:
    """Load and validate `sidenote.toml`.

    An explicit `config_path` must exist. Otherwise the file is searched for by
    walking upward from `start` (default: the current directory), and a missing
    file yields the defaults.
    """

    if config_path is None:
        config_path = find_config(start if start is not None else Path.cwd())
        if config_path is None:
            return SidenoteConfig()

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise SidenoteConfigError(f"Missing sidenote.toml at: {config_path}") from e
    except OSError as e:
        raise SidenoteConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise SidenoteConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise SidenoteConfigError(f"Invalid TOML in {config_path}: {e}") from e

    base = config_path.parent

    version_i = _as_int(data.get("version", 1), name="version")
    if version_i != 1:
        raise SidenoteConfigError(f"Unsupported config version: {version_i} (expected 1).")

    output_tbl = _as_table(data.get("output"), name="output")
    render_tbl = _as_table(data.get("render"), name="render")
    languages_tbl = _as_table(data.get("languages"), name="languages")

    output_dir = None
    if "dir" in output_tbl:
        output_dir = base / _as_str(output_tbl["dir"], name="output.dir")

    if "entities" in render_tbl:
        entities = _as_str(render_tbl["entities"], name="render.entities")
    else:
        entities = "legacy"

    template = None
    if "template" in render_tbl:
        template = _as_file(render_tbl["template"], name="render.template", base=base)

    css = None
    if "css" in render_tbl:
        css = _as_file(render_tbl["css"], name="render.css", base=base)

    # Validation
    if entities not in ENTITY_MODES:
        raise SidenoteConfigError(
            f"Invalid config: render.entities must be one of {', '.join(ENTITY_MODES)}."
        )

    return SidenoteConfig(
        version=version_i,
        output=OutputConfig(dir=output_dir),
        render=RenderConfig(entities=entities, template=template, css=css),
        languages=_parse_languages(languages_tbl),
    )
