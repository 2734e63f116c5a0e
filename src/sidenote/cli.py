"""Command-line entry point: `sidenote render`, `sidenote watch`, `sidenote languages`."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sidenote import __version__
from sidenote.diagnostics import format_error_with_hint, format_failures
from sidenote.errors import (
    ErrorKind,
    LangMapInitError,
    SidenoteConfigError,
    SidenoteError,
)

if TYPE_CHECKING:  # pragma: no cover
    from sidenote.config import SidenoteConfig

EXIT_OK = 0
EXIT_INPUT_ERROR = 2
EXIT_RENDER_ERROR = 3
EXIT_LANG_MAP = 4

_INPUT_KINDS = frozenset(
    {
        ErrorKind.INVALID_SOURCE_FILE,
        ErrorKind.NO_EXTENSION,
        ErrorKind.UNSUPPORTED_EXT,
        ErrorKind.CONFIG,
    }
)

logger = logging.getLogger("sidenote.cli")


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("sources", nargs="+", help="Source files to convert.")
    p.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output file, or directory receiving <name>.html (required to be a "
        "directory when converting several sources).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to sidenote.toml (defaults to searching upward from cwd).",
    )
    p.add_argument(
        "--strict-entities",
        action="store_true",
        help="Escape code with terminated entities (&lt; &gt; &amp;).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sidenote")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_p = subparsers.add_parser("render", help="Convert sources to HTML pages.")
    _add_common_flags(render_p)

    watch_p = subparsers.add_parser("watch", help="Re-render sources when they change.")
    _add_common_flags(watch_p)

    langs_p = subparsers.add_parser("languages", help="List supported extensions.")
    langs_p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Emit a JSON object instead of a table.",
    )

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def exit_code_for(exc: BaseException) -> int:
    if isinstance(exc, LangMapInitError):
        return EXIT_LANG_MAP
    if isinstance(exc, SidenoteError) and exc.kind in _INPUT_KINDS:
        return EXIT_INPUT_ERROR
    return EXIT_RENDER_ERROR


def _load_config(args: argparse.Namespace) -> SidenoteConfig:
    from sidenote.config import load_config

    config_path = Path(args.config).resolve() if args.config else None
    return load_config(config_path=config_path)


def _document_options(args: argparse.Namespace, cfg: SidenoteConfig) -> dict[str, Any]:
    try:
        html_template = cfg.read_template()
        css = cfg.read_css()
    except OSError as e:
        raise SidenoteConfigError(f"Failed reading template override: {e}") from e
    return {
        "languages": cfg.languages,
        "html_template": html_template,
        "css": css,
        "entities": "strict" if args.strict_entities else cfg.render.entities,
    }


def _resolve_output(args: argparse.Namespace, cfg: SidenoteConfig, n_sources: int) -> Path | None:
    """Return the output argument handed to each `Document`.

    Directories that must hold several pages are created up front so that
    every page lands inside them.
    """

    if args.output is not None:
        output = Path(args.output)
        if n_sources > 1:
            if output.exists() and not output.is_dir():
                raise SidenoteConfigError(
                    f"--output must be a directory when converting {n_sources} files: {output}"
                )
            output.mkdir(parents=True, exist_ok=True)
        return output

    if cfg.output.dir is not None:
        cfg.output.dir.mkdir(parents=True, exist_ok=True)
        return cfg.output.dir

    return None


def _convert_one(source: Path, output: Path | None, options: dict[str, Any]) -> tuple[Path, int]:
    """Convert one source; return the page written and its section count."""
    from sidenote.document import Document

    doc = Document(source, output, **options)
    doc.parse()
    path = doc.render()
    logger.debug("%s -> %s (%d sections)", source, path, len(doc.sections))
    return path, len(doc.sections)


def _prepare(args: argparse.Namespace) -> tuple[Path | None, dict[str, Any]]:
    cfg = _load_config(args)
    options = _document_options(args, cfg)
    output = _resolve_output(args, cfg, len(args.sources))
    return output, options


def format_converted(pos: int, total: int, source: Path, page: Path, n_sections: int) -> str:
    return f"[{pos}/{total}] {source} -> {page} ({n_sections} sections)"


def cmd_render(args: argparse.Namespace) -> int:
    _configure_logging(bool(args.verbose))
    try:
        output, options = _prepare(args)
    except (SidenoteError, OSError) as e:
        _eprint(format_error_with_hint(e))
        return exit_code_for(e)

    sources = [Path(s) for s in args.sources]
    worst = EXIT_OK
    failed: dict[str, str] = {}
    for pos, src in enumerate(sources, start=1):
        try:
            page, n_sections = _convert_one(src, output, options)
        except LangMapInitError as e:
            # Broken installation; no later file can succeed either.
            _eprint(format_error_with_hint(e))
            return EXIT_LANG_MAP
        except SidenoteError as e:
            worst = max(worst, exit_code_for(e))
            failed[str(src)] = str(e)
            _eprint(f"[{pos}/{len(sources)}] {format_error_with_hint(e)}")
            continue
        _eprint(format_converted(pos, len(sources), src, page, n_sections))

    if len(sources) > 1:
        summary = format_failures(failed)
        if summary:
            _eprint(summary.rstrip())
    return worst


def cmd_languages(args: argparse.Namespace) -> int:
    from sidenote.languages import language_table

    try:
        table = language_table()
    except LangMapInitError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_LANG_MAP

    if args.json_output:
        data = {ext: {"name": lang.name, "comment": lang.comment} for ext, lang in table.items()}
        print(json.dumps(data, indent=2, sort_keys=True))
        return EXIT_OK

    for ext in sorted(table):
        lang = table[ext]
        print(f"{ext:<12} {lang.name:<14} {lang.comment}")
    return EXIT_OK


def cmd_watch(args: argparse.Namespace) -> int:
    _configure_logging(bool(args.verbose))
    from sidenote import watcher

    try:
        watcher.check_watchfiles_available()
    except ImportError as e:
        _eprint(f"error: {e}")
        return EXIT_INPUT_ERROR

    try:
        output, options = _prepare(args)
    except (SidenoteError, OSError) as e:
        _eprint(format_error_with_hint(e))
        return exit_code_for(e)

    sources = [Path(s) for s in args.sources]

    def convert_one(path: Path) -> int:
        try:
            out, _ = _convert_one(path, output, options)
        except SidenoteError as e:
            _eprint(format_error_with_hint(e))
            return exit_code_for(e)
        _eprint(f"[watch] wrote {out}")
        return EXIT_OK

    rc = max(convert_one(src) for src in sources)
    if rc == EXIT_LANG_MAP:
        return rc

    watch_dirs = sorted({src.resolve().parent for src in sources})
    try:
        asyncio.run(
            watcher.run_watch_loop(
                changes_iter=watcher.make_watchfiles_iter(watch_dirs),
                sources=sources,
                run_cycle=watcher.build_cycle_runner(convert_one),
                on_event=_eprint,
                on_error=lambda e: _eprint(format_error_with_hint(e)),
            )
        )
    except KeyboardInterrupt:
        pass
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_INPUT_ERROR

    if args.command == "render":
        return cmd_render(args)
    if args.command == "watch":
        return cmd_watch(args)
    if args.command == "languages":
        return cmd_languages(args)

    return EXIT_INPUT_ERROR


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
