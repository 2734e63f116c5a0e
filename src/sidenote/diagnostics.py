"""Error formatting and actionable hints for Sidenote CLI output.

Keep this module small and dependency-light: it is imported by the CLI layer
and only depends on the error hierarchy.
"""

from __future__ import annotations

from sidenote.errors import ErrorKind, SidenoteError, UnsupportedExtensionError


def format_failures(failed: dict[str, str]) -> str:
    """Format per-source failures into a human-readable stderr summary."""
    if not failed:
        return ""
    lines = [f"Conversion failed for {len(failed)} file(s):\n"]
    for src in sorted(failed):
        lines.append(f"  {src}:")
        lines.append(f"    - {failed[src]}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def format_hint(exc: BaseException) -> str | None:
    """Return an actionable hint for a known error, or None."""
    if isinstance(exc, UnsupportedExtensionError):
        return (
            f"run `sidenote languages` to list known extensions, or map {exc.extension!r} "
            "under [languages] in sidenote.toml"
        )

    if not isinstance(exc, SidenoteError):
        return None

    if exc.kind is ErrorKind.NO_EXTENSION:
        return "rename the file with an extension such as .py or .rs"
    if exc.kind is ErrorKind.INVALID_SOURCE_FILE:
        return "check that the path exists and points to a regular file"
    if exc.kind is ErrorKind.INVALID_TEMPLATE_SOURCE:
        return "check render.template in sidenote.toml for Jinja2 syntax errors"
    if exc.kind is ErrorKind.LANG_MAP_INIT_FAILED:
        return "the installation looks damaged; reinstall sidenote"
    return None


def format_error_with_hint(exc: BaseException) -> str:
    """Format error message + optional hint for stderr output."""
    msg = (str(exc) or repr(exc)).strip()
    result = f"error: {msg}"
    hint = format_hint(exc)
    if hint:
        result += f"\nhint: {hint}"
    return result
