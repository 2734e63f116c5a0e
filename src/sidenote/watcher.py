"""Watch mode: re-render sources when they change on disk.

Every cycle is a full conversion of each changed file.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A batch of changed source files."""

    changed_paths: frozenset[Path]
    timestamp: float


@dataclass(frozen=True, slots=True)
class WatchCycleResult:
    exit_code: int
    duration_s: float
    changed_paths: frozenset[Path]


def check_watchfiles_available() -> None:
    """Raise ImportError with a helpful message if watchfiles is not installed."""
    import importlib

    try:
        importlib.import_module("watchfiles")
    except ImportError:
        raise ImportError(
            "watchfiles is required for watch mode. Install it with: pip install sidenote[watch]"
        ) from None


def filter_sources(changed_paths: Iterable[Path], *, sources: Iterable[Path]) -> frozenset[Path]:
    """Keep only the changed paths that are one of the watched sources."""
    wanted = {p.resolve() for p in sources}
    return frozenset(p for p in changed_paths if p.resolve() in wanted)


async def run_watch_loop(
    *,
    changes_iter: AsyncIterator[set[tuple[Any, str]]],
    sources: list[Path],
    run_cycle: Callable[[WatchEvent], WatchCycleResult],
    on_event: Callable[[str], None],
    on_error: Callable[[BaseException], None],
) -> None:
    """Consume `changes_iter` and call `run_cycle` for each relevant batch."""
    async for raw_changes in changes_iter:
        paths = frozenset(Path(p) for _, p in raw_changes)
        relevant = filter_sources(paths, sources=sources)
        if not relevant:
            continue

        event = WatchEvent(changed_paths=relevant, timestamp=time.monotonic())
        names = ", ".join(str(p) for p in sorted(relevant))
        on_event(f"[watch] change detected: {names}")

        try:
            result = run_cycle(event)
        except Exception as exc:  # noqa: BLE001 - keep watching after a failed cycle
            on_error(exc)
            continue

        on_event(f"[watch] done ({result.duration_s:.1f}s, exit {result.exit_code})")


def build_cycle_runner(
    convert_one: Callable[[Path], int],
) -> Callable[[WatchEvent], WatchCycleResult]:
    """Create a cycle runner that converts each changed source with `convert_one`."""

    def runner(event: WatchEvent) -> WatchCycleResult:
        t0 = time.monotonic()
        exit_code = 0
        for path in sorted(event.changed_paths):
            exit_code = max(exit_code, convert_one(path))
        return WatchCycleResult(
            exit_code=exit_code,
            duration_s=time.monotonic() - t0,
            changed_paths=event.changed_paths,
        )

    return runner


def make_watchfiles_iter(watch_paths: list[Path]) -> AsyncIterator[set[tuple[Any, str]]]:
    """Create an async iterator using watchfiles.awatch()."""
    import watchfiles  # type: ignore[import-untyped]

    return watchfiles.awatch(*watch_paths, debounce=200)
