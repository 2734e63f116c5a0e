"""Tests for sidenote.watcher."""

from __future__ import annotations

import asyncio
import sys
import types
from pathlib import Path

import pytest

from sidenote.watcher import (
    WatchCycleResult,
    WatchEvent,
    build_cycle_runner,
    check_watchfiles_available,
    filter_sources,
    run_watch_loop,
)


def test_check_watchfiles_available_raises_when_missing(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "watchfiles", None)
    with pytest.raises(ImportError, match="pip install sidenote\\[watch\\]"):
        check_watchfiles_available()


def test_check_watchfiles_available_succeeds_when_installed(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "watchfiles", types.ModuleType("watchfiles"))
    check_watchfiles_available()


def test_filter_sources_keeps_only_watched_files(tmp_path: Path) -> None:
    a = tmp_path / "a.py"
    b = tmp_path / "b.py"
    changed = frozenset({a, b, tmp_path / "a.html"})
    assert filter_sources(changed, sources=[a]) == frozenset({a})
    assert filter_sources(changed, sources=[]) == frozenset()


def test_build_cycle_runner_reports_worst_exit_code(tmp_path: Path) -> None:
    seen: list[Path] = []

    def convert_one(path: Path) -> int:
        seen.append(path)
        return 3 if path.name == "bad.py" else 0

    runner = build_cycle_runner(convert_one)
    paths = frozenset({tmp_path / "ok.py", tmp_path / "bad.py"})
    result = runner(WatchEvent(changed_paths=paths, timestamp=0.0))

    assert result.exit_code == 3
    assert result.changed_paths == paths
    assert sorted(seen) == sorted(paths)


async def _changes(batches):
    for batch in batches:
        yield batch


def test_run_watch_loop_runs_cycles_for_relevant_changes(tmp_path: Path) -> None:
    src = tmp_path / "mod.py"
    batches = [
        {(1, str(tmp_path / "other.txt"))},
        {(1, str(src))},
    ]
    events: list[WatchEvent] = []
    messages: list[str] = []

    def run_cycle(event: WatchEvent) -> WatchCycleResult:
        events.append(event)
        return WatchCycleResult(exit_code=0, duration_s=0.01, changed_paths=event.changed_paths)

    asyncio.run(
        run_watch_loop(
            changes_iter=_changes(batches),
            sources=[src],
            run_cycle=run_cycle,
            on_event=messages.append,
            on_error=lambda e: pytest.fail(f"unexpected error: {e}"),
        )
    )

    assert len(events) == 1
    assert events[0].changed_paths == frozenset({src})
    assert any("change detected" in m for m in messages)
    assert any("done" in m for m in messages)


def test_run_watch_loop_survives_cycle_errors(tmp_path: Path) -> None:
    src = tmp_path / "mod.py"
    errors: list[BaseException] = []

    def run_cycle(event: WatchEvent) -> WatchCycleResult:
        raise RuntimeError("cycle failed")

    asyncio.run(
        run_watch_loop(
            changes_iter=_changes([{(1, str(src))}, {(2, str(src))}]),
            sources=[src],
            run_cycle=run_cycle,
            on_event=lambda m: None,
            on_error=errors.append,
        )
    )
    assert len(errors) == 2
