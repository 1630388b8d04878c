# tests/test_watcher.py

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from themesmith.errors import WatchFailure
from themesmith.graph import run, sequence
from themesmith.watch.watcher import Watcher, WatchRule

from .fakes import FakeNotifier, recording_task


def _watcher(root: Path, events: list[str], **kwargs) -> Watcher:
    rules = [
        WatchRule("styles", ("src/scss/**/*.scss",), recording_task("styles", events)),
        WatchRule("scripts", ("src/js/**/*.js",), recording_task("scripts", events)),
        WatchRule("templates", ("**/*.php",), None),
    ]
    return Watcher(root, rules, FakeNotifier(events), ignore=("node_modules", ".git"), **kwargs)


def test_rules_for_matches_patterns(tmp_path: Path):
    w = _watcher(tmp_path, [])

    assert [r.name for r in w.rules_for("src/scss/parts/_x.scss")] == ["styles"]
    assert [r.name for r in w.rules_for("src/js/util/math.js")] == ["scripts"]
    assert [r.name for r in w.rules_for("inc/template-tags.php")] == ["templates"]
    assert w.rules_for("assets/css/demo.css") == []
    assert w.rules_for("node_modules/pkg/x.php") == []


@pytest.mark.asyncio
async def test_asset_change_runs_graph_then_reloads(tmp_path: Path):
    events: list[str] = []
    w = _watcher(tmp_path, events)

    fired = w.handle_path(tmp_path / "src/scss/style.scss")
    await w.drain()

    assert [r.name for r in fired] == ["styles"]
    assert events == ["styles:start", "styles:end", "reload"]


@pytest.mark.asyncio
async def test_template_change_reloads_without_building(tmp_path: Path):
    events: list[str] = []
    w = _watcher(tmp_path, events)

    w.handle_path(tmp_path / "footer.php")
    await w.drain()

    assert events == ["reload"]


@pytest.mark.asyncio
async def test_paths_outside_root_are_ignored(tmp_path: Path):
    events: list[str] = []
    w = _watcher(tmp_path / "theme", events)

    assert w.handle_path(tmp_path / "elsewhere/index.php") == []
    await w.drain()
    assert events == []


@pytest.mark.asyncio
async def test_failed_rebuild_skips_reload_and_keeps_watching(tmp_path: Path):
    events: list[str] = []
    rule = WatchRule("styles", ("*.scss",), recording_task("styles", events, fail=True))
    w = Watcher(tmp_path, [rule], FakeNotifier(events))

    w.handle_path(tmp_path / "a.scss")
    await w.drain()
    w.handle_path(tmp_path / "a.scss")
    await w.drain()

    assert events == ["styles:start", "styles:start"]


@pytest.mark.asyncio
async def test_every_event_starts_a_run(tmp_path: Path):
    events: list[str] = []
    w = _watcher(tmp_path, events)

    for _ in range(3):
        w.handle_path(tmp_path / "src/js/bundle.js")
    await w.drain()

    assert events.count("scripts:start") == 3
    assert events.count("reload") == 3


@pytest.mark.asyncio
async def test_coalesce_collapses_changes_during_a_run(tmp_path: Path):
    events: list[str] = []
    gate = asyncio.Event()
    rule = WatchRule("styles", ("*.scss",), recording_task("styles", events, gate=gate))
    w = Watcher(tmp_path, [rule], FakeNotifier(events), coalesce=True)

    w.handle_path(tmp_path / "a.scss")
    await asyncio.sleep(0)
    for _ in range(3):
        w.handle_path(tmp_path / "a.scss")
    gate.set()
    await w.drain()

    assert events.count("styles:start") == 2
    assert events[-1] == "reload"


@pytest.mark.asyncio
async def test_rules_accept_composite_graphs(tmp_path: Path):
    events: list[str] = []
    graph = sequence(recording_task("a", events), recording_task("b", events))
    w = Watcher(tmp_path, [WatchRule("both", ("*.txt",), graph)], FakeNotifier(events), runner=run)

    w.handle_path(tmp_path / "x.txt")
    await w.drain()

    assert events == ["a:start", "a:end", "b:start", "b:end", "reload"]


@pytest.mark.asyncio
async def test_missing_root_cannot_be_watched(tmp_path: Path):
    w = _watcher(tmp_path / "nope", [])
    with pytest.raises(WatchFailure):
        w.start()


@pytest.mark.asyncio
async def test_observer_delivers_real_changes(tmp_path: Path):
    events: list[str] = []
    target = tmp_path / "src/scss/style.scss"
    target.parent.mkdir(parents=True)
    w = _watcher(tmp_path, events)
    w.start()
    try:
        target.write_text("body {}", "utf-8")
        for _ in range(100):
            if "reload" in events:
                break
            await asyncio.sleep(0.05)
        await w.drain()
    finally:
        w.stop()

    assert "styles:end" in events
    assert "reload" in events
