# src/themesmith/watch/watcher.py

from __future__ import annotations

"""
File watcher.

One watchdog Observer watches the project root recursively. Its thread hands each
event over to the asyncio loop, where every rule whose patterns match the changed
path is fired:
- graph is not None -> run the graph, then broadcast a reload if it succeeded
- graph is None     -> broadcast a reload directly (templates)

Every matching event starts its own run (no debouncing), and overlapping runs of the
same rule may race on their outputs. With coalesce=True a rule has at most one run
in flight; events arriving meanwhile collapse into a single follow-up run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..core.globs import is_ignored, matches
from ..core.ports import ReloadNotifier
from ..errors import BuildError, WatchFailure
from ..graph import Node, Task, run

logger = logging.getLogger(__name__)

GraphRunner = Callable[[Node], Awaitable[None]]

_RELEVANT_EVENTS = {"created", "modified", "deleted", "moved"}


@dataclass(frozen=True, slots=True)
class WatchRule:
    name: str
    patterns: tuple[str, ...]
    graph: Task | Node | None = None
    reload: bool = True


class _EventBridge(FileSystemEventHandler):
    """Runs in the observer thread; only forwards paths to the loop."""

    def __init__(self, watcher: Watcher) -> None:
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELEVANT_EVENTS:
            return
        self._watcher.notify_threadsafe(event.src_path)
        dest = getattr(event, "dest_path", "")
        if dest:
            self._watcher.notify_threadsafe(dest)


class Watcher:
    def __init__(
        self,
        root: Path,
        rules: Iterable[WatchRule],
        notifier: ReloadNotifier | None,
        *,
        runner: GraphRunner = run,
        coalesce: bool = False,
        ignore: Iterable[str] = (),
    ) -> None:
        self.root = Path(root)
        self.rules = tuple(rules)
        self.notifier = notifier
        self.coalesce = coalesce
        self.ignore = tuple(ignore)
        self._runner = runner

        self._loop: asyncio.AbstractEventLoop | None = None
        self._observer: Observer | None = None
        self._runs: set[asyncio.Task[None]] = set()
        self._in_flight: set[str] = set()
        self._pending: set[str] = set()

    # ---- matching ----

    def rules_for(self, rel_path: str) -> list[WatchRule]:
        if self.ignore and is_ignored(rel_path, self.ignore):
            return []
        return [r for r in self.rules if matches(rel_path, r.patterns)]

    def _relative(self, path: str | Path) -> str | None:
        try:
            return Path(path).resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return None

    # ---- dispatch (loop side) ----

    def notify_threadsafe(self, path: str | bytes) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        if isinstance(path, bytes):
            path = path.decode("utf-8", "replace")
        self._loop.call_soon_threadsafe(self.handle_path, path)

    def handle_path(self, path: str | Path) -> list[WatchRule]:
        rel = self._relative(path)
        if rel is None:
            return []
        fired = self.rules_for(rel)
        for rule in fired:
            logger.debug("%s changed -> %s", rel, rule.name)
            self.trigger(rule)
        return fired

    def trigger(self, rule: WatchRule) -> asyncio.Task[None] | None:
        if self.coalesce and rule.name in self._in_flight:
            self._pending.add(rule.name)
            return None
        self._in_flight.add(rule.name)
        task = asyncio.create_task(self._fire(rule), name=f"watch:{rule.name}")
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    async def _fire(self, rule: WatchRule) -> None:
        try:
            while True:
                await self._execute(rule)
                if not (self.coalesce and rule.name in self._pending):
                    break
                self._pending.discard(rule.name)
        finally:
            self._in_flight.discard(rule.name)

    async def _execute(self, rule: WatchRule) -> bool:
        if rule.graph is not None:
            try:
                await self._runner(rule.graph)
            except BuildError as e:
                # The watch keeps running; the next change gets another try.
                logger.error("%s", e)
                return False
        if rule.reload and self.notifier is not None:
            clients = self.notifier.broadcast_reload()
            logger.info("Reloading browsers (%d connected)", clients)
        return True

    async def drain(self) -> None:
        """Wait for every run started so far (including coalesced follow-ups)."""
        while self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    # ---- observer lifecycle ----

    def start(self) -> None:
        if not self.root.is_dir():
            raise WatchFailure(f"Cannot watch {self.root}: not a directory")
        self._loop = asyncio.get_running_loop()
        observer = Observer()
        try:
            observer.schedule(_EventBridge(self), str(self.root), recursive=True)
            observer.start()
        except OSError as e:
            raise WatchFailure(f"Cannot watch {self.root}: {e}") from e
        self._observer = observer
        patterns = ", ".join(p for r in self.rules for p in r.patterns)
        logger.info("Watching %s for %s", self.root, patterns)

    def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)

    async def run_forever(self) -> None:
        """Watch until cancelled. Never returns normally."""
        self.start()
        try:
            await asyncio.Event().wait()
        finally:
            self.stop()
