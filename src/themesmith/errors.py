# src/themesmith/errors.py

"""
Build failures.

- TransformFailure: a plugin (sass, esbuild, Pillow, ...) rejected an input or a path
  could not be read/written. Carries the plugin's own diagnostic.
- TaskFailure: a named task failed; wraps the cause.
- GraphFailure: one or more concurrent siblings failed; raised after all of them finished.
- WatchFailure: the filesystem notifier could not attach. Fatal for the watch process.
- ServerFailure: the live-reload server could not start (port in use, ...).

A glob that matches nothing is NOT an error: the task just produces no output.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class BuildError(Exception):
    """Base class for everything the CLI reports as a failed run."""


class TransformFailure(BuildError):
    def __init__(self, step: str, detail: str, source: Path | str | None = None) -> None:
        self.step = step
        self.detail = detail.strip()
        self.source = source
        where = f" ({source})" if source is not None else ""
        super().__init__(f"{step} failed{where}: {self.detail}")


class TaskFailure(BuildError):
    def __init__(self, task: str, cause: BaseException) -> None:
        self.task = task
        self.cause = cause
        super().__init__(f"'{task}' failed: {cause}")


class GraphFailure(BuildError):
    def __init__(self, failures: Iterable[BuildError]) -> None:
        flat: list[BuildError] = []
        for f in failures:
            if isinstance(f, GraphFailure):
                flat.extend(f.failures)
            else:
                flat.append(f)
        self.failures = flat
        lines = [f"{len(flat)} task(s) failed:"]
        lines.extend(f"  - {f}" for f in flat)
        super().__init__("\n".join(lines))


class WatchFailure(BuildError):
    pass


class ServerFailure(BuildError):
    """The live-reload server could not bind or crashed while starting."""
