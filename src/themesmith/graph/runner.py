# src/themesmith/graph/runner.py

from __future__ import annotations

"""
Task graph.

A graph is a tree:
- Leaf(task): one named unit of work (an async callable, rerunnable, overwrites its output)
- Composite(SEQUENCE, children): children run strictly one after another;
  the first failure stops the sequence and is re-raised as-is
- Composite(CONCURRENT, children): children are started together on the event loop;
  the composite finishes when all of them finished, then raises GraphFailure
  if any failed (running siblings are never cancelled)

Completion is the coroutine returning; failure is an exception (BuildError).
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum

from ..errors import BuildError, GraphFailure, TaskFailure

logger = logging.getLogger(__name__)

TaskBody = Callable[[], Awaitable[None]]


class Mode(StrEnum):
    SEQUENCE = "sequence"
    CONCURRENT = "concurrent"


@dataclass(frozen=True, slots=True)
class Task:
    name: str
    body: TaskBody
    description: str = ""


@dataclass(frozen=True, slots=True)
class Leaf:
    task: Task

    @property
    def name(self) -> str:
        return self.task.name


@dataclass(frozen=True, slots=True)
class Composite:
    mode: Mode
    children: tuple["Node", ...]
    name: str | None = None


Node = Leaf | Composite


def as_node(item: Task | Node) -> Node:
    if isinstance(item, Task):
        return Leaf(item)
    if isinstance(item, (Leaf, Composite)):
        return item
    raise TypeError(f"Expected Task or graph node, got {type(item).__name__}")


def sequence(*items: Task | Node, name: str | None = None) -> Composite:
    return Composite(Mode.SEQUENCE, tuple(as_node(i) for i in items), name)


def concurrent(*items: Task | Node, name: str | None = None) -> Composite:
    return Composite(Mode.CONCURRENT, tuple(as_node(i) for i in items), name)


def describe(node: Node) -> str:
    """Human-readable shape: `clean -> (styles | scripts | images) -> pot`."""
    if isinstance(node, Leaf):
        return node.task.name
    sep = " -> " if node.mode is Mode.SEQUENCE else " | "
    inner = sep.join(describe(c) for c in node.children)
    return inner if node.mode is Mode.SEQUENCE else f"({inner})"


def _elapsed(started: float) -> str:
    secs = time.perf_counter() - started
    if secs < 1.0:
        return f"{secs * 1000:.0f} ms"
    return f"{secs:.2f} s"


async def _run_task(task: Task) -> None:
    logger.info("Starting '%s'...", task.name)
    started = time.perf_counter()
    try:
        await task.body()
    except TaskFailure:
        logger.error("'%s' errored after %s", task.name, _elapsed(started))
        raise
    except (BuildError, OSError) as e:
        logger.error("'%s' errored after %s", task.name, _elapsed(started))
        raise TaskFailure(task.name, e) from e
    logger.info("Finished '%s' after %s", task.name, _elapsed(started))


async def _run_sequence(children: tuple[Node, ...]) -> None:
    for child in children:
        await run(child)


async def _run_concurrent(children: tuple[Node, ...]) -> None:
    results = await asyncio.gather(*(run(c) for c in children), return_exceptions=True)

    failures: list[BuildError] = []
    for result in results:
        if isinstance(result, BuildError):
            failures.append(result)
        elif isinstance(result, BaseException):
            # Not a build failure (cancellation, programming error): propagate untouched.
            raise result
    if failures:
        raise GraphFailure(failures)


async def run(node: Task | Node) -> None:
    """Execute a graph from its root. Returns when the whole graph completed."""
    node = as_node(node)
    if isinstance(node, Leaf):
        await _run_task(node.task)
        return

    if node.name:
        logger.debug("Running '%s': %s", node.name, describe(node))

    if node.mode is Mode.SEQUENCE:
        await _run_sequence(node.children)
    else:
        await _run_concurrent(node.children)
