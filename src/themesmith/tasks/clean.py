# src/themesmith/tasks/clean.py

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from ..core.context import BuildContext
from ..graph import Task

logger = logging.getLogger(__name__)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


def _prune(directory: Path, keep: list[Path]) -> int:
    """Delete everything under directory except the kept subtrees. Returns removed entries."""
    removed = 0
    for child in sorted(directory.iterdir()):
        if child in keep:
            continue
        if any(child in k.parents for k in keep) and child.is_dir():
            removed += _prune(child, keep)
            continue
        _remove(child)
        removed += 1
    return removed


def clean_outputs(root: Path, roots: tuple[str, ...], keep: tuple[str, ...]) -> int:
    """
    Force-delete generated output roots, preserving the `keep` subtrees
    (e.g. `assets/vendor`) byte for byte. Missing paths are not an error.
    """
    keep_paths = [root / k for k in keep]
    removed = 0
    for rel in roots:
        target = root / rel
        if not target.exists() and not target.is_symlink():
            continue
        if any(target in k.parents for k in keep_paths):
            removed += _prune(target, keep_paths)
        elif target in keep_paths:
            continue
        else:
            _remove(target)
            removed += 1
    return removed


def make_clean_task(ctx: BuildContext) -> Task:
    async def clean() -> None:
        removed = await asyncio.to_thread(
            clean_outputs, ctx.root, ctx.paths.clean_roots, ctx.paths.clean_keep
        )
        logger.debug("clean: removed %d entries", removed)

    return Task("clean", clean, "Delete generated assets, translations and packages.")
