# src/themesmith/tasks/compress.py

"""
Packaging: everything that ships with the theme, zipped into `packaged/{name}.zip`.

Development-only paths (sources, node_modules, build configs, dotfiles) are left
out. Text files are streamed line by line with the placeholder token replaced by
the project's text domain; binary files are stored unchanged.
"""

from __future__ import annotations

import asyncio
import logging
import zipfile
from collections.abc import Iterator
from pathlib import Path

from ..core.context import BuildContext
from ..core.globs import is_ignored
from ..errors import TransformFailure
from ..graph import Task

logger = logging.getLogger(__name__)


def is_text_file(path: Path) -> bool:
    data = path.read_bytes()
    if b"\x00" in data:
        return False
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def iter_package_files(root: Path, excludes: tuple[str, ...]) -> Iterator[Path]:
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if is_ignored(path.relative_to(root).as_posix(), excludes):
            continue
        yield path


def _replace_stream(src: Path, zf: zipfile.ZipFile, arcname: str, token: str, replacement: str) -> int:
    count = 0
    with src.open("r", encoding="utf-8", newline="") as fin, zf.open(arcname, "w") as fout:
        for line in fin:
            if token in line:
                count += line.count(token)
                line = line.replace(token, replacement)
            fout.write(line.encode("utf-8"))
    return count


def write_package(
    root: Path,
    archive: Path,
    excludes: tuple[str, ...],
    token: str,
    replacement: str,
) -> tuple[int, int]:
    """Build the archive. Returns (files packaged, token replacements)."""
    archive.parent.mkdir(parents=True, exist_ok=True)
    packaged = replaced = 0
    with zipfile.ZipFile(archive, "w", zipfile.ZIP_DEFLATED, strict_timestamps=False) as zf:
        for path in iter_package_files(root, excludes):
            arcname = path.relative_to(root).as_posix()
            try:
                if token and is_text_file(path):
                    replaced += _replace_stream(path, zf, arcname, token, replacement)
                else:
                    zf.write(path, arcname)
            except (OSError, ValueError) as e:
                raise TransformFailure("zip", str(e), path) from e
            packaged += 1
    return packaged, replaced


def make_compress_task(ctx: BuildContext) -> Task:
    async def compress() -> None:
        group = ctx.paths.group("package")
        archive = ctx.path(group.dest) / f"{ctx.name}.zip"
        count, replaced = await asyncio.to_thread(
            write_package,
            ctx.root,
            archive,
            ctx.paths.package_excludes,
            ctx.settings.placeholder_token,
            ctx.settings.text_domain,
        )
        logger.info(
            "compress: %d files (%d '%s' replacements) -> %s",
            count,
            replaced,
            ctx.settings.placeholder_token,
            archive.relative_to(ctx.root),
        )

    return Task("compress", compress, "Zip the distributable theme.")
