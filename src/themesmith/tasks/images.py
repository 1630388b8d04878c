# src/themesmith/tasks/images.py

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..core.context import BuildContext
from ..core.globs import glob_base, iter_files
from ..errors import TransformFailure
from ..graph import Task
from . import files

logger = logging.getLogger(__name__)

_PILLOW_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG"}


def _optimize(source: Path, data: bytes) -> bytes:
    """Re-encode PNG (lossless) and JPEG (lossy, quality 85); keep the original when it is already smaller."""
    fmt = _PILLOW_FORMATS.get(source.suffix.lower())
    if fmt is None:
        return data

    try:
        with Image.open(io.BytesIO(data)) as img:
            buf = io.BytesIO()
            if fmt == "JPEG":
                img.save(buf, format=fmt, optimize=True, progressive=True, quality=85)
            else:
                img.save(buf, format=fmt, optimize=True)
    except (UnidentifiedImageError, OSError) as e:
        raise TransformFailure("imagemin", str(e), source) from e

    out = buf.getvalue()
    return out if len(out) < len(data) else data


async def build_images(ctx: BuildContext) -> list[Path]:
    group = ctx.paths.group("images")
    dest_dir = ctx.path(group.dest)

    written: list[Path] = []
    for pattern in group.src:
        base = ctx.path(glob_base(pattern))
        for source in iter_files(ctx.root, (pattern,)):
            data = await files.read_bytes(source, "images")
            if ctx.paths.optimize_images:
                data = await asyncio.to_thread(_optimize, source, data)
            dest = dest_dir / source.relative_to(base)
            written.append(await files.write_bytes(dest, data))

    if not written:
        logger.info("images: nothing matched %s", ", ".join(group.src))
    return written


def make_images_task(ctx: BuildContext) -> Task:
    async def images() -> None:
        await build_images(ctx)

    return Task("images", images, "Copy images, optimized in production.")
