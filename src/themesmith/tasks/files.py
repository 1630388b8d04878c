# src/themesmith/tasks/files.py

from __future__ import annotations

import asyncio
from pathlib import Path

from ..errors import TransformFailure


def _write(dest: Path, data: bytes) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)


async def read_text(path: Path, step: str = "read") -> str:
    try:
        return await asyncio.to_thread(path.read_text, "utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TransformFailure(step, str(e), path) from e


async def read_bytes(path: Path, step: str = "read") -> bytes:
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise TransformFailure(step, str(e), path) from e


async def write_bytes(dest: Path, data: bytes, step: str = "write") -> Path:
    """Write (overwrite) an output file, creating its directory. Last write wins."""
    try:
        await asyncio.to_thread(_write, dest, data)
    except OSError as e:
        raise TransformFailure(step, str(e), dest) from e
    return dest


async def write_text(dest: Path, text: str, step: str = "write") -> Path:
    return await write_bytes(dest, text.encode("utf-8"), step)

