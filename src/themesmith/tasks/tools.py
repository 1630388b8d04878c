# src/themesmith/tasks/tools.py

"""
External Node CLI tools (postcss, esbuild).

They are optional collaborators: a theme that has them in node_modules gets
autoprefixing and real bundling, one that does not gets the pure-Python fallback.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from ..config import Settings
from ..errors import TransformFailure

logger = logging.getLogger(__name__)


def find_tool(settings: Settings, name: str) -> str | None:
    """Local node_modules/.bin first, then PATH. None when tools are disabled."""
    if not settings.node_tools:
        return None
    local = settings.project_root / "node_modules" / ".bin" / name
    if local.exists():
        return str(local)
    return shutil.which(name)


async def run_tool(
    step: str,
    argv: list[str],
    *,
    source: Path | None = None,
    stdin: bytes | None = None,
    cwd: Path | None = None,
) -> bytes:
    """Run a tool, return stdout. Non-zero exit -> TransformFailure with the tool's stderr."""
    logger.debug("%s: %s", step, " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except OSError as e:
        raise TransformFailure(step, f"cannot start {argv[0]}: {e}", source) from e

    out, err = await proc.communicate(stdin)
    if proc.returncode != 0:
        detail = err.decode("utf-8", "replace") or out.decode("utf-8", "replace")
        raise TransformFailure(step, detail or f"exit code {proc.returncode}", source)
    return out
