# src/themesmith/tasks/scripts.py

"""
Scripts: bundle the entry module into `{name}{suffix}.js`.

With esbuild available (node_modules/.bin or PATH) the entry is bundled with its
imports, a source map in development and minification in production. Without it
the entry is taken as-is and minified with rjsmin in production.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

import rjsmin

from ..core.context import BuildContext
from ..core.globs import iter_files
from ..errors import TransformFailure
from ..graph import Task
from . import files
from .tools import find_tool, run_tool

logger = logging.getLogger(__name__)

# ES module imports, dynamic import() and CommonJS require() all need a bundler.
_MODULE_SYNTAX = re.compile(r"^\s*(?:import\b|export\b[^;\n]*\bfrom\b)|\bimport\s*\(|\brequire\s*\(", re.MULTILINE)


async def _esbuild(ctx: BuildContext, esbuild: str, entry: Path, out_path: Path) -> None:
    argv = [esbuild, str(entry), "--bundle", f"--outfile={out_path}", "--log-level=warning"]
    if ctx.paths.source_maps:
        argv.append("--sourcemap")
    if ctx.paths.production:
        argv.append("--minify")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    await run_tool("esbuild", argv, source=entry, cwd=ctx.root)


async def _fallback(ctx: BuildContext, entry: Path, out_path: Path) -> None:
    code = await files.read_text(entry, "scripts")
    if _MODULE_SYNTAX.search(code):
        raise TransformFailure("scripts", "entry uses imports but no bundler is available", entry)
    if ctx.paths.production:
        code = await asyncio.to_thread(rjsmin.jsmin, code)
    await files.write_text(out_path, code)


async def build_scripts(ctx: BuildContext) -> list[Path]:
    group = ctx.paths.group("scripts")
    entries = list(iter_files(ctx.root, group.src))
    if not entries:
        logger.info("scripts: no entry matched %s", ", ".join(group.src))
        return []

    out_path = ctx.path(group.dest) / f"{ctx.name}{ctx.paths.suffix}.js"
    esbuild = find_tool(ctx.settings, "esbuild")

    for entry in entries:
        if esbuild is not None:
            await _esbuild(ctx, esbuild, entry, out_path)
        else:
            logger.warning("esbuild not found; copying %s without bundling", entry.name)
            await _fallback(ctx, entry, out_path)
        logger.debug("scripts: %s -> %s", entry.relative_to(ctx.root), out_path.relative_to(ctx.root))

    written = [out_path]
    map_path = out_path.with_name(out_path.name + ".map")
    if map_path.exists() and ctx.paths.source_maps:
        written.append(map_path)
    return written


def make_scripts_task(ctx: BuildContext) -> Task:
    async def scripts() -> None:
        await build_scripts(ctx)

    return Task("scripts", scripts, "Bundle the theme JavaScript.")
