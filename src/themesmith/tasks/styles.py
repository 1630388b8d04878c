# src/themesmith/tasks/styles.py

"""
Stylesheets: scss -> css -> autoprefix -> rename -> write.

Every non-partial `.scss` matched by the styles group is an entry point. Its output
is renamed after the project (`{name}{suffix}.css`), so a theme normally has one
entry (`style.scss`) that imports its partials (`_variables.scss`, ...).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import sass

from ..core.context import BuildContext
from ..core.globs import iter_files
from ..errors import TransformFailure
from ..graph import Task
from . import files
from .tools import find_tool, run_tool

logger = logging.getLogger(__name__)


def _compile(source: Path, css_path: Path, map_path: Path | None, output_style: str) -> tuple[str, str | None]:
    kwargs: dict = {
        "filename": str(source),
        "output_style": output_style,
        "include_paths": [str(source.parent)],
    }
    if map_path is not None:
        kwargs.update(
            source_map_filename=str(map_path),
            output_filename_hint=str(css_path),
            source_map_contents=True,
        )
    try:
        result = sass.compile(**kwargs)
    except sass.CompileError as e:
        raise TransformFailure("sass", str(e), source) from e

    if map_path is not None:
        css, source_map = result
        return css, source_map
    return result, None


async def _autoprefix(ctx: BuildContext, css: str, source: Path) -> str:
    postcss = find_tool(ctx.settings, "postcss")
    if postcss is None:
        logger.warning("postcss not found; %s is written without vendor prefixes", source.name)
        return css
    out = await run_tool(
        "autoprefixer",
        [postcss, "--use", "autoprefixer", "--no-map"],
        source=source,
        stdin=css.encode("utf-8"),
        cwd=ctx.root,
    )
    return out.decode("utf-8")


async def build_styles(ctx: BuildContext) -> list[Path]:
    paths = ctx.paths
    group = paths.group("styles")
    dest_dir = ctx.path(group.dest)

    entries = [p for p in iter_files(ctx.root, group.src) if not p.name.startswith("_")]
    if not entries:
        logger.info("styles: no stylesheets matched %s", ", ".join(group.src))
        return []
    if len(entries) > 1:
        logger.warning(
            "styles: %d entry stylesheets all render to %s%s.css; the last one wins",
            len(entries),
            ctx.name,
            paths.suffix,
        )

    css_path = dest_dir / f"{ctx.name}{paths.suffix}.css"
    map_path = css_path.with_name(css_path.name + ".map") if paths.source_maps else None

    written: list[Path] = []
    for source in entries:
        css, source_map = await asyncio.to_thread(_compile, source, css_path, map_path, paths.output_style)
        css = await _autoprefix(ctx, css, source)

        written.append(await files.write_text(css_path, css))
        if map_path is not None and source_map is not None:
            written.append(await files.write_text(map_path, source_map))
        logger.debug("styles: %s -> %s", source.relative_to(ctx.root), css_path.relative_to(ctx.root))
    return written


def make_styles_task(ctx: BuildContext) -> Task:
    async def styles() -> None:
        await build_styles(ctx)

    return Task("styles", styles, "Compile SCSS into the theme stylesheet.")
