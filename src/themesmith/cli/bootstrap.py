# src/themesmith/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- builds the BuildContext from settings and the --prod flag,
- constructs every task against that context,
- wires tasks into the exported composites and the watch rules,
- returns the explicit name -> graph registry the CLI dispatches on.
"""

from __future__ import annotations

import logging

from ..config import Settings
from ..core import paths as path_config
from ..core.context import BuildContext
from ..graph import Task, concurrent, sequence
from ..server.livereload import LiveReloadServer
from ..tasks.clean import make_clean_task
from ..tasks.compress import make_compress_task
from ..tasks.images import make_images_task
from ..tasks.pot import make_pot_task
from ..tasks.scripts import make_scripts_task
from ..tasks.styles import make_styles_task
from ..watch.watcher import Watcher, WatchRule
from .registry import TaskRegistry

logger = logging.getLogger(__name__)

DEFAULT_TASK = "dev"


def create_context(settings: Settings, *, production: bool = False) -> BuildContext:
    server = LiveReloadServer(
        settings.proxy_url,
        host=settings.server_host,
        port=settings.server_port,
    )
    return BuildContext(settings=settings, paths=path_config.load(production), server=server)


def build_watch_rules(ctx: BuildContext, styles: Task, scripts: Task, images: Task) -> list[WatchRule]:
    p = ctx.paths
    return [
        WatchRule("styles", p.group("styles").watch_patterns, styles),
        WatchRule("scripts", p.group("scripts").watch_patterns, scripts),
        WatchRule("images", p.group("images").watch_patterns, images),
        WatchRule("templates", p.group("templates").watch_patterns, None),
    ]


def make_serve_task(ctx: BuildContext) -> Task:
    async def serve() -> None:
        if ctx.server is None:
            logger.warning("serve: no live-reload server configured")
            return
        await ctx.server.start()

    return Task("serve", serve, "Start the live-reload proxy.")


def make_watch_task(ctx: BuildContext, rules: list[WatchRule]) -> Task:
    async def watch() -> None:
        watcher = Watcher(
            ctx.root,
            rules,
            ctx.server,
            coalesce=ctx.settings.watch_coalesce,
            ignore=ctx.settings.watch_ignore,
        )
        await watcher.run_forever()

    return Task("watch", watch, "Rebuild on change and reload browsers.")


def build_registry(ctx: BuildContext) -> TaskRegistry:
    clean = make_clean_task(ctx)
    styles = make_styles_task(ctx)
    scripts = make_scripts_task(ctx)
    images = make_images_task(ctx)
    pot = make_pot_task(ctx)
    compress = make_compress_task(ctx)
    serve = make_serve_task(ctx)
    watch = make_watch_task(ctx, build_watch_rules(ctx, styles, scripts, images))

    assets = concurrent(styles, scripts, images, name="assets")
    build = sequence(clean, assets, pot, name="build")

    reg = TaskRegistry(default=DEFAULT_TASK)
    for task in (clean, styles, scripts, images, pot, compress, serve, watch):
        reg.register(task.name, task)
    reg.register("dev", sequence(clean, assets, serve, watch, name="dev"), "Build, serve and watch.")
    reg.register("build", build, "Clean build of all assets plus translations.")
    reg.register("bundle", sequence(build, compress, name="bundle"), "Build, then package the theme.")
    return reg
