# src/themesmith/cli/main.py

"""
CLI entrypoint.

    themesmith [task] [--prod]

Initializes logging, builds the BuildContext and the task registry, then runs the
selected graph (default: dev). If the run started the live-reload server, the
process keeps serving until Ctrl+C.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ..config import Settings, get_settings
from ..core.context import BuildContext
from ..errors import BuildError
from ..graph import Node, run as run_graph
from ..logging_setup import setup_logging
from .bootstrap import build_registry, create_context

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="themesmith", description="Build theme assets.")
    parser.add_argument("task", nargs="?", default=None, help="Task to run (default: dev).")
    parser.add_argument(
        "--prod",
        action="store_true",
        help="Production mode: minified -min files, no source maps, optimized images.",
    )
    return parser


async def _execute(ctx: BuildContext, node: Node) -> int:
    try:
        await run_graph(node)
        if ctx.server is not None and ctx.server.is_running:
            logger.info("Serving. Press Ctrl+C to stop.")
            await ctx.server.wait_closed()
    except BuildError as e:
        logger.error("%s", e)
        return 1
    finally:
        if ctx.server is not None:
            await ctx.server.stop()
    return 0


def main(argv: list[str] | None = None, *, settings: Settings | None = None) -> int:
    args = _parser().parse_args(argv)
    if settings is None:
        settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.log_dir, console_level=console_level)
    logger.debug("Logging to %s", log_file)

    ctx = create_context(settings, production=args.prod)
    registry = build_registry(ctx)

    name = args.task or registry.default
    if name not in registry:
        print(f"Unknown task: {name}\n{registry.build_help()}", file=sys.stderr)
        return 2

    logger.info("Using %s (%s, %s mode)", settings.project_root, settings.project_name, ctx.paths.mode)

    try:
        return asyncio.run(_execute(ctx, registry.get(name)))
    except KeyboardInterrupt:
        logger.info("Interrupted. Bye.")
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
