# src/themesmith/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "themesmith.log"

# Chatty below these levels even in the file log.
_THIRD_PARTY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "watchdog": logging.INFO,
    "PIL": logging.INFO,
    "asyncio": logging.INFO,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console shows the build, not the libraries:
    - themesmith.* always
    - uvicorn from WARNING (one line per proxied request otherwise)
    - everything else, captured warnings included, from ERROR
    """

    def filter(self, record: logging.LogRecord) -> bool:
        origin = record.name
        if origin.startswith("themesmith."):
            return True
        if origin.startswith("uvicorn"):
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="[%(asctime)s] %(message)s", datefmt="%H:%M:%S"))
    handler.addFilter(_ConsoleNoiseFilter())
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/themesmith",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logging to two places:
    - stderr: `[12:00:01] Finished 'styles' after 84 ms`, filtered
    - <log_dir>/themesmith.log: every record with logger name and level

    Replaces whatever handlers the root logger had, so calling it again
    (e.g. from tests) does not duplicate lines. Returns the log file path.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(_console_handler(console_level))
    root.addHandler(_file_handler(log_file, file_level))

    for name, level in _THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)
    return log_file
