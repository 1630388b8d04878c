# src/themesmith/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole build (normal "settings layer").
- Nothing is read at import time; the CLI builds Settings once and threads it through.
- The production/development switch is NOT a setting: it comes from the CLI flag
  and lives on PathConfig.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "THEMESMITH"

logger = logging.getLogger(__name__)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    """Seed os.environ from the nearest .env above the working directory. Real env wins."""
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _read_package_name(root: Path) -> str | None:
    """Project name from package.json, the same file the theme's npm tooling reads."""
    manifest = root / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text("utf-8"))
    except (OSError, ValueError):
        logger.warning("Could not parse %s; falling back to the directory name.", manifest)
        return None
    name = data.get("name") if isinstance(data, dict) else None
    return name.strip() if isinstance(name, str) and name.strip() else None


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Project ----
    project_root: Path
    project_name: str

    # ---- Logging ----
    log_level: str
    log_dir: Path

    # ---- Dev server ----
    proxy_url: str
    server_host: str
    server_port: int

    # ---- Packaging ----
    placeholder_token: str

    # ---- Tooling ----
    node_tools: bool
    watch_coalesce: bool
    watch_ignore: tuple[str, ...]

    @property
    def text_domain(self) -> str:
        """Identifier-safe project name; replaces the placeholder token when packaging."""
        return self.project_name.replace("-", "_")

    @staticmethod
    def from_env() -> "Settings":
        _load_dotenv()

        project_root = _env_path(_k("PROJECT_ROOT"), Path.cwd()).resolve()
        project_name = (
            _env(_k("PROJECT_NAME")).strip()
            or _read_package_name(project_root)
            or project_root.name
        )

        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"), project_root / ".local" / "themesmith")

        proxy_url = _env(_k("PROXY_URL"), f"http://localhost/{project_name}")
        server_host = _env(_k("SERVER_HOST"), "127.0.0.1")
        server_port = _env_int(_k("SERVER_PORT"), 3000)

        placeholder_token = _env(_k("PLACEHOLDER_TOKEN"), "_aztheme")

        node_tools = _env_bool(_k("NODE_TOOLS"), True)
        watch_coalesce = _env_bool(_k("WATCH_COALESCE"), False)
        watch_ignore = tuple(_env_list(_k("WATCH_IGNORE"), [".git", "node_modules", ".local"]))

        return Settings(
            project_root=project_root,
            project_name=project_name,
            log_level=log_level,
            log_dir=log_dir,
            proxy_url=proxy_url,
            server_host=server_host,
            server_port=server_port,
            placeholder_token=placeholder_token,
            node_tools=node_tools,
            watch_coalesce=watch_coalesce,
            watch_ignore=watch_ignore,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
