# src/themesmith/core/context.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config import Settings
from .paths import PathConfig
from .ports import DevServer


@dataclass(frozen=True, slots=True)
class BuildContext:
    """
    Everything a task constructor needs, passed explicitly.

    The mode flag lives on `paths`; the live-reload server is a value here, never a
    module-level instance.
    """

    settings: Settings
    paths: PathConfig
    server: DevServer | None = None

    @property
    def root(self) -> Path:
        return self.settings.project_root

    @property
    def name(self) -> str:
        return self.settings.project_name

    def path(self, rel: str) -> Path:
        return self.root / rel if rel else self.root
