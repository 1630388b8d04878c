# src/themesmith/core/paths.py

"""
PathConfig: where each asset group is read from and written to.

All patterns are relative to the project root and use glob syntax with
`**` (any depth) and `{a,b}` alternatives. The table is static; the only input
is the production flag coming from the CLI.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class AssetGroup:
    src: tuple[str, ...]
    dest: str
    # Extra patterns that should trigger a rebuild (e.g. imported JS modules).
    watch: tuple[str, ...] = ()

    @property
    def watch_patterns(self) -> tuple[str, ...]:
        return self.watch or self.src


# Paths that must never reach the packaged archive.
PACKAGE_EXCLUDES: tuple[str, ...] = (
    "**/.*",
    "node_modules",
    "src",
    "packaged",
    "gulpfile.babel.js",
    "package.json",
    "package-lock.json",
    "composer.json",
    "composer.lock",
    "README.md",
    "pyproject.toml",
)

CLEAN_ROOTS: tuple[str, ...] = ("assets", "languages", "packaged")
CLEAN_KEEP: tuple[str, ...] = ("assets/vendor",)

_GROUPS: dict[str, AssetGroup] = {
    "styles": AssetGroup(src=("src/scss/**/*.scss",), dest="assets/css"),
    "scripts": AssetGroup(
        src=("src/js/bundle.js",),
        dest="assets/js",
        watch=("src/js/**/*.js",),
    ),
    "images": AssetGroup(src=("src/images/**/*.{jpg,jpeg,png,svg}",), dest="assets/images"),
    "templates": AssetGroup(src=("**/*.php",), dest=""),
    "pot": AssetGroup(src=("**/*.php",), dest="languages"),
    "package": AssetGroup(src=("**/*",), dest="packaged"),
}


@dataclass(frozen=True, slots=True)
class PathConfig:
    groups: Mapping[str, AssetGroup]
    production: bool = False
    package_excludes: tuple[str, ...] = PACKAGE_EXCLUDES
    clean_roots: tuple[str, ...] = CLEAN_ROOTS
    clean_keep: tuple[str, ...] = CLEAN_KEEP

    @property
    def suffix(self) -> str:
        return "-min" if self.production else ""

    @property
    def source_maps(self) -> bool:
        return not self.production

    @property
    def output_style(self) -> str:
        return "compressed" if self.production else "expanded"

    @property
    def optimize_images(self) -> bool:
        return self.production

    @property
    def mode(self) -> str:
        return "production" if self.production else "development"

    def group(self, name: str) -> AssetGroup:
        try:
            return self.groups[name]
        except KeyError:
            raise KeyError(f"Unknown asset group: {name!r}") from None


def load(production: bool = False) -> PathConfig:
    """Build the PathConfig for one run. Pure: same flag, same result."""
    return PathConfig(groups=MappingProxyType(dict(_GROUPS)), production=bool(production))
