# src/themesmith/core/globs.py

"""
Glob helpers shared by tasks and the watcher.

Supported syntax: `*` (inside one path segment), `?`, `**` (zero or more
directories) and `{a,b}` alternatives. Paths are always compared in POSIX form,
relative to the project root.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path, PurePosixPath

_BRACE = re.compile(r"\{([^{}]*)\}")
_MAGIC = re.compile(r"[*?\[{]")


def expand_braces(pattern: str) -> list[str]:
    """`a.{png,svg}` -> [`a.png`, `a.svg`]. Nested groups are expanded left to right."""
    m = _BRACE.search(pattern)
    if m is None:
        return [pattern]
    head, tail = pattern[: m.start()], pattern[m.end() :]
    out: list[str] = []
    for alt in m.group(1).split(","):
        out.extend(expand_braces(head + alt + tail))
    return out


def glob_base(pattern: str) -> str:
    """Literal directory prefix of a pattern: `src/images/**/*.png` -> `src/images`."""
    parts = PurePosixPath(pattern).parts
    base: list[str] = []
    for part in parts[:-1]:
        if _MAGIC.search(part):
            break
        base.append(part)
    return "/".join(base)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    i, n = 0, len(pattern)
    out: list[str] = []
    while i < n:
        c = pattern[i]
        if pattern.startswith("**/", i):
            out.append(r"(?:[^/]+/)*")
            i += 3
        elif pattern.startswith("**", i):
            out.append(r".*")
            i += 2
        elif c == "*":
            out.append(r"[^/]*")
            i += 1
        elif c == "?":
            out.append(r"[^/]")
            i += 1
        else:
            out.append(re.escape(c))
            i += 1
    return re.compile("".join(out) + r"\Z")


def matches(rel_path: str, patterns: Iterable[str]) -> bool:
    """True when a root-relative POSIX path matches any of the patterns."""
    for pattern in patterns:
        for p in expand_braces(pattern):
            if _compile(p).match(rel_path):
                return True
    return False


def is_ignored(rel_path: str, ignore: Iterable[str]) -> bool:
    """True when any leading part of the path equals/matches an ignore entry (`node_modules`, `.*`)."""
    parts = PurePosixPath(rel_path).parts
    for i in range(1, len(parts) + 1):
        prefix = "/".join(parts[:i])
        for pattern in ignore:
            if _compile(pattern).match(prefix):
                return True
    return False


def iter_files(
    root: Path,
    patterns: Iterable[str],
    *,
    ignore: Iterable[str] = (),
) -> Iterator[Path]:
    """
    Yield files under root matching any pattern, sorted and de-duplicated.

    Zero matches is valid: the caller simply gets nothing.
    """
    ignore = tuple(ignore)
    seen: set[Path] = set()
    for pattern in patterns:
        for p in expand_braces(pattern):
            for path in sorted(root.glob(p)):
                if not path.is_file() or path in seen:
                    continue
                rel = path.relative_to(root).as_posix()
                if ignore and is_ignored(rel, ignore):
                    continue
                seen.add(path)
                yield path
