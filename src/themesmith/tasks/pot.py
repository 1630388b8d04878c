# src/themesmith/tasks/pot.py

"""
Translation template: scan PHP templates for WordPress gettext calls and write
`languages/{name}.pot`.

Only calls whose text domain is the project name are collected, so strings from
bundled vendor code using their own domain stay out of the template.
"""

from __future__ import annotations

import asyncio
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from babel.messages.catalog import Catalog
from babel.messages.pofile import write_po

from ..core.context import BuildContext
from ..core.globs import iter_files
from ..graph import Task
from . import files

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Keyword:
    msgid: int
    plural: int | None
    context: int | None
    domain: int


# 1-based argument positions, as in the WordPress i18n API.
KEYWORDS: dict[str, _Keyword] = {
    "__": _Keyword(1, None, None, 2),
    "_e": _Keyword(1, None, None, 2),
    "esc_html__": _Keyword(1, None, None, 2),
    "esc_html_e": _Keyword(1, None, None, 2),
    "esc_attr__": _Keyword(1, None, None, 2),
    "esc_attr_e": _Keyword(1, None, None, 2),
    "_x": _Keyword(1, None, 2, 3),
    "_ex": _Keyword(1, None, 2, 3),
    "esc_html_x": _Keyword(1, None, 2, 3),
    "esc_attr_x": _Keyword(1, None, 2, 3),
    "_n": _Keyword(1, 2, None, 4),
    "_n_noop": _Keyword(1, 2, None, 3),
    "_nx": _Keyword(1, 2, 4, 5),
    "_nx_noop": _Keyword(1, 2, 3, 4),
}

_CALL = re.compile(
    r"(?<![\w$>:])("
    + "|".join(sorted((re.escape(k) for k in KEYWORDS), key=len, reverse=True))
    + r")\s*\("
)
_DQ_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "$": "$"}
_OPEN_TAG = re.compile(r"<\?(?:php\b|=)?", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ExtractedMessage:
    lineno: int
    msgid: str
    plural: str | None
    context: str | None


def _read_string(src: str, i: int) -> tuple[str, int]:
    """Parse a PHP string literal starting at src[i] (a quote). Returns (value, index after)."""
    quote = src[i]
    i += 1
    out: list[str] = []
    while i < len(src):
        c = src[i]
        if c == "\\" and i + 1 < len(src):
            nxt = src[i + 1]
            if quote == "'":
                out.append(nxt if nxt in "'\\" else c + nxt)
            else:
                out.append(_DQ_ESCAPES.get(nxt, c + nxt))
            i += 2
            continue
        if c == quote:
            return "".join(out), i + 1
        out.append(c)
        i += 1
    raise ValueError("unterminated string")


def _skip_expression(src: str, i: int) -> int:
    """Skip a non-literal argument; stop at a top-level ',' or ')'."""
    depth = 0
    while i < len(src):
        c = src[i]
        if c in "'\"":
            _, i = _read_string(src, i)
            continue
        if c in "([{":
            depth += 1
        elif c in ")]}":
            if depth == 0:
                return i
            depth -= 1
        elif c == "," and depth == 0:
            return i
        i += 1
    return i


def _parse_args(src: str, i: int) -> list[str | None]:
    """Arguments of a call whose '(' was just consumed. Non-literals become None."""
    args: list[str | None] = []
    while i < len(src):
        while i < len(src) and src[i].isspace():
            i += 1
        if i >= len(src) or src[i] == ")":
            break

        value: str | None = None
        if src[i] in "'\"":
            value, i = _read_string(src, i)
            while i < len(src) and src[i].isspace():
                i += 1
            if i < len(src) and src[i] not in ",)":
                # Concatenation or other expression: not a plain literal.
                value = None
                i = _skip_expression(src, i)
        else:
            i = _skip_expression(src, i)
        args.append(value)

        if i < len(src) and src[i] == ",":
            i += 1
        else:
            break
    return args


def _arg(args: list[str | None], pos: int | None) -> str | None:
    if pos is None or pos > len(args):
        return None
    return args[pos - 1]


def _string_end(src: str, i: int) -> int:
    quote = src[i]
    i += 1
    while i < len(src):
        if src[i] == "\\":
            i += 2
            continue
        if src[i] == quote:
            return i + 1
        i += 1
    return len(src)


def strip_comments(source: str) -> str:
    """
    Drop `//`, `#` and `/* */` comments from the PHP parts of a template.

    Newlines inside block comments are kept so line numbers do not move. Inline
    HTML outside `<?php ... ?>` is copied untouched.
    """
    out: list[str] = []
    i, n = 0, len(source)
    in_php = False
    while i < n:
        if not in_php:
            m = _OPEN_TAG.search(source, i)
            if m is None:
                out.append(source[i:])
                break
            out.append(source[i : m.end()])
            i, in_php = m.end(), True
            continue

        c = source[i]
        if source.startswith("?>", i):
            out.append("?>")
            i, in_php = i + 2, False
        elif c in "'\"":
            end = _string_end(source, i)
            out.append(source[i:end])
            i = end
        elif c == "#" or source.startswith("//", i):
            # A line comment also ends at a closing tag.
            while i < n and source[i] != "\n" and not source.startswith("?>", i):
                i += 1
        elif source.startswith("/*", i):
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append("\n" * source.count("\n", i, end))
            i = end
        else:
            out.append(c)
            i += 1
    return "".join(out)


def extract_php(source: str, domain: str) -> list[ExtractedMessage]:
    source = strip_comments(source)
    found: list[ExtractedMessage] = []
    for m in _CALL.finditer(source):
        kw = KEYWORDS[m.group(1)]
        try:
            args = _parse_args(source, m.end())
        except ValueError:
            continue
        if _arg(args, kw.domain) != domain:
            continue
        msgid = _arg(args, kw.msgid)
        if not msgid:
            continue
        plural = _arg(args, kw.plural)
        if kw.plural is not None and plural is None:
            continue
        found.append(
            ExtractedMessage(
                lineno=source.count("\n", 0, m.start()) + 1,
                msgid=msgid,
                plural=plural,
                context=_arg(args, kw.context),
            )
        )
    return found


def _render(catalog: Catalog) -> bytes:
    buf = io.BytesIO()
    write_po(buf, catalog, sort_by_file=True)
    return buf.getvalue()


async def build_pot(ctx: BuildContext) -> Path | None:
    group = ctx.paths.group("pot")
    catalog = Catalog(
        project=ctx.name,
        domain=ctx.name,
        charset="utf-8",
        msgid_bugs_address="",
    )

    sources = list(iter_files(ctx.root, group.src, ignore=ctx.settings.watch_ignore))
    for path in sources:
        text = await files.read_text(path, "pot")
        rel = path.relative_to(ctx.root).as_posix()
        for msg in extract_php(text, ctx.name):
            msgid = (msg.msgid, msg.plural) if msg.plural is not None else msg.msgid
            catalog.add(msgid, locations=[(rel, msg.lineno)], context=msg.context)

    dest = ctx.path(group.dest) / f"{ctx.name}.pot"
    data = await asyncio.to_thread(_render, catalog)
    await files.write_bytes(dest, data)
    logger.info("pot: %d strings from %d templates -> %s", len(catalog), len(sources), dest.relative_to(ctx.root))
    return dest


def make_pot_task(ctx: BuildContext) -> Task:
    async def pot() -> None:
        await build_pot(ctx)

    return Task("pot", pot, "Extract translatable strings into a .pot template.")
