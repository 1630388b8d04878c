# tests/test_compress.py

from __future__ import annotations

import os
import zipfile

import pytest

from themesmith.graph import run
from themesmith.tasks.compress import is_text_file, make_compress_task


@pytest.mark.asyncio
async def test_archive_contents(ctx):
    await run(make_compress_task(ctx))

    with zipfile.ZipFile(ctx.root / "packaged/demo-theme.zip") as zf:
        names = set(zf.namelist())

    assert {"index.php", "functions.php", "style.css", "screenshot.png", "assets/vendor/lib/vendor.js"} <= names
    for name in names:
        assert not name.startswith(("src/", "node_modules/", "packaged/", "."))
    assert "package.json" not in names


@pytest.mark.asyncio
async def test_placeholder_token_replaced_in_text_files(ctx):
    await run(make_compress_task(ctx))

    with zipfile.ZipFile(ctx.root / "packaged/demo-theme.zip") as zf:
        functions = zf.read("functions.php").decode("utf-8")
        style = zf.read("style.css").decode("utf-8")
        screenshot = zf.read("screenshot.png")

    assert "_aztheme" not in functions
    assert "function demo_theme_setup()" in functions
    assert "load_theme_textdomain( 'demo_theme'" in functions
    assert "Text Domain: demo_theme" in style
    assert screenshot == (ctx.root / "screenshot.png").read_bytes()


@pytest.mark.asyncio
async def test_working_tree_is_not_modified(ctx):
    before = (ctx.root / "functions.php").read_bytes()
    await run(make_compress_task(ctx))
    assert (ctx.root / "functions.php").read_bytes() == before


@pytest.mark.asyncio
async def test_second_run_does_not_include_previous_archive(ctx):
    task = make_compress_task(ctx)
    await run(task)
    await run(task)

    with zipfile.ZipFile(ctx.root / "packaged/demo-theme.zip") as zf:
        assert not any(n.endswith(".zip") for n in zf.namelist())


def test_text_detection(project):
    assert is_text_file(project / "functions.php")
    assert not is_text_file(project / "screenshot.png")


@pytest.mark.asyncio
async def test_dotfiles_are_excluded_at_any_depth(ctx):
    (ctx.root / "inc").mkdir()
    (ctx.root / "inc/.DS_Store").write_bytes(b"\x00\x01")
    (ctx.root / "assets/vendor/lib/.gitignore").write_text("*.log\n", "utf-8")
    (ctx.root / "inc/template-tags.php").write_text("<?php\n", "utf-8")

    await run(make_compress_task(ctx))

    with zipfile.ZipFile(ctx.root / "packaged/demo-theme.zip") as zf:
        names = zf.namelist()

    assert "inc/template-tags.php" in names
    assert not [n for n in names if any(part.startswith(".") for part in n.split("/"))]


@pytest.mark.asyncio
async def test_files_older_than_1980_are_packaged(ctx):
    old = ctx.root / "old.php"
    old.write_text("<?php // legacy\n", "utf-8")
    os.utime(old, (100000, 100000))
    image = ctx.root / "screenshot.png"
    os.utime(image, (100000, 100000))

    await run(make_compress_task(ctx))

    with zipfile.ZipFile(ctx.root / "packaged/demo-theme.zip") as zf:
        assert zf.read("old.php") == b"<?php // legacy\n"
        assert zf.getinfo("screenshot.png").date_time[0] == 1980
