# tests/test_globs.py

from __future__ import annotations

from pathlib import Path

from themesmith.core.globs import expand_braces, glob_base, is_ignored, iter_files, matches


def test_expand_braces():
    assert expand_braces("a/*.{png,svg}") == ["a/*.png", "a/*.svg"]
    assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]
    assert expand_braces("plain.txt") == ["plain.txt"]


def test_glob_base():
    assert glob_base("src/images/**/*.{jpg,png}") == "src/images"
    assert glob_base("src/js/bundle.js") == "src/js"
    assert glob_base("**/*.php") == ""


def test_double_star_matches_any_depth():
    pats = ["src/scss/**/*.scss"]
    assert matches("src/scss/style.scss", pats)
    assert matches("src/scss/parts/deep/_x.scss", pats)
    assert not matches("src/scss/style.css", pats)
    assert not matches("src/scssx/style.scss", pats)


def test_single_star_stays_in_one_segment():
    assert matches("index.php", ["*.php"])
    assert not matches("inc/index.php", ["*.php"])
    assert matches("inc/index.php", ["**/*.php"])


def test_is_ignored_checks_every_leading_part():
    ignore = ("node_modules", ".*")
    assert is_ignored("node_modules/pkg/a.js", ignore)
    assert is_ignored(".git/HEAD", ignore)
    assert is_ignored(".env", ignore)
    assert not is_ignored("assets/js/app.js", ignore)


def test_iter_files_sorted_and_deduplicated(tmp_path: Path):
    for rel in ("b.php", "a.php", "inc/c.php", "node_modules/x.php"):
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("<?php", "utf-8")

    found = list(iter_files(tmp_path, ["**/*.php", "*.php"], ignore=("node_modules",)))

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["a.php", "b.php", "inc/c.php"]


def test_iter_files_zero_matches_is_fine(tmp_path: Path):
    assert list(iter_files(tmp_path, ["src/**/*.scss"])) == []
