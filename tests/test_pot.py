# tests/test_pot.py

from __future__ import annotations

import pytest

from themesmith.graph import run
from themesmith.tasks.pot import extract_php, make_pot_task


def test_only_the_project_domain_is_collected():
    src = "<?php __( 'Mine', 'demo' ); __( 'Theirs', 'plugin' ); __( 'No domain' ); ?>"
    assert [m.msgid for m in extract_php(src, "demo")] == ["Mine"]


def test_context_and_plural_positions():
    src = (
        "<?php\n"
        "_x( 'Post', 'verb', 'demo' );\n"
        "_n( 'One item', '%d items', $n, 'demo' );\n"
        "_nx( 'One file', '%d files', $n, 'upload', 'demo' );\n"
    )
    found = extract_php(src, "demo")

    assert [(m.lineno, m.msgid, m.plural, m.context) for m in found] == [
        (2, "Post", None, "verb"),
        (3, "One item", "%d items", None),
        (4, "One file", "%d files", "upload"),
    ]


def test_escapes_and_non_literals():
    src = (
        "<?php\n"
        "esc_html_e( 'It\\'s here', 'demo' );\n"
        '__( "Tab\\there", \'demo\' );\n'
        "__( 'Hello ' . $name, 'demo' );\n"
        "__( $dynamic, 'demo' );\n"
        "$obj->__( 'Method call', 'demo' );\n"
    )
    assert [m.msgid for m in extract_php(src, "demo")] == ["It's here", "Tab\there"]


def test_calls_inside_arguments_are_skipped_over():
    src = "<?php printf( __( 'Hi %s', 'demo' ), esc_html( get_name( 1, 2 ) ) );"
    assert [m.msgid for m in extract_php(src, "demo")] == ["Hi %s"]


@pytest.mark.asyncio
async def test_pot_file_is_written(ctx):
    await run(make_pot_task(ctx))

    pot = (ctx.root / "languages/demo-theme.pot").read_text("utf-8")
    assert "#: index.php:3" in pot
    assert 'msgid "Read more"' in pot
    assert 'msgctxt "verb"\nmsgid "Post"' in pot
    assert 'msgid_plural "%s comments"' in pot
    assert "Vendor string" not in pot


@pytest.mark.asyncio
async def test_pot_without_templates_writes_empty_template(ctx):
    for php in ctx.root.glob("*.php"):
        php.unlink()

    await run(make_pot_task(ctx))

    pot = (ctx.root / "languages/demo-theme.pot").read_text("utf-8")
    assert "Read more" not in pot
    assert 'msgid ""' in pot


def test_comments_are_not_scanned():
    src = (
        "<?php\n"
        "// __( 'Line comment', 'demo' );\n"
        "# _e( 'Hash comment', 'demo' );\n"
        "/* __( 'Block',\n"
        "   'demo' ); */\n"
        "__( 'Kept', 'demo' ); // trailing __( 'Also gone', 'demo' )\n"
        "__( 'Not // a comment', 'demo' );\n"
    )
    found = extract_php(src, "demo")

    assert [(m.lineno, m.msgid) for m in found] == [(6, "Kept"), (7, "Not // a comment")]


def test_inline_html_is_left_alone():
    src = (
        "<p>Don't <a href=\"http://example.com\">panic</a></p>\n"
        "<?php esc_html_e( 'Hello', 'demo' ); // greet ?><span><?php _e( 'Bye', 'demo' ); ?></span>\n"
    )
    found = extract_php(src, "demo")

    assert [(m.lineno, m.msgid) for m in found] == [(2, "Hello"), (2, "Bye")]
