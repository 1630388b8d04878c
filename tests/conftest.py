# tests/conftest.py

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from PIL import Image

from themesmith.config import Settings
from themesmith.core import paths as path_config
from themesmith.core.context import BuildContext

PROJECT_NAME = "demo-theme"

STYLE_SCSS = '@import "variables";\n\nbody {\n  color: $brand;\n}\n'
VARIABLES_SCSS = "$brand: #c0ffee;\n"
BUNDLE_JS = "// entry point\nfunction add(a, b) {\n  return a + b;\n}\nconsole.log(add(1, 2));\n"
INDEX_PHP = """<?php get_header(); ?>
<main>
  <a href="#"><?php esc_html_e( 'Read more', 'demo-theme' ); ?></a>
  <?php echo _x( 'Post', 'verb', 'demo-theme' ); ?>
  <?php printf( _n( '%s comment', '%s comments', $count, 'demo-theme' ), $count ); ?>
  <?php _e( 'Vendor string', 'other-domain' ); ?>
</main>
<?php get_footer(); ?>
"""
FUNCTIONS_PHP = """<?php
function _aztheme_setup() {
    load_theme_textdomain( '_aztheme', get_template_directory() . '/languages' );
}
add_action( 'after_setup_theme', '_aztheme_setup' );
"""


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """
    A small theme tree:
    sources under src/, templates at the root, a vendor subtree under assets/,
    and dev-only clutter (node_modules, package.json, .env) that must never ship.
    """
    root = tmp_path / PROJECT_NAME
    files = {
        "src/scss/style.scss": STYLE_SCSS,
        "src/scss/_variables.scss": VARIABLES_SCSS,
        "src/js/bundle.js": BUNDLE_JS,
        "src/js/util/math.js": "export const two = 2;\n",
        "src/images/icons/arrow.svg": '<svg xmlns="http://www.w3.org/2000/svg"><path d="M0 0h1"/></svg>\n',
        "index.php": INDEX_PHP,
        "functions.php": FUNCTIONS_PHP,
        "style.css": "/*\nTheme Name: Demo\nText Domain: _aztheme\n*/\n",
        "assets/vendor/lib/vendor.js": "window.vendor = true;\n",
        "node_modules/left-pad/index.js": "module.exports = 1;\n",
        "package.json": json.dumps({"name": PROJECT_NAME, "version": "1.0.0"}),
        ".env": "SECRET=1\n",
    }
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, "utf-8")

    logo = root / "src/images/logo.png"
    Image.new("RGB", (16, 16), (200, 10, 10)).save(logo)
    (root / "screenshot.png").write_bytes(logo.read_bytes())
    return root


@pytest.fixture()
def settings(project: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """
    Real Settings built from env vars pointing at the temporary project.

    Node tools are off so tests never depend on a postcss/esbuild install.
    """
    monkeypatch.setenv("THEMESMITH_PROJECT_ROOT", str(project))
    monkeypatch.setenv("THEMESMITH_PROJECT_NAME", PROJECT_NAME)
    monkeypatch.setenv("THEMESMITH_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("THEMESMITH_NODE_TOOLS", "false")
    return Settings.from_env()


def make_ctx(settings: Settings, production: bool = False) -> BuildContext:
    return BuildContext(settings=settings, paths=path_config.load(production))


@pytest.fixture()
def ctx(settings: Settings) -> BuildContext:
    return make_ctx(settings)


@pytest.fixture()
def prod_ctx(settings: Settings) -> BuildContext:
    return make_ctx(settings, production=True)


@pytest.fixture()
def restore_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    logging.captureWarnings(False)
