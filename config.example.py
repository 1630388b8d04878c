# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env
file in the directory themesmith is run from). Production vs development is NOT configured
here: pass --prod on the command line.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # Project
    "THEMESMITH_PROJECT_ROOT": "Theme root directory (default: current directory).",
    "THEMESMITH_PROJECT_NAME": (
        "Project name used for output files and the text domain "
        "(default: package.json name, then the root directory name)."
    ),
    # Logging
    "THEMESMITH_LOG_LEVEL": "Console logging level (default: INFO).",
    "THEMESMITH_LOG_DIR": "Directory for themesmith.log (default: <root>/.local/themesmith).",
    # Dev server
    "THEMESMITH_PROXY_URL": "Site to proxy (default: http://localhost/<project name>).",
    "THEMESMITH_SERVER_HOST": "Live-reload proxy host (default: 127.0.0.1).",
    "THEMESMITH_SERVER_PORT": "Live-reload proxy port (default: 3000).",
    # Packaging
    "THEMESMITH_PLACEHOLDER_TOKEN": (
        "Token replaced by the text domain in packaged text files (default: _aztheme)."
    ),
    # Tooling
    "THEMESMITH_NODE_TOOLS": "Use postcss/esbuild from node_modules or PATH when present (true/false).",
    "THEMESMITH_WATCH_COALESCE": (
        "At most one rebuild in flight per watch rule; changes during a run queue one rerun (true/false)."
    ),
    "THEMESMITH_WATCH_IGNORE": "Paths the watcher and pot scanner skip (default: .git node_modules .local).",
}
