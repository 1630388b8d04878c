"""themesmith: asset build pipeline for themes."""

__version__ = "0.1.0"
