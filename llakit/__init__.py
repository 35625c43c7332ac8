"""Toolkit for directory-listing plugins, with category, complexity, directory and duplicate plugins."""

__version__ = "0.3.10"

__all__ = [
    "actions",
    "categorizer",
    "complexity",
    "components",
    "config",
    "dirs_meta",
    "duplicates",
    "entry",
    "format",
    "plugin",
    "syntax",
    "text",
]