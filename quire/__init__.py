"""Quire: tooling for a folder of Markdown blog posts.

Posts are Markdown files with a YAML front matter block (title, date,
draft). This package loads them, checks them, lists them and renders
previews; publishing is left to the site generator that consumes the
same files.

The main entry point is the CLI module.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
