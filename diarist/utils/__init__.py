"""
Utilities package for Diarist.

- md: Front matter splitting, loading and dumping
- fs: Markdown discovery and relative file listings
"""

from .md import split_frontmatter, load_frontmatter, read_markdown, dump_markdown
from .fs import find_markdown_files, is_published_file, walk_relative_files

__all__ = [
    "split_frontmatter",
    "load_frontmatter",
    "read_markdown",
    "dump_markdown",
    "find_markdown_files",
    "is_published_file",
    "walk_relative_files",
]
