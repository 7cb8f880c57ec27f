#!/usr/bin/env python3
"""
fs.py
-------------------
Filesystem utilities for content discovery and attachment indexing.

Functions:
    find_markdown_files: Discover markdown files by glob pattern
    is_published_file: Check whether a content file should be published
    walk_relative_files: List every file under a root as posix relative paths
    to_posix: Normalize Windows separators to forward slashes

Usage:
    from diarist.utils.fs import find_markdown_files, walk_relative_files

    files = find_markdown_files(Path("src/data/diary"))
    index = walk_relative_files(Path("src/data/attachment"))
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path
from typing import List


def find_markdown_files(directory: Path, pattern: str = "**/*.md") -> List[Path]:
    """Find all published markdown files matching pattern, sorted by path."""
    if not directory.exists():
        return []
    return sorted(p for p in directory.glob(pattern) if is_published_file(p))


def is_published_file(path: Path) -> bool:
    """
    Check whether a content file is published.

    Files whose name starts with ``_`` are private partials and are skipped,
    as are non-markdown files.

    Examples:
        >>> is_published_file(Path("2024-01-15.md"))
        True
        >>> is_published_file(Path("_template.md"))
        False
    """
    return (
        path.is_file()
        and not path.name.startswith("_")
        and path.suffix.lower() in (".md", ".mdx")
    )


def to_posix(value: str) -> str:
    """Replace backslashes with forward slashes."""
    return value.replace("\\", "/")


def walk_relative_files(root: Path) -> List[str]:
    """
    List every regular file under ``root`` as a posix path relative to it.

    Unreadable directories are skipped. Returns an empty list when the root
    does not exist.

    Args:
        root: Directory to walk

    Returns:
        Relative posix paths in walk order
    """
    if not root.is_dir():
        return []

    result: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            abs_path = Path(dirpath) / name
            if not abs_path.is_file():
                continue
            rel = to_posix(os.path.relpath(abs_path, root))
            if not rel or rel.startswith(".."):
                continue
            result.append(rel)
    return result
