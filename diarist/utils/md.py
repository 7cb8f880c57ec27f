#!/usr/bin/env python3
"""
md.py
-------------------
Markdown-specific utilities for the Diarist project.

Provides functions for parsing and writing Markdown files with YAML
frontmatter, including:
- Frontmatter extraction and splitting
- Frontmatter loading into dictionaries
- Reassembling frontmatter and body into a document

Intended for use by the diary builder and the protected-post tools.
"""
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Any, Dict, List, Tuple

# --- Third party imports ---
import yaml


# ----- YAML Frontmatter Parsing -----
def split_frontmatter(content: str) -> Tuple[str, List[str]]:
    """
    Split markdown content into YAML frontmatter and body.

    Expected format:
        ---
        yaml: content
        ---

        Body content here...

    Args:
        content: Full markdown file content

    Returns:
        Tuple of (frontmatter_text, body_lines)
        - frontmatter_text: YAML content as string (empty if no frontmatter)
        - body_lines: List of body content lines

    Examples:
        >>> content = "---\\ntags: [Diary]\\n---\\n\\nBody text"
        >>> fm, body = split_frontmatter(content)
        >>> fm
        'tags: [Diary]'
        >>> body
        ['Body text']
    """
    lines = content.splitlines()

    if not lines or lines[0].strip() != "---":
        return "", lines

    frontmatter_end = None
    for i, line in enumerate(lines[1:], 1):
        if line.strip() == "---":
            frontmatter_end = i
            break

    if frontmatter_end is None:
        return "", lines

    frontmatter_lines = lines[1:frontmatter_end]
    body_lines = lines[frontmatter_end + 1 :]

    # Remove empty lines at start of body
    while body_lines and body_lines[0].strip() == "":
        body_lines.pop(0)

    return "\n".join(frontmatter_lines), body_lines


def load_frontmatter(frontmatter_text: str) -> Dict[str, Any]:
    """
    Load YAML frontmatter text into a dictionary.

    Non-mapping documents (a bare string, a list) are treated as empty.

    Raises:
        yaml.YAMLError: If the frontmatter is not valid YAML
    """
    if not frontmatter_text.strip():
        return {}
    data = yaml.safe_load(frontmatter_text)
    return data if isinstance(data, dict) else {}


def read_markdown(file_path: Path) -> Tuple[Dict[str, Any], str]:
    """
    Read a markdown file and return its metadata and body.

    Args:
        file_path: Markdown file to read

    Returns:
        Tuple of (metadata dict, body text)
    """
    content = file_path.read_text(encoding="utf-8")
    frontmatter_text, body_lines = split_frontmatter(content)
    return load_frontmatter(frontmatter_text), "\n".join(body_lines)


def dump_markdown(metadata: Dict[str, Any], body: str) -> str:
    """
    Assemble frontmatter and body back into a markdown document.

    Examples:
        >>> dump_markdown({"title": "Hi"}, "Body")
        '---\\ntitle: Hi\\n---\\n\\nBody\\n'
    """
    frontmatter = yaml.safe_dump(
        metadata, allow_unicode=True, sort_keys=False, default_flow_style=False
    ).strip()
    body = body.strip("\n")
    if body:
        return f"---\n{frontmatter}\n---\n\n{body}\n"
    return f"---\n{frontmatter}\n---\n"
