#!/usr/bin/env python3
"""
renderer.py
-----------
Markdown → HTML rendering with the diarist tree-rewriting passes.

The passes run as markdown-it-py core rules in a fixed order:

    1. diary_embeds  - ``![[...]]`` embeds and attachment resolution
    2. link_cards    - ``card-link`` fences
    3. media_cards   - ``card-movie|tv|book|music`` fences

Raw HTML typed by authors is not passed through (``html`` is disabled),
so rendered output only contains markup produced by the parser and the
passes themselves.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Any, Dict, Optional, Union

# --- Third-party imports ---
from markdown_it import MarkdownIt

# --- Local imports ---
from diarist.core.logging_manager import DiaristLogger
from diarist.markdown.attachments import AttachmentResolver
from diarist.markdown.mdit_cards import link_cards_plugin, media_cards_plugin
from diarist.markdown.mdit_embeds import embeds_plugin


def create_markdown(
    resolver: Optional[AttachmentResolver] = None,
    logger: Optional[DiaristLogger] = None,
    resolve_all_images: bool = True,
) -> MarkdownIt:
    """
    Build a MarkdownIt instance with every diarist pass registered.

    Args:
        resolver: Attachment resolver used by the embed/image pass
        logger: Optional logger handed to each pass
        resolve_all_images: Also resolve plain markdown images

    Returns:
        Configured MarkdownIt instance
    """
    return (
        MarkdownIt("commonmark", {"html": False})
        .enable("table")
        .use(embeds_plugin, resolver=resolver, resolve_all_images=resolve_all_images, logger=logger)
        .use(link_cards_plugin, logger=logger)
        .use(media_cards_plugin, logger=logger)
    )


def render_markdown(
    md: MarkdownIt,
    text: str,
    document_path: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Render markdown to HTML for one document.

    Args:
        md: Instance from ``create_markdown``
        text: Markdown source
        document_path: Path of the document (used to resolve attachments)
        env: Extra environment passed to the rules

    Returns:
        HTML string
    """
    render_env: Dict[str, Any] = dict(env or {})
    if document_path is not None:
        render_env["path"] = str(document_path)
    return md.render(text, render_env)
