#!/usr/bin/env python3
"""
context.py
----------
Per-run pipeline context.

A ``PipelineContext`` is created at the start of a build or render run and
discarded afterwards. It owns the only shared state of the pipeline: the
attachment lookup with its lazily-built file index. Documents rendered in
the same run share that index; a new run starts with a fresh one.

Usage:
    context = PipelineContext.from_attachment_dir(ATTACHMENT_DIR, logger=logger)
    html = context.render("![[photo.png]]", "src/data/blog/trip.md")
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

# --- Third-party imports ---
from markdown_it import MarkdownIt

# --- Local imports ---
from diarist.core.exceptions import RenderError
from diarist.core.logging_manager import DiaristLogger
from diarist.core.settings import THUMBNAIL_SIZE
from diarist.markdown.attachments import (
    AttachmentLookup,
    AttachmentResolver,
    FilesystemAttachmentLookup,
)
from diarist.markdown.images import ImageOptimizer
from diarist.markdown.renderer import create_markdown, render_markdown


@dataclass
class PipelineContext:
    """
    State owned by one pipeline run.

    Attributes:
        lookup: Attachment lookup (filesystem port)
        optimizer: Optional image optimizer collaborator
        logger: Optional DiaristLogger
        thumbnail_size: Thumbnail size requested from the optimizer
    """

    lookup: AttachmentLookup
    optimizer: Optional[ImageOptimizer] = None
    logger: Optional[DiaristLogger] = None
    thumbnail_size: int = THUMBNAIL_SIZE
    _resolver: Optional[AttachmentResolver] = field(default=None, init=False, repr=False)
    _markdown: Optional[MarkdownIt] = field(default=None, init=False, repr=False)

    @classmethod
    def from_attachment_dir(
        cls,
        attachment_dir: Path,
        optimizer: Optional[ImageOptimizer] = None,
        logger: Optional[DiaristLogger] = None,
    ) -> PipelineContext:
        """Context backed by the real filesystem under ``attachment_dir``."""
        return cls(
            lookup=FilesystemAttachmentLookup(attachment_dir),
            optimizer=optimizer,
            logger=logger,
        )

    @property
    def resolver(self) -> AttachmentResolver:
        if self._resolver is None:
            self._resolver = AttachmentResolver(self.lookup, self.logger)
        return self._resolver

    @property
    def markdown(self) -> MarkdownIt:
        if self._markdown is None:
            self._markdown = create_markdown(self.resolver, self.logger)
        return self._markdown

    def render(self, text: str, document_path: Optional[Union[str, Path]] = None) -> str:
        """
        Render markdown through every tree-rewriting pass.

        Raises:
            RenderError: If markdown-it-py or one of the passes fails
        """
        try:
            return render_markdown(self.markdown, text, document_path)
        except Exception as e:  # parser and plugin failures
            raise RenderError(f"Cannot render {document_path or 'markdown'}: {e}") from e
