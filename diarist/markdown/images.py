#!/usr/bin/env python3
"""
images.py
---------
Port for the external image optimizer.

Raster optimization is done elsewhere; the pipeline only needs a
thumbnail URL and its dimensions for an attachment ``src``. Failures
are never fatal: ``optimize_safely`` returns None and the caller keeps the
original ``src``.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from typing import Optional, Protocol

# --- Local imports ---
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import THUMBNAIL_SIZE


@dataclass(frozen=True)
class OptimizedImage:
    """Thumbnail descriptor returned by an ImageOptimizer."""

    thumbnail: str
    width: int
    height: int
    original: Optional[str] = None


class ImageOptimizer(Protocol):
    """Anything that can produce a thumbnail for an attachment path."""

    def optimize(self, src: str, thumbnail_size: int = THUMBNAIL_SIZE) -> OptimizedImage:
        ...


def optimize_safely(
    optimizer: Optional[ImageOptimizer],
    src: str,
    thumbnail_size: int = THUMBNAIL_SIZE,
    logger: Optional[DiaristLogger] = None,
) -> Optional[OptimizedImage]:
    """
    Run the optimizer and swallow its failures.

    Returns:
        OptimizedImage, or None when there is no optimizer or it failed
    """
    if optimizer is None:
        return None
    try:
        return optimizer.optimize(src, thumbnail_size=thumbnail_size)
    except Exception as e:  # optimizer is an external collaborator
        safe_logger(logger).log_debug(
            "Image optimization failed, keeping original src",
            {"error": f"{type(e).__name__}: {e}"},
            file=src,
        )
        return None
