#!/usr/bin/env python3
"""
attachments.py
--------------
Resolve image references to canonical paths in the attachment namespace.

Authors reference images loosely: full URLs, ``attachment/...`` paths,
paths relative to the document, or just a bare filename pasted by a
capture tool. The resolver turns each reference into the published form
``../attachment/<relative path>``.

Filesystem access goes through an ``AttachmentLookup``. The production
``FilesystemAttachmentLookup`` builds its recursive file index lazily, once
per instance; a build run owns one lookup through its PipelineContext.

Resolution order (first match wins):
    1. http(s) URL                 -> unchanged
    2. attachment/ path            -> ../attachment/<suffix>
    3. path with "/" that exists   -> ../attachment/<rel> (under the root)
    4. bare filename               -> blog/<doc>/, inbox/, then index search
    5. nothing found               -> the normalized reference unchanged

Usage:
    lookup = FilesystemAttachmentLookup(ATTACHMENT_DIR)
    resolver = AttachmentResolver(lookup)
    resolver.resolve("photo.png", "src/data/blog/trip.md")
    # "../attachment/blog/trip/photo.png"
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
import re
from pathlib import Path, PurePosixPath
from typing import List, Optional, Protocol
from urllib.parse import unquote

# --- Local imports ---
from diarist.core.exceptions import AttachmentResolutionError
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import (
    ATTACHMENT_BLOG_FOLDER,
    ATTACHMENT_INBOX_FOLDER,
    ATTACHMENT_SEGMENT,
    ATTACHMENT_URL_PREFIX,
)
from diarist.utils.fs import to_posix, walk_relative_files


URL_REGEX = re.compile(r"^https?://", re.IGNORECASE)
AUTO_CAPTION_PATTERNS = [
    re.compile(
        r"^(?:pasted[\s_-]*)?(?:image|img|screenshot|screen[\s_-]*shot|photo)"
        r"(?:[\s_-]*[\d_-]+)?$",
        re.IGNORECASE,
    ),
    re.compile(r"^(?:屏幕)?截图(?:[\s_-]*[\d_-]+)?$"),
    re.compile(r"^[0-9a-f]{16,}$", re.IGNORECASE),
    re.compile(r"^[\d_-]{8,}$"),
]


class AttachmentLookup(Protocol):
    """Port for filesystem queries made by the resolver."""

    root: Path

    def exists(self, path: Path) -> bool:
        """True if ``path`` (absolute) exists."""
        ...

    def files(self) -> List[str]:
        """All files under ``root`` as posix paths relative to it."""
        ...


class FilesystemAttachmentLookup:
    """
    AttachmentLookup backed by the real filesystem.

    The recursive index is populated on first use and kept for the
    lifetime of the instance. Concurrent first calls may both walk the tree;
    the result is the same listing either way.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()
        self._index: Optional[List[str]] = None

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def files(self) -> List[str]:
        if self._index is None:
            self._index = walk_relative_files(self.root)
        return self._index


# ----- Normalization helpers -----
def decode_uri_component_safe(value: str) -> str:
    """Percent-decode ``value``, returning it unchanged on malformed input."""
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def strip_quotes(value: str) -> str:
    """Remove one leading and one trailing quote character."""
    return re.sub(r"^['\"]|['\"]$", "", value)


def normalize_reference(raw_target: str) -> str:
    """Strip quotes, percent-decode and normalize slashes of a reference."""
    return to_posix(decode_uri_component_safe(strip_quotes(raw_target.strip())))


def document_base_name(document_path: Optional[str]) -> str:
    """Base filename of the document without extension ("" if unknown)."""
    if not document_path:
        return ""
    return Path(document_path).stem


class AttachmentResolver:
    """
    Resolve raw image references for use as ``<img src>``.

    Attributes:
        lookup: Filesystem port rooted at the attachment namespace
        logger: Optional DiaristLogger for resolution diagnostics
    """

    def __init__(
        self, lookup: AttachmentLookup, logger: Optional[DiaristLogger] = None
    ) -> None:
        self.lookup = lookup
        self.logger = logger

    @property
    def root(self) -> Path:
        return Path(self.lookup.root)

    def resolve(self, raw_target: str, current_document_path: Optional[str] = None) -> str:
        """
        Resolve ``raw_target`` relative to the current document.

        Never raises; an unresolvable reference comes back normalized but
        otherwise unchanged so the broken link stays visible.

        Args:
            raw_target: Reference as written by the author
            current_document_path: Path of the document being rendered

        Returns:
            Path or URL for the image ``src``
        """
        try:
            return self._resolve(raw_target, current_document_path)
        except AttachmentResolutionError as e:
            safe_logger(self.logger).log_debug(
                "Attachment not found",
                {"target": raw_target, "reason": str(e)},
                file=current_document_path,
            )
            return normalize_reference(raw_target)
        except (OSError, ValueError) as e:
            safe_logger(self.logger).log_warning(
                "Attachment resolution failed",
                {"target": raw_target, "error": str(e)},
                file=current_document_path,
            )
            return normalize_reference(raw_target) if raw_target else raw_target

    def _resolve(self, raw_target: str, current_document_path: Optional[str]) -> str:
        decoded = normalize_reference(raw_target or "")
        if not decoded:
            return decoded

        if URL_REGEX.match(decoded):
            return decoded

        namespaced = self._resolve_namespaced(decoded)
        if namespaced is not None:
            return namespaced

        if "/" in decoded:
            return self._resolve_relative(decoded, current_document_path)

        return self._resolve_bare(decoded, current_document_path)

    def _resolve_namespaced(self, decoded: str) -> Optional[str]:
        """Rewrite references that already name the attachment namespace."""
        if decoded.startswith(ATTACHMENT_URL_PREFIX):
            return decoded
        if decoded.startswith(ATTACHMENT_SEGMENT):
            return f"../{decoded}"
        if ATTACHMENT_SEGMENT in decoded:
            suffix = decoded.split(ATTACHMENT_SEGMENT, 1)[1] or decoded
            return f"{ATTACHMENT_URL_PREFIX}{suffix}"
        return None

    def _resolve_relative(self, decoded: str, current_document_path: Optional[str]) -> str:
        """Resolve a path relative to the document's directory."""
        base_dir = Path(current_document_path).parent if current_document_path else Path(".")
        candidate = Path(os.path.abspath(base_dir / decoded))
        if not self.lookup.exists(candidate):
            raise AttachmentResolutionError(f"No file at {candidate}")
        relative = self._relative_to_root(candidate)
        if not relative:
            raise AttachmentResolutionError(f"{candidate} is outside the attachment root")
        return f"{ATTACHMENT_URL_PREFIX}{relative}"

    def _relative_to_root(self, path: Path) -> Optional[str]:
        root = Path(os.path.abspath(self.root))
        try:
            relative = path.relative_to(root)
        except ValueError:
            return None
        rel = relative.as_posix()
        if not rel or rel == "." or rel.startswith(".."):
            return None
        return rel

    def _resolve_bare(self, name: str, current_document_path: Optional[str]) -> str:
        """Look in the per-document folder, inbox, then the full index."""
        post_base = document_base_name(current_document_path)

        if post_base:
            in_post_folder = self.root / ATTACHMENT_BLOG_FOLDER / post_base / name
            if self.lookup.exists(in_post_folder):
                return f"{ATTACHMENT_URL_PREFIX}{ATTACHMENT_BLOG_FOLDER}/{post_base}/{name}"

        in_inbox = self.root / ATTACHMENT_INBOX_FOLDER / name
        if self.lookup.exists(in_inbox):
            return f"{ATTACHMENT_URL_PREFIX}{ATTACHMENT_INBOX_FOLDER}/{name}"

        suffix = f"/{name.lower()}"
        candidates = [rel for rel in self.lookup.files() if rel.lower().endswith(suffix)]
        if candidates:
            return f"{ATTACHMENT_URL_PREFIX}{self._prefer(candidates, post_base)}"

        raise AttachmentResolutionError(f"No attachment named {name}")

    @staticmethod
    def _prefer(candidates: List[str], post_base: str) -> str:
        """Pick the per-document folder, then blog/, then inbox/, then first."""
        prefixes = []
        if post_base:
            prefixes.append(f"{ATTACHMENT_BLOG_FOLDER}/{post_base}/")
        prefixes.extend([f"{ATTACHMENT_BLOG_FOLDER}/", f"{ATTACHMENT_INBOX_FOLDER}/"])
        for prefix in prefixes:
            for rel in candidates:
                if rel.startswith(prefix):
                    return rel
        return candidates[0]


# ----- Captions -----
def sanitize_caption(caption: Optional[str], resolved_url: str) -> str:
    """
    Drop captions that carry no information.

    A caption is discarded when it is empty, equals the image filename (with
    or without extension, case-insensitive), or looks like a name generated
    by a capture tool ("Pasted image 20240101", "IMG_1234", a long hex hash).

    Examples:
        >>> sanitize_caption("Pasted image 20240101", "../attachment/inbox/x.png")
        ''
        >>> sanitize_caption("Sunset over the bay", "../attachment/inbox/x.png")
        'Sunset over the bay'
    """
    text = (caption or "").strip()
    if not text:
        return ""

    filename = PurePosixPath(to_posix(decode_uri_component_safe(resolved_url or ""))).name
    lowered = text.lower()
    if filename and lowered in (filename.lower(), PurePosixPath(filename).stem.lower()):
        return ""

    if any(pattern.match(text) for pattern in AUTO_CAPTION_PATTERNS):
        return ""

    return text
