#!/usr/bin/env python3
"""
render.py
---------
Render protected post bodies to HTML.

After a reader supplies the right password, the decrypted markdown goes
through the same tree-rewriting passes as public posts. Attachment images
in the resulting HTML are then pointed at optimized thumbnails with
explicit dimensions.

Failure policy:
    - optimizer failures keep the original ``src``
    - any other failure while rendering returns the markdown as escaped
      text inside ``<pre>`` so one bad post never breaks a page
    - AuthenticationError and PayloadFormatError from decryption reach
      the caller, which decides between "wrong password" and
      "broken content"
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import html
from pathlib import Path
from typing import Any, Dict, Optional, Union

# --- Third party imports ---
from bs4 import BeautifulSoup

# --- Local imports ---
from diarist.core.exceptions import RenderError
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import THUMBNAIL_SIZE
from diarist.dataclasses.encrypted_payload import EncryptedPostPayload
from diarist.markdown.images import ImageOptimizer, optimize_safely
from diarist.pipeline.context import PipelineContext
from diarist.protected.crypto import ENCRYPTED_KEY, decrypt_post_content
from diarist.utils.md import read_markdown


def escape_plaintext(markdown: str) -> str:
    """Literal fallback for content that could not be rendered."""
    return f"<pre>{html.escape(markdown, quote=False)}</pre>"


def process_protected_post_html(
    content: str,
    optimizer: Optional[ImageOptimizer] = None,
    thumbnail_size: int = THUMBNAIL_SIZE,
    logger: Optional[DiaristLogger] = None,
) -> str:
    """
    Point attachment ``<img>`` tags at optimized thumbnails.

    Only images whose ``src`` mentions the attachment namespace are
    touched. Each one gets the thumbnail URL and ``width``/``height``
    attributes from the optimizer; if optimization fails the tag is left
    as it was.

    Args:
        content: Rendered HTML
        optimizer: Image optimizer collaborator (None skips rewriting)
        thumbnail_size: Requested thumbnail size
        logger: Optional DiaristLogger

    Returns:
        HTML with rewritten image tags
    """
    if optimizer is None:
        return content

    soup = BeautifulSoup(content, "html.parser")
    for img in soup.find_all("img", src=True):
        src = img.get("src") or ""
        if not src or "attachment" not in src:
            continue

        optimized = optimize_safely(optimizer, src, thumbnail_size, logger)
        if optimized is None:
            continue

        img["src"] = optimized.thumbnail
        img["width"] = str(optimized.width)
        img["height"] = str(optimized.height)

    return str(soup)


def render_protected_post_html(
    markdown: str,
    context: PipelineContext,
    file_path: Optional[Union[str, Path]] = None,
) -> str:
    """
    Render decrypted markdown to HTML with optimized images.

    Never raises; see the module docstring for the fallback.

    Args:
        markdown: Decrypted post body
        context: Pipeline context of the current run
        file_path: Path of the post (used to resolve attachments)

    Returns:
        HTML string
    """
    try:
        rendered = context.render(markdown, file_path)
    except RenderError as e:
        safe_logger(context.logger).log_error(
            e, {"operation": "render_protected_post"}, file=file_path
        )
        return escape_plaintext(markdown)
    return process_protected_post_html(
        rendered, context.optimizer, context.thumbnail_size, context.logger
    )


def render_encrypted_post(
    payload: Union[EncryptedPostPayload, Dict[str, Any], str],
    password: str,
    context: PipelineContext,
    file_path: Optional[Union[str, Path]] = None,
) -> str:
    """
    Decrypt a payload and render it.

    Raises:
        AuthenticationError: Wrong password or tampered payload
        PayloadFormatError: Payload is not a valid envelope
    """
    plaintext = decrypt_post_content(payload, password)
    safe_logger(context.logger).log_debug("Decrypted protected post", file=file_path)
    return render_protected_post_html(plaintext, context, file_path)


def render_post_file(
    path: Path,
    context: PipelineContext,
    password: Optional[str] = None,
) -> str:
    """
    Render a post file, decrypting it first when it is protected.

    Raises:
        AuthenticationError: Wrong password for a protected post
        PayloadFormatError: Broken payload in a protected post
        ValueError: Protected post but no password given
    """
    metadata, body = read_markdown(path)
    payload = metadata.get(ENCRYPTED_KEY)
    if payload is None:
        return render_protected_post_html(body, context, path)
    if not password:
        raise ValueError(f"Post is protected, a password is required: {path}")
    return render_encrypted_post(payload, password, context, path)
