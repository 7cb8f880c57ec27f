#!/usr/bin/env python3
"""
mdit_embeds.py
--------------
markdown-it-py core rule for wiki-style image embeds.

Rewrites ``![[target|descriptor]]`` tokens found in inline text into real
``image`` tokens, and (optionally) re-resolves every image already in the
document so that plain ``![alt](src)`` syntax gets the same attachment
resolution and caption sanitizing.

Key Features:
    - Only targets with an image extension become images; anything else
      (``![[notes.pdf]]``) stays literal text
    - ``#fragment`` suffixes on the target are ignored
    - Dimension descriptors (``300``, ``640x480``) are skipped; the first
      other descriptor becomes alt and title
    - Several embeds in one text run splice in order with the surrounding
      text preserved verbatim
    - Children lists are rebuilt, never spliced in place

Usage:
    from markdown_it import MarkdownIt
    from diarist.markdown.mdit_embeds import embeds_plugin

    md = MarkdownIt().use(embeds_plugin, resolver=resolver)
    html = md.render("![[photo.png|Sunset]]", {"path": "src/data/blog/trip.md"})

Dependencies:
    - markdown-it-py >= 3.0.0
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from dataclasses import dataclass
from typing import List, Optional

# --- Third-party imports ---
from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

# --- Local imports ---
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import IMAGE_EXTENSIONS
from diarist.markdown.attachments import (
    AttachmentResolver,
    decode_uri_component_safe,
    sanitize_caption,
)


EMBED_REGEX = re.compile(r"!\[\[([^\]]+)\]\]")
DIMENSION_REGEX = re.compile(r"^\d+(?:x\d+)?$", re.IGNORECASE)
EXTENSION_REGEX = re.compile(r"\.[^/.]+$")


@dataclass(frozen=True)
class EmbedSpec:
    """Parsed content of one ``![[...]]`` token."""

    url: str
    alt: str
    title: Optional[str] = None


def is_image_target(target: str) -> bool:
    """True if ``target`` ends with a known image extension."""
    if "." not in target:
        return False
    return target.rsplit(".", 1)[1].lower() in IMAGE_EXTENSIONS


def parse_embed_value(embed_value: str) -> Optional[EmbedSpec]:
    """
    Parse the inside of ``![[...]]``.

    Returns None when the target is not an image, so the caller keeps the
    token as literal text.

    Examples:
        >>> parse_embed_value("photo.png|300|Sunset")
        EmbedSpec(url='photo.png', alt='Sunset', title='Sunset')
        >>> parse_embed_value("notes.pdf") is None
        True
    """
    parts = [part.strip() for part in embed_value.split("|")]
    parts = [part for part in parts if part]
    if not parts:
        return None

    target = parts[0].split("#", 1)[0].strip()
    if not target or not is_image_target(target):
        return None

    descriptor = next(
        (part for part in parts[1:] if not DIMENSION_REGEX.match(re.sub(r"\s+", "", part))),
        "",
    )
    filename = decode_uri_component_safe(target).split("/")[-1]
    fallback_alt = EXTENSION_REGEX.sub("", filename) or "image"

    return EmbedSpec(url=target, alt=descriptor or fallback_alt, title=descriptor or None)


def make_image_token(src: str, alt: str, title: Optional[str] = None) -> Token:
    """Build an inline ``image`` token the default renderer understands."""
    attrs = {"src": src, "alt": ""}
    if title:
        attrs["title"] = title
    children = [Token("text", "", 0, content=alt)] if alt else []
    return Token("image", "img", 0, attrs=attrs, children=children, content=alt)


class EmbedRewriter:
    """
    Rewrites the children of inline tokens.

    Attributes:
        resolver: Attachment resolver (None leaves targets as written)
        resolve_all_images: Also re-resolve pre-existing image tokens
        logger: Optional DiaristLogger
    """

    def __init__(
        self,
        resolver: Optional[AttachmentResolver] = None,
        resolve_all_images: bool = True,
        logger: Optional[DiaristLogger] = None,
    ) -> None:
        self.resolver = resolver
        self.resolve_all_images = resolve_all_images
        self.logger = logger

    def _resolve(self, target: str, document_path: Optional[str]) -> str:
        if self.resolver is None:
            return target
        return self.resolver.resolve(target, document_path)

    def split_text(self, token: Token, document_path: Optional[str]) -> List[Token]:
        """Map one text token to text/image tokens (itself if no embed)."""
        raw = token.content
        if "![[" not in raw:
            return [token]

        output: List[Token] = []
        cursor = 0
        has_embed = False

        for match in EMBED_REGEX.finditer(raw):
            start, end = match.span()
            if start > cursor:
                output.append(Token("text", "", 0, content=raw[cursor:start]))

            embed = parse_embed_value(match.group(1))
            if embed is None:
                output.append(Token("text", "", 0, content=match.group(0)))
            else:
                has_embed = True
                resolved = self._resolve(embed.url, document_path)
                safe_logger(self.logger).log_debug(
                    "Resolved embed",
                    {"target": embed.url, "resolved": resolved},
                    file=document_path,
                )
                image = make_image_token(resolved, embed.alt, embed.title)
                image.meta = {"embed": True, "target": embed.url}
                output.append(image)
            cursor = end

        if not has_embed:
            return [token]

        if cursor < len(raw):
            output.append(Token("text", "", 0, content=raw[cursor:]))
        return output

    def rewrite_image(self, token: Token, document_path: Optional[str]) -> Token:
        """Return a copy of an image token with resolved src and clean captions."""
        if token.meta.get("embed"):
            src = str(token.attrGet("src") or "")
        else:
            src = self._resolve(str(token.attrGet("src") or ""), document_path)

        alt = sanitize_caption(token.content, src)
        title = sanitize_caption(str(token.attrGet("title") or ""), src)

        image = make_image_token(src, alt, title or None)
        image.meta = dict(token.meta)
        return image

    def rewrite_children(
        self, children: List[Token], document_path: Optional[str]
    ) -> List[Token]:
        output: List[Token] = []
        for child in children:
            if child.type == "text":
                pieces = self.split_text(child, document_path)
            else:
                pieces = [child]

            for piece in pieces:
                if piece.type == "image" and self.resolve_all_images:
                    output.append(self.rewrite_image(piece, document_path))
                else:
                    output.append(piece)
        return output

    def __call__(self, state: StateCore) -> None:
        document_path = state.env.get("path") if isinstance(state.env, dict) else None
        new_tokens: List[Token] = []
        for token in state.tokens:
            if token.type == "inline" and token.children:
                token = token.copy(
                    children=self.rewrite_children(token.children, document_path)
                )
            new_tokens.append(token)
        state.tokens[:] = new_tokens


def embeds_plugin(
    md: MarkdownIt,
    resolver: Optional[AttachmentResolver] = None,
    resolve_all_images: bool = True,
    logger: Optional[DiaristLogger] = None,
) -> None:
    """
    Register the wiki-embed rewriting pass with a MarkdownIt instance.

    The pass runs as a core rule after inline parsing, so embeds inside code
    spans and fenced code (which are not text tokens) are left alone.

    Args:
        md: MarkdownIt instance to extend
        resolver: Resolver for attachment references
        resolve_all_images: Also resolve/sanitize plain markdown images
        logger: Optional DiaristLogger for resolution diagnostics
    """
    md.core.ruler.push(
        "diary_embeds",
        EmbedRewriter(resolver, resolve_all_images=resolve_all_images, logger=logger),
    )
