#!/usr/bin/env python3
"""
entry_parser.py
---------------
Turn one diary markdown file into a ParsedEntry.

Diary file layout:

    ---
    tags: [Diary]
    draft: false
    ---

    Optional text before the first time heading.

    ## 09:30
    Morning walk.

    ![[harbor.jpg|The harbor]]
    ![[boats.jpg]]

    ## 21:10
    ```card-movie
    title: Interstellar
    rating: 8.9
    ```

The filename is the entry identifier (a date or a date range). Each
``## HH:MM`` heading starts a TimeBlock. Inside a block:

    - consecutive image-only lines form one image group, replaced in the
      text by a ``++DIARY_IMAGE_GROUP_<n>++`` placeholder
    - the first valid media card fence becomes the block's media data and is
      removed from the text
    - blank-line separated chunks of raw HTML are moved verbatim to
      ``html_content``
    - the remaining text is rendered through the tree rewriter into ``text``;
      each placeholder stays on its own line, outside any paragraph, so the
      client can split the HTML at it
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

# --- Local imports ---
from diarist.core.exceptions import CardParseError
from diarist.core.logging_manager import safe_logger
from diarist.core.settings import IMAGE_GROUP_PLACEHOLDER
from diarist.dataclasses.cards import media_card_type, parse_media_card
from diarist.dataclasses.diary_entry import ImageDescriptor, ParsedEntry, TimeBlock
from diarist.dataclasses.diary_identifier import parse_diary_identifier
from diarist.markdown.attachments import sanitize_caption
from diarist.markdown.images import optimize_safely
from diarist.markdown.mdit_embeds import parse_embed_value
from diarist.pipeline.context import PipelineContext
from diarist.utils.md import read_markdown


TIME_HEADING_REGEX = re.compile(r"^##\s+(\d{1,2}):(\d{2})\s*$")
FENCE_REGEX = re.compile(r"^(\s{0,3})(`{3,}|~{3,})\s*([^`\s]*)")
EMBED_TOKEN = r"!\[\[[^\]]+\]\]"
MARKDOWN_IMAGE_TOKEN = r"!\[[^\]]*\]\([^)]*\)"
IMAGE_LINE_REGEX = re.compile(
    rf"^\s*(?:(?:{EMBED_TOKEN}|{MARKDOWN_IMAGE_TOKEN})\s*)+$"
)
IMAGE_TOKEN_REGEX = re.compile(
    r"!\[\[(?P<embed>[^\]]+)\]\]"
    r"|!\[(?P<alt>[^\]]*)\]\(\s*<?(?P<src>[^)\s>]+)>?(?:\s+[\"'](?P<title>[^\"']*)[\"'])?\s*\)"
)
HTML_BLOCK_REGEX = re.compile(r"^\s{0,3}<(?:!--|/?[A-Za-z][\w-]*(?:\s|/?>|$))")
PLACEHOLDER_PARAGRAPH_REGEX = re.compile(
    r"<p>(" + re.escape(IMAGE_GROUP_PLACEHOLDER).replace(r"\{index\}", r"\d+") + r")</p>"
)


@dataclass
class RawBlock:
    """Lines belonging to one time heading (or the preamble)."""

    time: str
    show_time: bool
    lines: List[str] = field(default_factory=list)


def normalize_time(hours: str, minutes: str) -> str:
    """
    Zero-pad a time heading.

    Examples:
        >>> normalize_time("9", "05")
        '09:05'
    """
    return f"{int(hours):02d}:{minutes}"


def split_time_blocks(body: str) -> List[RawBlock]:
    """
    Split a diary body at ``## HH:MM`` headings.

    Text before the first heading becomes a block with ``show_time=False``
    (dropped when blank). Headings inside fenced code are ignored.
    """
    blocks: List[RawBlock] = [RawBlock(time="", show_time=False)]
    fence: Optional[str] = None

    for line in body.splitlines():
        fence_match = FENCE_REGEX.match(line)
        if fence_match:
            if fence is None:
                fence = fence_match.group(2)
            elif is_closing_fence(line, fence):
                fence = None
            blocks[-1].lines.append(line)
            continue

        heading = TIME_HEADING_REGEX.match(line) if fence is None else None
        if heading:
            blocks.append(
                RawBlock(time=normalize_time(heading.group(1), heading.group(2)), show_time=True)
            )
            continue
        blocks[-1].lines.append(line)

    if not any(line.strip() for line in blocks[0].lines):
        blocks.pop(0)
    return blocks


def is_closing_fence(line: str, opening: str) -> bool:
    """A bare fence at least as long as, and made of the same char as, ``opening``."""
    match = FENCE_REGEX.match(line)
    if not match or match.group(3):
        return False
    marker = match.group(2)
    return marker[0] == opening[0] and len(marker) >= len(opening)


def is_image_line(line: str) -> bool:
    """
    True if a line holds only images (wiki embeds of image files or
    markdown images).
    """
    if not IMAGE_LINE_REGEX.match(line):
        return False
    for match in IMAGE_TOKEN_REGEX.finditer(line):
        embed = match.group("embed")
        if embed is not None and parse_embed_value(embed) is None:
            return False
    return True


class EntryParser:
    """
    Parse diary files with the services of one pipeline run.

    Attributes:
        context: PipelineContext providing resolver, optimizer and logger
    """

    def __init__(self, context: PipelineContext) -> None:
        self.context = context

    # ----- Images -----
    def parse_image_line(self, line: str, document_path: str) -> List[ImageDescriptor]:
        """Resolve every image reference on an image-only line."""
        images: List[ImageDescriptor] = []
        for match in IMAGE_TOKEN_REGEX.finditer(line):
            if match.group("embed") is not None:
                embed = parse_embed_value(match.group("embed"))
                if embed is None:
                    continue
                target, caption = embed.url, embed.title or ""
            else:
                target = match.group("src")
                caption = match.group("alt") or match.group("title") or ""
            images.append(self.build_image(target, caption, document_path))
        return images

    def build_image(self, target: str, caption: str, document_path: str) -> ImageDescriptor:
        src = self.context.resolver.resolve(target, document_path)
        clean = sanitize_caption(caption, src)
        image = ImageDescriptor(src=src, alt=clean, title=clean or None)

        optimized = optimize_safely(
            self.context.optimizer, src, self.context.thumbnail_size, self.context.logger
        )
        if optimized is not None:
            image.original = optimized.original or src
            image.src = optimized.thumbnail
            image.width = optimized.width
            image.height = optimized.height
        return image

    # ----- Blocks -----
    def extract_media(
        self, lines: List[str], document_path: str
    ) -> Tuple[List[str], Optional[str], Optional[dict]]:
        """
        Pull the first valid media card fence out of ``lines``.

        Returns:
            (remaining lines, media type, media fields)
        """
        remaining: List[str] = []
        media_type: Optional[str] = None
        media_data: Optional[dict] = None
        i = 0

        while i < len(lines):
            match = FENCE_REGEX.match(lines[i])
            if not match:
                remaining.append(lines[i])
                i += 1
                continue

            marker = match.group(2)
            end = i + 1
            while end < len(lines):
                if is_closing_fence(lines[end], marker):
                    break
                end += 1
            fence_lines = lines[i : end + 1]
            card_type = media_card_type(match.group(3))

            if card_type and media_type is None:
                try:
                    card = parse_media_card(card_type, "\n".join(lines[i + 1 : end]))
                    media_type, media_data = card_type, dict(card.fields)
                    i = end + 1
                    continue
                except CardParseError as e:
                    safe_logger(self.context.logger).log_warning(
                        "Invalid media card in diary entry",
                        {"error": str(e)},
                        file=document_path,
                    )
            remaining.extend(fence_lines)
            i = end + 1

        return remaining, media_type, media_data

    def group_images(
        self, lines: List[str], document_path: str
    ) -> Tuple[List[str], List[List[ImageDescriptor]]]:
        """Replace runs of image-only lines with group placeholders."""
        output: List[str] = []
        groups: List[List[ImageDescriptor]] = []
        current: Optional[List[ImageDescriptor]] = None
        fence: Optional[str] = None

        for line in lines:
            fence_match = FENCE_REGEX.match(line)
            if fence_match:
                if fence is None:
                    fence = fence_match.group(2)
                elif is_closing_fence(line, fence):
                    fence = None
            if fence is None and not fence_match and is_image_line(line):
                if current is None:
                    current = []
                    groups.append(current)
                    if output and output[-1].strip():
                        output.append("")
                    output.append(IMAGE_GROUP_PLACEHOLDER.format(index=len(groups) - 1))
                    output.append("")
                current.extend(self.parse_image_line(line, document_path))
                continue
            current = None
            output.append(line)

        return output, groups

    def extract_html(self, lines: List[str]) -> Tuple[List[str], Optional[str]]:
        """
        Move raw HTML chunks out of ``lines``.

        A chunk starts with an HTML tag or comment right after a blank line
        (or at the top of the block) and runs to the next blank line.
        The renderer escapes raw HTML, so these chunks are kept verbatim.

        Returns:
            (remaining lines, joined HTML chunks or None)
        """
        remaining: List[str] = []
        chunks: List[str] = []
        current: Optional[List[str]] = None
        fence: Optional[str] = None
        previous_blank = True

        for line in lines:
            if current is not None:
                if line.strip():
                    current.append(line)
                    continue
                chunks.append("\n".join(current))
                current = None
            else:
                fence_match = FENCE_REGEX.match(line)
                if fence_match:
                    if fence is None:
                        fence = fence_match.group(2)
                    elif is_closing_fence(line, fence):
                        fence = None
                elif fence is None and previous_blank and HTML_BLOCK_REGEX.match(line):
                    current = [line]
                    continue
            previous_blank = not line.strip()
            remaining.append(line)

        if current is not None:
            chunks.append("\n".join(current))
        return remaining, "\n".join(chunks) or None

    def render_text(self, source: str, document_path: str) -> Optional[str]:
        """Render block markdown, leaving group placeholders bare."""
        if not source:
            return None
        html = self.context.render(source, document_path)
        return PLACEHOLDER_PARAGRAPH_REGEX.sub(r"\1", html).strip() or None

    def parse_block(self, raw: RawBlock, document_path: str) -> TimeBlock:
        lines, media_type, media_data = self.extract_media(raw.lines, document_path)
        lines, html_content = self.extract_html(lines)
        lines, image_groups = self.group_images(lines, document_path)
        source = "\n".join(lines).strip()

        return TimeBlock(
            time=raw.time,
            show_time=raw.show_time,
            text=self.render_text(source, document_path),
            image_groups=image_groups,
            html_content=html_content,
            media_type=media_type,
            media_data=media_data,
        )

    # ----- Entries -----
    def parse_text(self, identifier: str, body: str, document_path: str) -> ParsedEntry:
        """Parse a diary body already separated from its frontmatter."""
        blocks = [self.parse_block(raw, document_path) for raw in split_time_blocks(body)]
        return ParsedEntry(meta=parse_diary_identifier(identifier), time_blocks=blocks)

    def parse_file(self, path: Path) -> Optional[ParsedEntry]:
        """
        Parse a diary file.

        Returns:
            ParsedEntry, or None for drafts

        Raises:
            OSError: If the file cannot be read
            yaml.YAMLError: If the frontmatter is invalid
            RenderError: If a block cannot be rendered
        """
        metadata, body = read_markdown(path)
        if metadata.get("draft") is True:
            safe_logger(self.context.logger).log_debug("Skipping draft", file=path)
            return None

        entry = self.parse_text(path.name, body, str(path))
        tags = metadata.get("tags")
        if isinstance(tags, list) and tags:
            entry.tags = [str(tag) for tag in tags]
        return entry
