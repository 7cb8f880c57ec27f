#!/usr/bin/env python3
"""
mdit_cards.py
-------------
markdown-it-py core rules for fenced card blocks.

Two passes operate on ``fence`` tokens whose info string names a card:

    card-link                          -> link preview card (HTML block)
    card-movie / card-tv /
    card-book / card-music             -> title link paragraph + details line

A block that fails to parse is left exactly as it was (rendered as an
ordinary code block) and the failure is logged; other blocks in the same
document are unaffected. Both passes build a new token list by mapping
each original token to zero or more output tokens, so document order is
preserved without index bookkeeping.

Usage:
    md = (
        MarkdownIt()
        .use(link_cards_plugin)
        .use(media_cards_plugin)
    )
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from typing import Any, Callable, Dict, List, Optional

# --- Third-party imports ---
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

# --- Local imports ---
from diarist.core.exceptions import CardParseError
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.dataclasses.cards import (
    LinkCard,
    MediaCardData,
    build_card_url,
    build_media_details,
    media_card_type,
    parse_link_card,
    parse_media_card,
)


LINK_CARD_INFO = "card-link"
LINK_CARD_BLOCK_REGEX = re.compile(r"```card-link\s*([\s\S]*?)```")

TokenMapper = Callable[[Token, StateCore], List[Token]]


def map_block_tokens(state: StateCore, mapper: TokenMapper) -> None:
    """Replace ``state.tokens`` with the concatenated mapper outputs."""
    new_tokens: List[Token] = []
    for token in state.tokens:
        new_tokens.extend(mapper(token, state))
    state.tokens[:] = new_tokens


def fence_info(token: Token) -> str:
    return (token.info or "").strip()


def block_location(token: Token, state: StateCore) -> Dict[str, Any]:
    """Document path and 1-based source line of a block token, for logging."""
    return {
        "file": state.env.get("path") if isinstance(state.env, dict) else None,
        "line": token.map[0] + 1 if token.map else None,
    }


# ----- Link cards -----
def parse_link_cards(markdown_body: str) -> List[LinkCard]:
    """
    Extract every well-formed link card from raw markdown text.

    Malformed blocks are skipped.

    Examples:
        >>> body = "```card-link\\ntitle: A\\nurl: https://a.example\\n```"
        >>> parse_link_cards(body)
        [LinkCard(title='A', url='https://a.example', description=None, image=None)]
    """
    cards: List[LinkCard] = []
    for match in LINK_CARD_BLOCK_REGEX.finditer(markdown_body):
        try:
            cards.append(parse_link_card(match.group(1) or ""))
        except CardParseError:
            continue
    return cards


def render_link_card(card: LinkCard, href: str) -> str:
    """HTML for one link card."""
    parts = [
        f'<a class="link-card" href="{escapeHtml(href)}" '
        f'target="_blank" rel="noopener noreferrer">',
        f'<span class="link-card-title">{escapeHtml(card.title)}</span>',
    ]
    if card.description:
        parts.append(
            f'<span class="link-card-description">{escapeHtml(card.description)}</span>'
        )
    if card.image:
        parts.append(
            f'<img class="link-card-image" src="{escapeHtml(card.image)}" alt="" loading="lazy">'
        )
    parts.append("</a>")
    return "".join(parts) + "\n"


class LinkCardRewriter:
    """Turns ``card-link`` fences into link card HTML blocks."""

    def __init__(self, logger: Optional[DiaristLogger] = None) -> None:
        self.logger = logger

    def __call__(self, state: StateCore) -> None:
        map_block_tokens(state, self.map_token)

    def map_token(self, token: Token, state: StateCore) -> List[Token]:
        if token.type != "fence" or fence_info(token) != LINK_CARD_INFO:
            return [token]

        try:
            card = parse_link_card(token.content)
            href = state.md.normalizeLink(card.url)
            if not state.md.validateLink(href):
                raise CardParseError(f"card-link url is not allowed: {card.url}")
        except CardParseError as e:
            safe_logger(self.logger).log_warning(
                "Skipping malformed card-link block",
                {"error": str(e)},
                **block_location(token, state),
            )
            return [token]

        block = Token("html_block", "", 0, content=render_link_card(card, href))
        block.map = token.map
        block.level = token.level
        block.block = True
        block.meta = {"card": "link", "title": card.title, "url": card.url}
        return [block]


def link_cards_plugin(md: MarkdownIt, logger: Optional[DiaristLogger] = None) -> None:
    """Register the ``card-link`` pass."""
    md.core.ruler.push("link_cards", LinkCardRewriter(logger))


# ----- Media cards -----
def _paragraph(children: List[Token], content: str, level: int, line_map) -> List[Token]:
    """paragraph_open / inline / paragraph_close triple."""
    open_token = Token("paragraph_open", "p", 1, map=line_map, level=level, block=True)
    inline = Token(
        "inline", "", 0, map=line_map, level=level + 1, children=children,
        content=content, block=True,
    )
    close_token = Token("paragraph_close", "p", -1, level=level, block=True)
    return [open_token, inline, close_token]


def build_media_card_tokens(card: MediaCardData, level: int = 0, line_map=None) -> List[Token]:
    """
    Build the replacement tokens for a media card.

    Returns the title paragraph, followed by a details paragraph when the
    card has release/rating/overview/genre information.
    """
    url = build_card_url(card)
    label = card.display_title

    link_open = Token(
        "link_open", "a", 1,
        attrs={
            "href": url,
            "title": label,
            "target": "_blank",
            "rel": "noopener noreferrer",
        },
    )
    text = Token("text", "", 0, content=label)
    link_close = Token("link_close", "a", -1)
    tokens = _paragraph([link_open, text, link_close], label, level, line_map)

    details = build_media_details(card)
    if details:
        tokens.extend(
            _paragraph([Token("text", "", 0, content=details)], details, level, line_map)
        )
    return tokens


class MediaCardRewriter:
    """Turns ``card-movie|tv|book|music`` fences into paragraphs."""

    def __init__(self, logger: Optional[DiaristLogger] = None) -> None:
        self.logger = logger

    def __call__(self, state: StateCore) -> None:
        map_block_tokens(state, self.map_token)

    def map_token(self, token: Token, state: StateCore) -> List[Token]:
        if token.type != "fence":
            return [token]
        card_type = media_card_type(fence_info(token))
        if card_type is None:
            return [token]

        try:
            card = parse_media_card(card_type, token.content)
            replacement = build_media_card_tokens(card, token.level, token.map)
        except (CardParseError, KeyError, ValueError) as e:
            safe_logger(self.logger).log_warning(
                f"Skipping malformed card-{card_type} block",
                {"error": str(e)},
                **block_location(token, state),
            )
            return [token]

        replacement[0].meta = {"card": card_type, "title": card.title}
        return replacement


def media_cards_plugin(md: MarkdownIt, logger: Optional[DiaristLogger] = None) -> None:
    """Register the media-card pass."""
    md.core.ruler.push("media_cards", MediaCardRewriter(logger))
