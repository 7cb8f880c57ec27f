#!/usr/bin/env python3
"""
cards.py
-------------------
Structured records parsed from fenced "card" blocks.

Authors embed small key/value records in fenced code blocks whose info
string names the card type:

    ```card-link
    title: Markdown Guide
    url: https://www.markdownguide.org
    description: "A free reference"
    ```

    ```card-movie
    title: Interstellar
    id: 157336
    rating: 8.9
    genres: Sci-Fi, Drama
    ```

This module turns a block body into a ``LinkCard`` or ``MediaCardData``
record and derives the presentation strings (target URL, details line)
used by the media-card pass.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

# --- Local imports ---
from diarist.core.exceptions import CardParseError
from diarist.core.settings import (
    DOUBAN_BOOK_URL,
    DOUBAN_MOVIE_URL,
    MEDIA_CARD_LABELS,
    MEDIA_CARD_TYPES,
    RATING_LABEL,
    TMDB_MOVIE_URL,
    TMDB_TV_URL,
)


NUMERIC_VALUE_REGEX = re.compile(r"^[0-9]+(\.[0-9]+)?$")
GENRE_SPLIT_REGEX = re.compile(r"[,，]")
MEDIA_INFO_REGEX = re.compile(r"^card-(movie|tv|book|music)$")

CardValue = Union[str, int, float]


# ----- Link cards -----
@dataclass(frozen=True)
class LinkCard:
    """A link preview card; ``title`` and ``url`` are required."""

    title: str
    url: str
    description: Optional[str] = None
    image: Optional[str] = None


def clean_value(raw: str) -> str:
    """
    Trim a value and strip one pair of matching surrounding quotes.

    Examples:
        >>> clean_value(' "Hello" ')
        'Hello'
        >>> clean_value("'it's'")
        "it's"
    """
    trimmed = raw.strip()
    if len(trimmed) >= 2 and trimmed[0] == trimmed[-1] and trimmed[0] in "\"'":
        return trimmed[1:-1].strip()
    return trimmed


def parse_link_card(body: str) -> LinkCard:
    """
    Parse the body of a ``card-link`` block.

    Keys are lower-cased; lines without a key before ``:`` and empty values
    are skipped; later keys override earlier ones.

    Raises:
        CardParseError: If ``title`` or ``url`` is missing
    """
    values: Dict[str, str] = {}
    for line in body.splitlines():
        line = line.strip()
        if not line:
            continue
        idx = line.find(":")
        if idx < 1:
            continue
        key = line[:idx].strip().lower()
        value = clean_value(line[idx + 1 :])
        if not value:
            continue
        values[key] = value

    missing = [key for key in ("title", "url") if not values.get(key)]
    if missing:
        raise CardParseError(f"card-link block is missing {', '.join(missing)}")

    return LinkCard(
        title=values["title"],
        url=values["url"],
        description=values.get("description"),
        image=values.get("image"),
    )


# ----- Media cards -----
@dataclass
class MediaCardData:
    """
    A media card record (movie, tv, book or music).

    ``fields`` keeps every parsed key; numeric-looking values are coerced
    to ``int`` or ``float``.
    """

    card_type: str
    fields: Dict[str, CardValue] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.fields["title"])

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def label(self) -> str:
        return MEDIA_CARD_LABELS[self.card_type]

    @property
    def display_title(self) -> str:
        """Link text, e.g. ``电影：《Interstellar》``."""
        return f"{self.label}：《{self.title}》"

    @property
    def genres(self) -> List[str]:
        raw = str(self.fields.get("genres") or "")
        return [genre.strip() for genre in GENRE_SPLIT_REGEX.split(raw) if genre.strip()]


def coerce_value(value: str) -> CardValue:
    """
    Coerce pure-numeric strings to numbers.

    Examples:
        >>> coerce_value("157336")
        157336
        >>> coerce_value("8.9")
        8.9
        >>> coerce_value("2014-11-07")
        '2014-11-07'
    """
    if NUMERIC_VALUE_REGEX.match(value):
        number = float(value)
        return int(number) if "." not in value else number
    return value


def media_card_type(info: str) -> Optional[str]:
    """Return the media type named by a fence info string, if any."""
    match = MEDIA_INFO_REGEX.match((info or "").strip())
    return match.group(1) if match else None


def parse_media_card(card_type: str, body: str) -> MediaCardData:
    """
    Parse the body of a ``card-<media>`` block.

    Args:
        card_type: One of movie, tv, book, music
        body: Block content with ``key: value`` lines

    Raises:
        CardParseError: If the type is unknown or ``title`` is missing or
            numeric
    """
    if card_type not in MEDIA_CARD_TYPES:
        raise CardParseError(f"Unknown media card type: {card_type}")

    fields: Dict[str, CardValue] = {}
    for line in body.strip().split("\n"):
        if not line.strip():
            continue
        idx = line.find(":")
        if idx == -1:
            continue
        key = line[:idx].strip()
        value = line[idx + 1 :].strip()
        if not key or not value:
            continue
        fields[key] = coerce_value(value)

    if not isinstance(fields.get("title"), str):
        raise CardParseError(f"card-{card_type} block has no usable title")

    return MediaCardData(card_type=card_type, fields=fields)


def build_card_url(card: MediaCardData) -> str:
    """
    Derive the link target for a media card.

    Rules, first match wins:
        - music with ``url``        -> url
        - ``external_url``          -> external_url
        - no ``id``                 -> "#"
        - tv                        -> douban subject or TMDB tv page
        - book                      -> douban book subject
        - movie                     -> douban subject or TMDB movie page
    """
    if card.card_type == "music" and card.get("url"):
        return str(card.get("url"))
    if card.get("external_url"):
        return str(card.get("external_url"))

    media_id = card.get("id")
    if not media_id:
        return "#"

    from_douban = card.get("source") == "douban"
    if card.card_type == "tv":
        template = DOUBAN_MOVIE_URL if from_douban else TMDB_TV_URL
    elif card.card_type == "book":
        template = DOUBAN_BOOK_URL
    else:
        template = DOUBAN_MOVIE_URL if from_douban else TMDB_MOVIE_URL
    return template.format(id=media_id)


def format_rating(value: float) -> str:
    """
    One decimal place, ties rounded away from zero.

    Rounds the exact binary value, so 8.25 gives 8.3 while 8.35 (stored
    as 8.3499...) gives 8.3.

    Examples:
        >>> format_rating(8.25)
        '8.3'
        >>> format_rating(7)
        '7.0'
    """
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def build_media_meta(card: MediaCardData) -> str:
    """
    Join release date, author/region and rating with `` · ``.

    Examples:
        >>> card = MediaCardData("movie", {"title": "X", "rating": 8.94})
        >>> build_media_meta(card)
        '评分 8.9'
    """
    parts: List[str] = []
    if card.get("release_date"):
        parts.append(str(card.get("release_date")))
    if card.card_type == "book" and card.get("author"):
        parts.append(str(card.get("author")))
    if card.card_type in ("movie", "tv") and card.get("region"):
        parts.append(str(card.get("region")))

    rating = card.get("rating")
    if rating:
        try:
            parts.append(f"{RATING_LABEL} {format_rating(float(rating))}")
        except (TypeError, ValueError, InvalidOperation):
            parts.append(f"{RATING_LABEL} {rating}")
    return " · ".join(parts)


def build_media_details(card: MediaCardData) -> str:
    """Join meta, overview and ``/``-joined genres with `` ｜ ``."""
    overview = str(card.get("overview") or "")
    genres = " / ".join(card.genres)
    return " ｜ ".join(part for part in (build_media_meta(card), overview, genres) if part)
