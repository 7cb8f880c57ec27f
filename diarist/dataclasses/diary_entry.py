#!/usr/bin/env python3
"""
diary_entry.py
-------------------
Dataclasses for assembled diary entries and paginated diary pages.

These are the render-ready structures produced by the diary builder and
consumed by the timeline controller. Each class converts to and from the
camelCase JSON shape served at ``/api/diary/{page}.json``:

    {
      "entries": [
        {
          "date": "2024-01-15",
          "dateEnd": "2024-01-20",        # ranges only
          "isDateRange": true,
          "timeBlocks": [
            {"time": "09:30", "showTime": true, "text": "...",
             "imageGroups": [[{"src": "...", "alt": "..."}]],
             "htmlContent": "<p>...</p>", "movieData": {...}}
          ]
        }
      ],
      "pagination": {"currentPage": 1, "totalPages": 3,
                     "hasMore": true, "itemsPerPage": 5}
    }
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# --- Local imports ---
from diarist.dataclasses.diary_identifier import (
    DiaryIdentifierMeta,
    parse_diary_identifier,
)


MEDIA_DATA_KEYS = {
    "movie": "movieData",
    "tv": "tvData",
    "book": "bookData",
    "music": "musicData",
}


@dataclass
class ImageDescriptor:
    """One image inside a time block image group."""

    src: str
    alt: str = ""
    title: Optional[str] = None
    original: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"alt": self.alt, "src": self.src}
        for key in ("title", "original", "width", "height"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ImageDescriptor:
        return cls(
            src=str(data.get("src", "")),
            alt=str(data.get("alt", "")),
            title=data.get("title"),
            original=data.get("original"),
            width=data.get("width"),
            height=data.get("height"),
        )


@dataclass
class TimeBlock:
    """
    One timestamped unit inside a diary entry.

    Attributes:
        time: HH:MM label ("" for content before the first time heading)
        show_time: Whether the time label is displayed
        text: Rendered block HTML; bare ``++DIARY_IMAGE_GROUP_<n>++`` lines
            mark where image groups go
        image_groups: Ordered groups of images
        html_content: Raw HTML chunks from the block, passed through as is
        media_type: One of movie/tv/book/music when a media card is attached
        media_data: Flat record of the attached media card
    """

    time: str
    show_time: bool = True
    text: Optional[str] = None
    image_groups: List[List[ImageDescriptor]] = field(default_factory=list)
    html_content: Optional[str] = None
    media_type: Optional[str] = None
    media_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"time": self.time, "showTime": self.show_time}
        if self.text:
            data["text"] = self.text
        if self.image_groups:
            data["imageGroups"] = [
                [image.to_dict() for image in group] for group in self.image_groups
            ]
        if self.html_content:
            data["htmlContent"] = self.html_content
        if self.media_type and self.media_data is not None:
            data[MEDIA_DATA_KEYS[self.media_type]] = dict(self.media_data)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TimeBlock:
        media_type = None
        media_data = None
        for card_type, key in MEDIA_DATA_KEYS.items():
            if isinstance(data.get(key), dict):
                media_type, media_data = card_type, dict(data[key])
                break

        return cls(
            time=str(data.get("time", "")),
            show_time=bool(data.get("showTime", True)),
            text=data.get("text"),
            image_groups=[
                [ImageDescriptor.from_dict(image) for image in group]
                for group in data.get("imageGroups") or []
            ],
            html_content=data.get("htmlContent"),
            media_type=media_type,
            media_data=media_data,
        )


@dataclass
class ParsedEntry:
    """One calendar day or date range with its time blocks."""

    meta: DiaryIdentifierMeta
    time_blocks: List[TimeBlock] = field(default_factory=list)
    tags: List[str] = field(default_factory=lambda: ["Diary"])

    @property
    def sort_key(self) -> str:
        return self.meta.sort_key

    @property
    def entry_id(self) -> str:
        """Anchor id used by the timeline (``start_to_end`` for ranges)."""
        if self.meta.is_range:
            return f"{self.meta.start_date}_to_{self.meta.end_date}"
        return self.meta.start_date

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "date": self.meta.start_date,
            "isDateRange": self.meta.is_range,
            "timeBlocks": [block.to_dict() for block in self.time_blocks],
        }
        if self.meta.is_range:
            data["dateEnd"] = self.meta.end_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ParsedEntry:
        """
        Rebuild an entry from its JSON form.

        The identifier meta is recomputed from the dates so that derived
        fields (quarter key, sort key) always follow the parser's rules.
        """
        start = str(data.get("date", ""))
        end = data.get("dateEnd")
        identifier = f"{start}_to_{end}" if data.get("isDateRange") and end else start
        return cls(
            meta=parse_diary_identifier(identifier),
            time_blocks=[TimeBlock.from_dict(b) for b in data.get("timeBlocks") or []],
        )


@dataclass
class PaginationInfo:
    """Server-computed pagination state for one diary page."""

    current_page: int = 1
    total_pages: int = 1
    has_more: bool = False
    items_per_page: int = 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "hasMore": self.has_more,
            "itemsPerPage": self.items_per_page,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PaginationInfo:
        """
        Build from the JSON form.

        Raises:
            KeyError: If ``hasMore`` is absent
            ValueError/TypeError: If numeric fields are not numbers
        """
        return cls(
            current_page=int(data.get("currentPage", 1)),
            total_pages=int(data.get("totalPages", 1)),
            has_more=bool(data["hasMore"]),
            items_per_page=int(data.get("itemsPerPage", 5)),
        )


@dataclass
class DiaryPage:
    """One page of the diary API: entries plus pagination info."""

    entries: List[ParsedEntry]
    pagination: PaginationInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "pagination": self.pagination.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DiaryPage:
        """
        Build a page from decoded JSON.

        Raises:
            ValueError: If the payload is not a page object
        """
        if not isinstance(data, dict):
            raise ValueError("Diary page must be a JSON object")
        entries = data.get("entries")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ValueError("'entries' must be a list")
        pagination = data.get("pagination")
        if not isinstance(pagination, dict):
            raise ValueError("'pagination' must be an object")
        return cls(
            entries=[ParsedEntry.from_dict(e) for e in entries],
            pagination=PaginationInfo.from_dict(pagination),
        )
