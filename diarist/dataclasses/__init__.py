"""
dataclasses package
-------------------
Dataclass definitions for diary and post content.

- DiaryIdentifierMeta: Parsed diary filename (date or date range)
- ParsedEntry, TimeBlock, ImageDescriptor: Assembled diary entries
- DiaryPage, PaginationInfo: One page of the diary API
- LinkCard, MediaCardData: Structured card blocks
- EncryptedPostPayload: Envelope of a protected post body
"""
from diarist.dataclasses.diary_identifier import DiaryIdentifierMeta, parse_diary_identifier
from diarist.dataclasses.diary_entry import (
    DiaryPage,
    ImageDescriptor,
    PaginationInfo,
    ParsedEntry,
    TimeBlock,
)
from diarist.dataclasses.cards import LinkCard, MediaCardData
from diarist.dataclasses.encrypted_payload import EncryptedPostPayload

__all__ = [
    "DiaryIdentifierMeta",
    "parse_diary_identifier",
    "DiaryPage",
    "ImageDescriptor",
    "PaginationInfo",
    "ParsedEntry",
    "TimeBlock",
    "LinkCard",
    "MediaCardData",
    "EncryptedPostPayload",
]
