#!/usr/bin/env python3
"""
settings.py
-----------
Fixed constants shared by the diarist pipeline.

This module defines:
- Identifier parsing constants (sentinel date)
- Attachment and image-extension constants
- Protected payload parameters (KDF, cipher, envelope version)
- Diary pagination and timeline trigger parameters
- Media card labels and provider URLs

These definitions are used by:
- diarist/dataclasses/ for identifiers and wire models
- diarist/markdown/ for the tree rewriter passes
- diarist/protected/ for the codec and renderer
- diarist/diary/ for assembly and the timeline controller
"""
from __future__ import annotations

from typing import Dict, FrozenSet


# =============================================================================
# IDENTIFIERS
# =============================================================================

SENTINEL_DATE = "1970-01-01"

# =============================================================================
# ATTACHMENTS & IMAGES
# =============================================================================

ATTACHMENT_SEGMENT = "attachment/"
ATTACHMENT_URL_PREFIX = "../attachment/"
ATTACHMENT_BLOG_FOLDER = "blog"
ATTACHMENT_INBOX_FOLDER = "inbox"

IMAGE_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        "avif",
        "bmp",
        "gif",
        "ico",
        "jpeg",
        "jpg",
        "png",
        "svg",
        "tif",
        "tiff",
        "webp",
    }
)

THUMBNAIL_SIZE = 1000

# =============================================================================
# PROTECTED PAYLOADS
# =============================================================================

PAYLOAD_VERSION = 1
PAYLOAD_ALGORITHM = "AES-256-GCM"
PAYLOAD_DIGEST = "SHA-256"
KDF_ITERATIONS = 180_000
MAX_KDF_ITERATIONS = 2_000_000  # upper bound accepted when decrypting
KEY_LENGTH = 32  # bytes (AES-256)
SALT_LENGTH = 16
IV_LENGTH = 12
TAG_LENGTH = 16

# =============================================================================
# DIARY PAGINATION & TIMELINE
# =============================================================================

ITEMS_PER_PAGE = 5
API_DIARY_PATH = "/api/diary"
SCROLL_THRESHOLD_PX = 1000
SCROLL_DEBOUNCE_SECONDS = 0.1
IMAGE_GROUP_PLACEHOLDER = "++DIARY_IMAGE_GROUP_{index}++"

# =============================================================================
# MEDIA CARDS
# =============================================================================

MEDIA_CARD_TYPES = ("movie", "tv", "book", "music")

MEDIA_CARD_LABELS: Dict[str, str] = {
    "movie": "电影",
    "tv": "剧集",
    "book": "书籍",
    "music": "音乐",
}

RATING_LABEL = "评分"

DOUBAN_MOVIE_URL = "https://movie.douban.com/subject/{id}"
DOUBAN_BOOK_URL = "https://book.douban.com/subject/{id}"
TMDB_MOVIE_URL = "https://www.themoviedb.org/movie/{id}"
TMDB_TV_URL = "https://www.themoviedb.org/tv/{id}"
