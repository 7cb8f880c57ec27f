#!/usr/bin/env python3
"""
diary_identifier.py
-------------------
Parse diary entry identifiers into normalized date descriptors.

A diary entry is identified by its filename: a single day
(``2024-01-15.md``) or a date range written with one of many separators
(``2024-01-15_to_2024-01-20``, ``2024-01-15 到 2024-01-20``,
``2024-01-15~2024-01-20``...).

Parsing runs an ordered list of named strategies; the first one that
returns a ``DateSpan`` wins:

    1. range     - two dates joined by a known separator
    2. single    - one exact date
    3. scan      - any dates found anywhere in the string

When none matches, ``parse_dates`` raises IdentifierParseError and
``parse_diary_identifier`` falls back to the sentinel 1970-01-01, so a bad
filename never fails a build.

Every date must be calendar-valid (``2023-02-30`` is rejected even though
its shape matches).

Usage:
    from diarist.dataclasses.diary_identifier import parse_diary_identifier

    meta = parse_diary_identifier("2024-04-15_to_2024-04-20.md")
    meta.start_date   # "2024-04-15"
    meta.quarter_key  # "2024-Q2"
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

# --- Local imports ---
from diarist.core.exceptions import IdentifierParseError
from diarist.core.settings import SENTINEL_DATE


# ----- Patterns -----
RANGE_SEPARATOR_PATTERN = (
    r"(?:到|至|~|～|to|TO|_to_|-to-|--|—|–|_|\.{2,}|\s+to\s+)"
)
# ASCII digits only
DATE_PATTERN = r"[0-9]{4}-[0-9]{2}-[0-9]{2}"

SINGLE_DATE_REGEX = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
RANGE_DATE_REGEX = re.compile(
    rf"^({DATE_PATTERN})\s*{RANGE_SEPARATOR_PATTERN}\s*({DATE_PATTERN})$"
)
ANY_DATE_REGEX = re.compile(DATE_PATTERN)
EXTENSION_REGEX = re.compile(r"\.mdx?$", re.IGNORECASE)


@dataclass(frozen=True)
class DiaryIdentifierMeta:
    """
    Normalized descriptor of a diary entry identifier.

    Attributes:
        raw_id: Identifier with extension stripped and whitespace trimmed
        start_date: First day covered (YYYY-MM-DD)
        end_date: Last day covered (YYYY-MM-DD), never before start_date
        is_range: True when the range or scan strategy found two valid dates
        quarter_key: YYYY-Qn bucket of start_date
        sort_key: Chronological ordering key (equals end_date)
    """

    raw_id: str
    start_date: str
    end_date: str
    is_range: bool
    quarter_key: str
    sort_key: str


@dataclass(frozen=True)
class DateSpan:
    """Result of a successful parsing strategy, tagged with its name."""

    start_date: str
    end_date: str
    is_range: bool
    strategy: str


IdentifierStrategy = Callable[[str], Optional[DateSpan]]


# ----- Validation -----
def is_valid_date_string(value: str) -> bool:
    """
    Check that ``value`` is an exact, calendar-valid YYYY-MM-DD date.

    Examples:
        >>> is_valid_date_string("2024-02-29")
        True
        >>> is_valid_date_string("2023-02-30")
        False
        >>> is_valid_date_string("2024-1-5")
        False
    """
    match = SINGLE_DATE_REGEX.match(value)
    if not match:
        return False
    year, month, day = (int(part) for part in match.groups())
    try:
        parsed = date(year, month, day)
    except ValueError:
        return False
    return (parsed.year, parsed.month, parsed.day) == (year, month, day)


def _ordered(first: str, second: str) -> Tuple[str, str]:
    """Return the two ISO dates in ascending order."""
    return (first, second) if first <= second else (second, first)


# ----- Strategies -----
def parse_range(raw: str) -> Optional[DateSpan]:
    """Two valid dates joined by a known range separator."""
    match = RANGE_DATE_REGEX.match(raw)
    if not match:
        return None
    start, end = match.group(1), match.group(2)
    if not (is_valid_date_string(start) and is_valid_date_string(end)):
        return None
    start, end = _ordered(start, end)
    return DateSpan(start, end, True, "range")


def parse_single(raw: str) -> Optional[DateSpan]:
    """The whole identifier is one valid date."""
    if not is_valid_date_string(raw):
        return None
    return DateSpan(raw, raw, False, "single")


def parse_scan(raw: str) -> Optional[DateSpan]:
    """
    Dates found anywhere in the identifier.

    The first two valid dates (in textual order) form a range; a single
    valid date is a single day.
    """
    candidates = [c for c in ANY_DATE_REGEX.findall(raw) if is_valid_date_string(c)]
    if len(candidates) >= 2:
        start, end = _ordered(candidates[0], candidates[1])
        return DateSpan(start, end, True, "scan")
    if len(candidates) == 1:
        return DateSpan(candidates[0], candidates[0], False, "scan")
    return None


def parse_sentinel(raw: str) -> DateSpan:
    """Fallback used when no other strategy matches."""
    return DateSpan(SENTINEL_DATE, SENTINEL_DATE, False, "sentinel")


IDENTIFIER_STRATEGIES: List[Tuple[str, IdentifierStrategy]] = [
    ("range", parse_range),
    ("single", parse_single),
    ("scan", parse_scan),
]


# ----- Public API -----
def normalize_identifier(identifier: str) -> str:
    """Strip a trailing .md/.mdx extension and surrounding whitespace."""
    return EXTENSION_REGEX.sub("", identifier.strip()).strip()


def parse_dates(raw: str) -> DateSpan:
    """
    Run the strategies in order and return the first match.

    Raises:
        IdentifierParseError: If no strategy finds a valid date
    """
    for _name, strategy in IDENTIFIER_STRATEGIES:
        span = strategy(raw)
        if span is not None:
            return span
    raise IdentifierParseError(f"No valid date in identifier {raw!r}")


def to_quarter_key(iso_date: str) -> str:
    """
    Compute the YYYY-Qn bucket for an ISO date.

    Examples:
        >>> to_quarter_key("2024-04-15")
        '2024-Q2'
        >>> to_quarter_key("2024-01-01")
        '2024-Q1'
    """
    year, month = iso_date.split("-")[:2]
    quarter = math.ceil(int(month) / 3)
    return f"{year}-Q{quarter}"


def parse_diary_identifier(identifier: str) -> DiaryIdentifierMeta:
    """
    Parse a raw entry identifier into a DiaryIdentifierMeta.

    Never raises: unparseable identifiers degrade to the sentinel date.

    Args:
        identifier: Filename-derived identifier, with or without extension

    Returns:
        Normalized identifier descriptor
    """
    raw_id = normalize_identifier(identifier or "")
    try:
        span = parse_dates(raw_id)
    except IdentifierParseError:
        span = parse_sentinel(raw_id)
    return DiaryIdentifierMeta(
        raw_id=raw_id,
        start_date=span.start_date,
        end_date=span.end_date,
        is_range=span.is_range,
        quarter_key=to_quarter_key(span.start_date),
        sort_key=span.end_date,
    )
