"""
test_diary_identifier.py
------------------------
Unit tests for diarist.dataclasses.diary_identifier.

Covers single dates, every range separator, calendar validation, the scan
fallback, the sentinel and derived keys.
"""
import pytest

from diarist.core.exceptions import IdentifierParseError
from diarist.dataclasses.diary_identifier import (
    is_valid_date_string,
    normalize_identifier,
    parse_dates,
    parse_diary_identifier,
    to_quarter_key,
)


class TestSingleDates:
    """Identifiers holding one exact date."""

    def test_single_date(self):
        """A plain date is a single-day entry."""
        meta = parse_diary_identifier("2024-01-15")
        assert meta.start_date == "2024-01-15"
        assert meta.end_date == "2024-01-15"
        assert meta.is_range is False
        assert meta.quarter_key == "2024-Q1"
        assert meta.sort_key == "2024-01-15"

    def test_extension_and_whitespace_stripped(self):
        """.md/.mdx and surrounding whitespace are ignored."""
        assert parse_diary_identifier("  2024-05-01.md ").raw_id == "2024-05-01"
        assert parse_diary_identifier("2024-05-01.MDX").start_date == "2024-05-01"

    def test_leap_day(self):
        """Feb 29 of a leap year is valid."""
        assert parse_diary_identifier("2024-02-29").start_date == "2024-02-29"


class TestRanges:
    """Identifiers covering several days."""

    @pytest.mark.parametrize(
        "identifier",
        [
            "2024-01-15_to_2024-01-20",
            "2024-01-15-to-2024-01-20",
            "2024-01-15 to 2024-01-20",
            "2024-01-15 到 2024-01-20",
            "2024-01-15至2024-01-20",
            "2024-01-15~2024-01-20",
            "2024-01-15～2024-01-20",
            "2024-01-15--2024-01-20",
            "2024-01-15_2024-01-20",
            "2024-01-15...2024-01-20",
        ],
    )
    def test_separators(self, identifier):
        """Every known separator yields the same range."""
        meta = parse_diary_identifier(identifier + ".md")
        assert meta.start_date == "2024-01-15"
        assert meta.end_date == "2024-01-20"
        assert meta.is_range is True
        assert meta.sort_key == "2024-01-20"

    def test_reversed_range_is_ordered(self):
        """Dates written backwards are swapped."""
        meta = parse_diary_identifier("2024-01-20_to_2024-01-15")
        assert (meta.start_date, meta.end_date) == ("2024-01-15", "2024-01-20")

    def test_equal_dates_stay_a_range(self):
        """Two equal dates found by the range strategy still form a range."""
        meta = parse_diary_identifier("2024-01-15_to_2024-01-15")
        assert meta.is_range is True
        assert meta.start_date == meta.end_date == "2024-01-15"

    def test_quarter_uses_start_date(self):
        """A range crossing quarters is filed under its start."""
        meta = parse_diary_identifier("2024-03-30_to_2024-04-02")
        assert meta.quarter_key == "2024-Q1"
        assert meta.sort_key == "2024-04-02"

    @pytest.mark.parametrize(
        "first,second",
        [
            ("2023-12-31", "2024-01-01"),
            ("2024-06-30", "2024-06-01"),
            ("2020-02-29", "2021-02-28"),
        ],
    )
    def test_start_never_after_end(self, first, second):
        """start <= end and sort_key == end for any valid pair."""
        meta = parse_diary_identifier(f"{first}_to_{second}")
        assert meta.start_date <= meta.end_date
        assert meta.sort_key == meta.end_date
        assert {meta.start_date, meta.end_date} == {first, second}


class TestScanAndSentinel:
    """Fallbacks for identifiers that are not a clean date or range."""

    def test_scan_finds_two_dates(self):
        """Dates embedded in other text form a range."""
        meta = parse_diary_identifier("trip 2024-03-05 notes 2024-03-01")
        assert (meta.start_date, meta.end_date) == ("2024-03-01", "2024-03-05")
        assert meta.is_range is True

    def test_scan_finds_one_date(self):
        """A single embedded date is a single-day entry."""
        meta = parse_diary_identifier("notes-2024-05-06-draft")
        assert meta.start_date == "2024-05-06"
        assert meta.is_range is False

    def test_invalid_half_of_range(self):
        """An impossible end date leaves the valid start as a single day."""
        meta = parse_diary_identifier("2024-01-15_to_2023-02-30")
        assert meta.start_date == meta.end_date == "2024-01-15"
        assert meta.is_range is False

    @pytest.mark.parametrize(
        "identifier",
        ["random", "", "2023-02-30", "2024-13-01", "２０２４-０１-０１", "٢٠٢٤-٠١-٠١"],
    )
    def test_sentinel(self, identifier):
        """Unparseable identifiers degrade to 1970-01-01."""
        meta = parse_diary_identifier(identifier)
        assert meta.start_date == meta.end_date == "1970-01-01"
        assert meta.is_range is False
        assert meta.quarter_key == "1970-Q1"

    def test_scan_skips_non_ascii_digits(self):
        meta = parse_diary_identifier("２０２４-０１-０１ notes 2024-02-03")
        assert meta.start_date == meta.end_date == "2024-02-03"
        assert meta.sort_key == "2024-02-03"

    def test_parse_dates_raises_without_match(self):
        """The strategy runner reports failure with IdentifierParseError."""
        with pytest.raises(IdentifierParseError):
            parse_dates("no date here")


class TestHelpers:
    """Validation and key helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-02-29", True),
            ("2023-02-29", False),
            ("2023-02-30", False),
            ("2024-1-5", False),
            ("2024-00-10", False),
            ("20240101", False),
            ("２０２４-０１-０１", False),
        ],
    )
    def test_is_valid_date_string(self, value, expected):
        assert is_valid_date_string(value) is expected

    @pytest.mark.parametrize(
        "iso,quarter",
        [
            ("2024-01-01", "2024-Q1"),
            ("2024-03-31", "2024-Q1"),
            ("2024-04-01", "2024-Q2"),
            ("2024-07-15", "2024-Q3"),
            ("2024-12-31", "2024-Q4"),
        ],
    )
    def test_to_quarter_key(self, iso, quarter):
        assert to_quarter_key(iso) == quarter

    def test_normalize_identifier(self):
        assert normalize_identifier(" 2024-01-01.md ") == "2024-01-01"
