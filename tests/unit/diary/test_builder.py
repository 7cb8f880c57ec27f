"""
test_builder.py
---------------
Unit tests for diary loading, ordering, pagination and page output.
"""
import json

import pytest

from diarist.core.cli import BuildStats
from diarist.core.exceptions import DiaryBuildError
from diarist.dataclasses.diary_entry import ParsedEntry
from diarist.dataclasses.diary_identifier import parse_diary_identifier
from diarist.diary.builder import (
    DiaryBuilder,
    group_by_quarter,
    load_diary_entries,
    paginate_entries,
    sort_entries,
    total_pages,
    write_diary_pages,
)


def make_entries(*identifiers: str) -> list:
    return [ParsedEntry(meta=parse_diary_identifier(i)) for i in identifiers]


def ids(entries) -> list:
    return [entry.entry_id for entry in entries]


@pytest.fixture
def seven_entries():
    return sort_entries(make_entries(*[f"2024-01-{day:02d}" for day in range(1, 8)]))


@pytest.fixture
def diary_dir(tmp_dir):
    root = tmp_dir / "diary"
    root.mkdir()
    (root / "2024-01-15.md").write_text("---\ntags: [Diary]\n---\n\n## 09:00\nOne\n", encoding="utf-8")
    (root / "2024-02-01.md").write_text("## 10:00\nTwo\n", encoding="utf-8")
    (root / "2024-02-02.md").write_text("---\ndraft: true\n---\n\nHidden\n", encoding="utf-8")
    (root / "2024-02-03.md").write_text("---\ntags: [unclosed\n---\n\nBroken\n", encoding="utf-8")
    (root / "_template.md").write_text("## 00:00\n", encoding="utf-8")
    (root / "notes.txt").write_text("not a diary", encoding="utf-8")
    return root


class TestOrdering:
    """Sorting and quarter grouping."""

    def test_newest_first_by_end_date(self):
        entries = make_entries(
            "2024-01-15", "2024-01-15_to_2024-01-20", "2024-03-02", "scratch", "2024-01-20"
        )
        assert ids(sort_entries(entries)) == [
            "2024-03-02",
            "2024-01-15_to_2024-01-20",
            "2024-01-20",
            "2024-01-15",
            "1970-01-01",
        ]

    def test_ties_keep_input_order(self):
        entries = make_entries("2024-01-20", "2024-01-18_to_2024-01-20")
        assert ids(sort_entries(entries)) == ["2024-01-20", "2024-01-18_to_2024-01-20"]

    def test_group_by_quarter(self):
        groups = group_by_quarter(sort_entries(make_entries("2024-01-15", "2024-05-01", "2024-02-10")))
        assert list(groups) == ["2024-Q2", "2024-Q1"]
        assert ids(groups["2024-Q1"]) == ["2024-02-10", "2024-01-15"]


class TestPagination:
    """Page slicing."""

    def test_total_pages(self):
        assert total_pages(0, 5) == 1
        assert total_pages(5, 5) == 1
        assert total_pages(6, 5) == 2

    def test_first_page(self, seven_entries):
        page = paginate_entries(seven_entries, 1, 5)
        assert len(page.entries) == 5
        assert page.pagination.to_dict() == {
            "currentPage": 1,
            "totalPages": 2,
            "hasMore": True,
            "itemsPerPage": 5,
        }

    def test_last_page(self, seven_entries):
        page = paginate_entries(seven_entries, 2, 5)
        assert ids(page.entries) == ["2024-01-02", "2024-01-01"]
        assert page.pagination.has_more is False

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-3, 1), (9, 2)])
    def test_page_clamped(self, seven_entries, requested, expected):
        assert paginate_entries(seven_entries, requested, 5).pagination.current_page == expected

    def test_empty(self):
        page = paginate_entries([], 1, 5)
        assert page.entries == []
        assert (page.pagination.total_pages, page.pagination.has_more) == (1, False)

    def test_pages_concatenate_to_full_list(self, seven_entries):
        collected = []
        for number in range(1, total_pages(len(seven_entries), 3) + 1):
            collected.extend(paginate_entries(seven_entries, number, 3).entries)
        assert ids(collected) == ids(seven_entries)

    def test_per_page_must_be_positive(self, seven_entries):
        with pytest.raises(ValueError):
            paginate_entries(seven_entries, 1, 0)


class TestWritePages:
    """JSON page output."""

    def test_writes_numbered_pages(self, tmp_dir, seven_entries):
        out_dir = tmp_dir / "api" / "diary"
        written = write_diary_pages(seven_entries, out_dir, 5)
        assert [path.name for path in written] == ["1.json", "2.json"]

        data = json.loads((out_dir / "2.json").read_text(encoding="utf-8"))
        assert data["pagination"]["currentPage"] == 2
        assert [entry["date"] for entry in data["entries"]] == ["2024-01-02", "2024-01-01"]

    def test_empty_writes_one_page(self, tmp_dir):
        written = write_diary_pages([], tmp_dir / "out", 5)
        data = json.loads(written[0].read_text(encoding="utf-8"))
        assert data == {
            "entries": [],
            "pagination": {"currentPage": 1, "totalPages": 1, "hasMore": False, "itemsPerPage": 5},
        }

    def test_unwritable_out_dir(self, tmp_dir, seven_entries):
        blocker = tmp_dir / "blocker"
        blocker.write_text("file", encoding="utf-8")
        with pytest.raises(DiaryBuildError):
            write_diary_pages(seven_entries, blocker, 5)


class TestLoadEntries:
    """Reading a diary directory."""

    def test_stats_and_skips(self, diary_dir, context):
        stats = BuildStats()
        entries = load_diary_entries(diary_dir, context, stats)
        assert ids(entries) == ["2024-01-15", "2024-02-01"]
        assert stats.files_processed == 4
        assert stats.entries_parsed == 2
        assert stats.entries_skipped == 2
        assert stats.errors == 1

    def test_missing_directory(self, tmp_dir, context):
        assert load_diary_entries(tmp_dir / "nope", context) == []


class TestDiaryBuilder:
    """Full build runs."""

    def test_build(self, diary_dir, tmp_dir, context):
        out_dir = tmp_dir / "out"
        stats = DiaryBuilder(diary_dir, out_dir, context, per_page=1).build()
        assert stats.pages_written == 2
        first = json.loads((out_dir / "1.json").read_text(encoding="utf-8"))
        assert first["entries"][0]["date"] == "2024-02-01"
        assert first["entries"][0]["timeBlocks"][0]["text"] == "<p>Two</p>"
        assert first["pagination"]["hasMore"] is True

    def test_missing_diary_dir(self, tmp_dir, context):
        with pytest.raises(DiaryBuildError):
            DiaryBuilder(tmp_dir / "nope", tmp_dir / "out", context).build()
