#!/usr/bin/env python3
"""
builder.py
-------------------
Assemble diary entries into sorted, paginated JSON pages.

Provides:
- parse_diary_file / load_diary_entries: read diary markdown into ParsedEntry
- sort_entries / group_by_quarter: ordering and archive grouping
- paginate_entries / write_diary_pages: the ``/api/diary/{page}.json`` pages
- DiaryBuilder: one full build run with statistics

Entries are ordered by ``sort_key`` (the end date) newest first. Entries
with the same key keep the order in which they were loaded, which is the
sorted order of their file paths.

Usage:
    context = PipelineContext.from_attachment_dir(ATTACHMENT_DIR, logger=logger)
    stats = DiaryBuilder(DIARY_DIR, API_DIARY_DIR, context).build()
    print(stats.summary())
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import math
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

# --- Third party imports ---
import yaml

# --- Local imports ---
from diarist.core.cli import BuildStats
from diarist.core.exceptions import DiaryBuildError, RenderError
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import ITEMS_PER_PAGE
from diarist.dataclasses.diary_entry import DiaryPage, PaginationInfo, ParsedEntry
from diarist.diary.entry_parser import EntryParser
from diarist.pipeline.context import PipelineContext
from diarist.utils.fs import find_markdown_files


# ═══════════════════════════════════════════════════════════════════════════
# LOADING
# ═══════════════════════════════════════════════════════════════════════════

def parse_diary_file(path: Path, context: PipelineContext) -> Optional[ParsedEntry]:
    """
    Parse one diary file.

    Args:
        path: Diary markdown file named by its identifier
        context: Pipeline context of the current run

    Returns:
        ParsedEntry, or None if the entry is a draft

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the frontmatter is invalid
        RenderError: If a block cannot be rendered
    """
    return EntryParser(context).parse_file(path)


def load_diary_entries(
    diary_dir: Path,
    context: PipelineContext,
    stats: Optional[BuildStats] = None,
) -> List[ParsedEntry]:
    """
    Parse every published diary file under ``diary_dir``.

    Unreadable files are logged and skipped; they never stop a build.

    Args:
        diary_dir: Directory of diary markdown files
        context: Pipeline context of the current run
        stats: Optional statistics to update

    Returns:
        Entries in file path order
    """
    logger = safe_logger(context.logger)
    parser = EntryParser(context)
    entries: List[ParsedEntry] = []

    for path in find_markdown_files(diary_dir):
        if stats is not None:
            stats.files_processed += 1
        try:
            entry = parser.parse_file(path)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, RenderError) as e:
            logger.log_error(e, {"operation": "parse_diary_file"}, file=path)
            if stats is not None:
                stats.errors += 1
                stats.entries_skipped += 1
            continue

        if entry is None:
            if stats is not None:
                stats.entries_skipped += 1
            continue

        entries.append(entry)
        if stats is not None:
            stats.entries_parsed += 1

    return entries


# ═══════════════════════════════════════════════════════════════════════════
# ORDERING
# ═══════════════════════════════════════════════════════════════════════════

def sort_entries(entries: Iterable[ParsedEntry]) -> List[ParsedEntry]:
    """
    Newest first by ``sort_key``; ties keep their input order.

    Examples:
        >>> [e.sort_key for e in sort_entries(entries)]
        ['2024-03-02', '2024-01-20', '2024-01-20', '1970-01-01']
    """
    return sorted(entries, key=lambda entry: entry.sort_key, reverse=True)


def group_by_quarter(entries: Iterable[ParsedEntry]) -> Dict[str, List[ParsedEntry]]:
    """
    Group entries by quarter key, preserving the order entries arrive in.

    Returns:
        Ordered mapping of ``YYYY-Qn`` to entries
    """
    groups: Dict[str, List[ParsedEntry]] = OrderedDict()
    for entry in entries:
        groups.setdefault(entry.meta.quarter_key, []).append(entry)
    return groups


# ═══════════════════════════════════════════════════════════════════════════
# PAGINATION
# ═══════════════════════════════════════════════════════════════════════════

def total_pages(count: int, per_page: int = ITEMS_PER_PAGE) -> int:
    """Number of pages for ``count`` entries; never less than one."""
    return max(1, math.ceil(count / per_page))


def paginate_entries(
    entries: List[ParsedEntry],
    page: int = 1,
    per_page: int = ITEMS_PER_PAGE,
) -> DiaryPage:
    """
    Slice one page out of already sorted entries.

    ``page`` is clamped into ``[1, total_pages]``.

    Raises:
        ValueError: If ``per_page`` is not positive
    """
    if per_page < 1:
        raise ValueError(f"per_page must be positive, got {per_page}")

    pages = total_pages(len(entries), per_page)
    page = min(max(page, 1), pages)
    start = (page - 1) * per_page

    return DiaryPage(
        entries=entries[start : start + per_page],
        pagination=PaginationInfo(
            current_page=page,
            total_pages=pages,
            has_more=page < pages,
            items_per_page=per_page,
        ),
    )


def write_diary_pages(
    entries: List[ParsedEntry],
    out_dir: Path,
    per_page: int = ITEMS_PER_PAGE,
) -> List[Path]:
    """
    Write ``<n>.json`` for every page of ``entries``.

    Returns:
        Written paths in page order

    Raises:
        DiaryBuildError: If the output directory or a page cannot be written
    """
    written: List[Path] = []
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        for page in range(1, total_pages(len(entries), per_page) + 1):
            target = out_dir / f"{page}.json"
            payload = paginate_entries(entries, page, per_page).to_dict()
            target.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            written.append(target)
    except OSError as e:
        raise DiaryBuildError(f"Cannot write diary pages to {out_dir}: {e}") from e
    return written


# ═══════════════════════════════════════════════════════════════════════════
# BUILDER
# ═══════════════════════════════════════════════════════════════════════════

class DiaryBuilder:
    """
    One diary build: load, sort, paginate, write.

    Attributes:
        diary_dir: Directory of diary markdown files
        out_dir: Directory receiving page JSON files
        context: Pipeline context of the run
        per_page: Entries per page
    """

    def __init__(
        self,
        diary_dir: Path,
        out_dir: Path,
        context: PipelineContext,
        per_page: int = ITEMS_PER_PAGE,
    ) -> None:
        self.diary_dir = diary_dir
        self.out_dir = out_dir
        self.context = context
        self.per_page = per_page

    @property
    def logger(self) -> Optional[DiaristLogger]:
        return self.context.logger

    def build(self) -> BuildStats:
        """
        Execute the build.

        Returns:
            BuildStats with counts of parsed, skipped and written items

        Raises:
            DiaryBuildError: If the diary directory is missing or pages
                cannot be written
        """
        if not self.diary_dir.is_dir():
            raise DiaryBuildError(f"Diary directory not found: {self.diary_dir}")

        stats = BuildStats()
        self._log_operation(
            "build_diary_start",
            {"diary_dir": str(self.diary_dir), "out_dir": str(self.out_dir)},
        )

        entries = sort_entries(load_diary_entries(self.diary_dir, self.context, stats))
        written = write_diary_pages(entries, self.out_dir, self.per_page)
        stats.pages_written = len(written)

        self._log_operation("build_diary_complete", stats.to_dict())
        return stats

    def _log_operation(self, operation: str, details: Optional[dict] = None) -> None:
        safe_logger(self.logger).log_operation(operation, details or {})
