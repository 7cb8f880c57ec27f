"""
test_fs_utils.py
----------------
Unit tests for diarist.utils.fs module.
"""
from pathlib import Path

import pytest

from diarist.utils.fs import (
    find_markdown_files,
    is_published_file,
    to_posix,
    walk_relative_files,
)


@pytest.fixture
def content_dir(tmp_dir):
    for rel in ("2024-01-15.md", "2024-01-02.md", "_draft.md", "notes.txt", "sub/2023-12-31.md"):
        path = tmp_dir / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x", encoding="utf-8")
    return tmp_dir


class TestFindMarkdownFiles:
    def test_sorted_and_filtered(self, content_dir):
        names = [p.relative_to(content_dir).as_posix() for p in find_markdown_files(content_dir)]
        assert names == ["2024-01-02.md", "2024-01-15.md", "sub/2023-12-31.md"]

    def test_custom_pattern(self, content_dir):
        assert [p.name for p in find_markdown_files(content_dir, "*.md")] == [
            "2024-01-02.md",
            "2024-01-15.md",
        ]

    def test_missing_directory(self, tmp_dir):
        assert find_markdown_files(tmp_dir / "nope") == []


class TestIsPublishedFile:
    def test_underscore_skipped(self, content_dir):
        assert not is_published_file(content_dir / "_draft.md")

    def test_non_markdown_skipped(self, content_dir):
        assert not is_published_file(content_dir / "notes.txt")

    def test_directory_skipped(self, content_dir):
        assert not is_published_file(content_dir / "sub")

    def test_missing_file(self):
        assert not is_published_file(Path("/nonexistent/2024-01-01.md"))


class TestWalkRelativeFiles:
    def test_relative_posix_paths(self, attachment_dir):
        assert walk_relative_files(attachment_dir) == [
            "blog/other/photo.png",
            "blog/trip/photo.png",
            "inbox/Pasted image 20240101.png",
            "inbox/harbor.jpg",
            "misc/deep/only-here.jpg",
        ]

    def test_missing_root(self, tmp_dir):
        assert walk_relative_files(tmp_dir / "nope") == []

    def test_to_posix(self):
        assert to_posix("blog\\trip\\a.png") == "blog/trip/a.png"
