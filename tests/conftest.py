"""
conftest.py
-----------
Shared pytest fixtures for Diarist tests.

Provides fixtures for:
- Temporary directories and an attachment tree on disk
- An in-memory attachment lookup
- Pipeline contexts wired to either lookup
- Sample diary content
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Iterable, List

from diarist.markdown.images import OptimizedImage
from diarist.pipeline.context import PipelineContext


SITE_ROOT = Path("/site/src/data")
ATTACHMENT_ROOT = SITE_ROOT / "attachment"
BLOG_POST = str(SITE_ROOT / "blog" / "trip.md")


class FakeAttachmentLookup:
    """AttachmentLookup over a fixed list of relative paths."""

    def __init__(self, files: Iterable[str], root: Path = ATTACHMENT_ROOT) -> None:
        self.root = root
        self._files: List[str] = sorted(files)
        self.files_calls = 0

    def exists(self, path: Path) -> bool:
        try:
            rel = Path(path).relative_to(self.root).as_posix()
        except ValueError:
            return False
        return rel in self._files

    def files(self) -> List[str]:
        self.files_calls += 1
        return list(self._files)


class FakeOptimizer:
    """Records calls and returns a deterministic thumbnail."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[tuple] = []

    def optimize(self, src: str, thumbnail_size: int = 1000) -> OptimizedImage:
        self.calls.append((src, thumbnail_size))
        if self.fail:
            raise OSError(f"cannot open {src}")
        name = src.rsplit("/", 1)[-1].rsplit(".", 1)[0]
        return OptimizedImage(
            thumbnail=f"/_thumbs/{name}.webp", width=800, height=600, original=src
        )


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def attachment_dir(tmp_dir):
    """Attachment tree on disk."""
    root = tmp_dir / "attachment"
    for rel in (
        "blog/trip/photo.png",
        "blog/other/photo.png",
        "inbox/harbor.jpg",
        "inbox/Pasted image 20240101.png",
        "misc/deep/only-here.jpg",
    ):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x89PNG")
    return root


# ----- Lookup & Context Fixtures -----

@pytest.fixture
def fake_lookup():
    """In-memory lookup rooted at /site/src/data/attachment."""
    return FakeAttachmentLookup(
        [
            "blog/trip/photo.png",
            "blog/other/photo.png",
            "blog/other/shared.png",
            "inbox/harbor.jpg",
            "inbox/photo.png",
            "misc/shared.png",
            "misc/deep/only-here.jpg",
        ]
    )


@pytest.fixture
def fake_optimizer():
    return FakeOptimizer()


@pytest.fixture
def context(fake_lookup):
    """PipelineContext over the in-memory lookup, no optimizer."""
    return PipelineContext(lookup=fake_lookup)


@pytest.fixture
def optimizing_context(fake_lookup, fake_optimizer):
    """PipelineContext over the in-memory lookup with a fake optimizer."""
    return PipelineContext(lookup=fake_lookup, optimizer=fake_optimizer)


# ----- Sample Content Fixtures -----

@pytest.fixture
def diary_entry_content():
    """Diary entry with a preamble, images and a media card."""
    return """---
tags: [Diary, Travel]
---

Arrived late.

## 9:30
Morning walk along the pier.

![[harbor.jpg|The harbor]]
![[boats.jpg]]

## 21:10
```card-movie
title: Interstellar
id: 157336
rating: 8.9
```
Watched it again.
"""
