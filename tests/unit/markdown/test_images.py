"""
test_images.py
--------------
Unit tests for the image optimizer port.
"""
from conftest import FakeOptimizer

from diarist.markdown.images import OptimizedImage, optimize_safely


class TestOptimizeSafely:
    """Optimizer failures never propagate."""

    def test_no_optimizer(self):
        assert optimize_safely(None, "../attachment/inbox/a.jpg") is None

    def test_success(self):
        optimizer = FakeOptimizer()
        result = optimize_safely(optimizer, "../attachment/inbox/a.jpg", thumbnail_size=500)
        assert result == OptimizedImage(
            thumbnail="/_thumbs/a.webp",
            width=800,
            height=600,
            original="../attachment/inbox/a.jpg",
        )
        assert optimizer.calls == [("../attachment/inbox/a.jpg", 500)]

    def test_failure_returns_none(self):
        assert optimize_safely(FakeOptimizer(fail=True), "../attachment/inbox/a.jpg") is None
