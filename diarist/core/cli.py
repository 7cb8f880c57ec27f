#!/usr/bin/env python3
"""
cli.py
------
Shared CLI utilities and statistics for diarist commands.

Functions:
    setup_logger: Initialize DiaristLogger for CLI operations

Classes:
    OperationStats: Base class for all statistics
    BuildStats: For diary build operations

Usage:
    from diarist.core.cli import setup_logger, BuildStats

    logger = setup_logger(log_dir, "diary")
    stats = BuildStats()
    stats.files_processed += 1
    print(stats.summary())
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

# --- Local imports ---
from diarist.core.logging_manager import DiaristLogger


# ═══════════════════════════════════════════════════════════════════════════
# LOGGER SETUP
# ═══════════════════════════════════════════════════════════════════════════

def setup_logger(log_dir: Path, component_name: str, verbose: bool = False) -> DiaristLogger:
    """
    Setup logging for CLI operations.

    Creates the operations log directory if it doesn't exist and initializes
    a DiaristLogger instance for the specified component.

    Args:
        log_dir: Base log directory (typically from paths.LOG_DIR)
        component_name: Component identifier for logging (e.g., 'diary')
        verbose: Also echo INFO records to the console

    Returns:
        Configured DiaristLogger instance
    """
    operations_log_dir = log_dir / "operations"
    operations_log_dir.mkdir(parents=True, exist_ok=True)
    return DiaristLogger(operations_log_dir, component_name=component_name, verbose=verbose)


# ═══════════════════════════════════════════════════════════════════════════
# STATISTICS CLASSES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class OperationStats:
    """
    Base class for CLI operation statistics.

    Attributes:
        files_processed: Number of files successfully processed
        errors: Number of errors encountered
        start_time: Operation start timestamp
    """
    files_processed: int = 0
    errors: int = 0
    start_time: datetime = field(default_factory=datetime.now)
    _duration_cached: Optional[float] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate statistics on initialization."""
        if self.files_processed < 0:
            raise ValueError(f"files_processed must be non-negative, got {self.files_processed}")
        if self.errors < 0:
            raise ValueError(f"errors must be non-negative, got {self.errors}")

    def duration(self) -> float:
        """Get elapsed time in seconds (cached after first call)."""
        if self._duration_cached is None:
            self._duration_cached = (datetime.now() - self.start_time).total_seconds()
        return self._duration_cached

    def summary(self) -> str:
        """Get formatted summary string."""
        return (
            f"{self.files_processed} files processed, "
            f"{self.errors} errors, "
            f"{self.duration():.2f}s"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "files_processed": self.files_processed,
            "errors": self.errors,
            "duration": self.duration(),
        }


@dataclass
class BuildStats(OperationStats):
    """
    Statistics for diary build operations.

    Attributes:
        entries_parsed: Number of diary entries assembled
        entries_skipped: Number of drafts or unreadable files skipped
        pages_written: Number of page JSON files written
    """
    entries_parsed: int = 0
    entries_skipped: int = 0
    pages_written: int = 0

    def __post_init__(self) -> None:
        """Validate statistics on initialization."""
        super().__post_init__()
        if self.entries_parsed < 0:
            raise ValueError(f"entries_parsed must be non-negative, got {self.entries_parsed}")
        if self.entries_skipped < 0:
            raise ValueError(f"entries_skipped must be non-negative, got {self.entries_skipped}")
        if self.pages_written < 0:
            raise ValueError(f"pages_written must be non-negative, got {self.pages_written}")

    def summary(self) -> str:
        """Get formatted summary with build metrics."""
        return (
            f"{self.files_processed} files processed, "
            f"{self.entries_parsed} entries, "
            f"{self.entries_skipped} skipped, "
            f"{self.pages_written} pages written, "
            f"{self.errors} errors, "
            f"{self.duration():.2f}s"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with build metrics."""
        d = super().to_dict()
        d.update({
            "entries_parsed": self.entries_parsed,
            "entries_skipped": self.entries_skipped,
            "pages_written": self.pages_written,
        })
        return d
