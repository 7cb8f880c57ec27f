#!/usr/bin/env python3
"""
logging_manager.py
------------------
Logging for diarist pipeline runs.

Every pass reports against a location in the content: the markdown file
being processed, the source line of a fenced block, or the diary page
being built or fetched. Those three are keyword arguments on every log
method, so records read the same wherever they come from:

    WARNING - Skipping malformed card-link block [file=blog/trip.md line=12]: {"error": "..."}

Output:
    <log_dir>/<component>.log   everything from DEBUG up
    <log_dir>/errors.log        errors with context and traceback
    stderr                      warnings (info too when verbose)

The logger also counts warnings and errors so a command can tell the user
that a run finished with problems worth reading about.

Passes that accept an optional logger wrap it with ``safe_logger``.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

# --- Third party imports ---
import click


PathLike = Union[str, Path]

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def format_location(
    file: Optional[PathLike] = None,
    line: Optional[int] = None,
    page: Optional[int] = None,
) -> str:
    """
    Render the location part of a record.

    Examples:
        >>> format_location("blog/trip.md", line=12)
        '[file=blog/trip.md line=12]'
        >>> format_location(page=3)
        '[page=3]'
        >>> format_location()
        ''
    """
    parts = [
        f"{name}={value}"
        for name, value in (("file", file), ("line", line), ("page", page))
        if value is not None and value != ""
    ]
    return f"[{' '.join(parts)}]" if parts else ""


def format_record(
    label: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    file: Optional[PathLike] = None,
    line: Optional[int] = None,
    page: Optional[int] = None,
) -> str:
    """``LABEL - message [location]: {details}``, omitting empty parts."""
    head = f"{label} - {message}"
    location = format_location(file, line, page)
    if location:
        head = f"{head} {location}"
    if details:
        return f"{head}: {json.dumps(details, default=str, ensure_ascii=False)}"
    return head


def format_cli_error(error: Exception, verbose: bool = False) -> str:
    """
    One-line error for the terminal; the traceback is appended when verbose.

    Examples:
        >>> format_cli_error(ValueError("bad page"))
        '❌ ValueError: bad page'
    """
    message = f"❌ {type(error).__name__}: {error}"
    if verbose:
        return f"{message}\n\n{traceback.format_exc()}"
    return message


class DiaristLogger:
    """
    Rotating file logger for one pipeline component.

    Attributes:
        log_dir: Directory for log files
        component_name: Logger namespace and log file stem
        main_logger: Component log plus console
        error_logger: errors.log only
        warning_count: Warnings logged so far
        error_count: Errors logged so far
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "diarist",
        verbose: bool = False,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """
        Args:
            log_dir: Directory for log files
            component_name: Component identifier (e.g. 'pipeline', 'diary')
            verbose: Echo INFO records to the console as well
            max_bytes: Size at which a log file rotates (default: 10MB)
            backup_count: Rotated files kept (default: 5)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.verbose = verbose
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.warning_count = 0
        self.error_count = 0
        self._setup_loggers()

    def _setup_loggers(self) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = logging.getLogger(f"{self.component_name}.operations")
        self.main_logger.setLevel(logging.DEBUG)
        # Loggers are process-global; a second instance must not stack handlers
        self.main_logger.handlers = []

        self.error_logger = logging.getLogger(f"{self.component_name}.errors")
        self.error_logger.setLevel(logging.ERROR)
        self.error_logger.handlers = []

        self.main_logger.addHandler(
            self._file_handler(self.log_dir / f"{self.component_name}.log", logging.DEBUG)
        )
        self.error_logger.addHandler(
            self._file_handler(self.log_dir / "errors.log", logging.ERROR)
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO if self.verbose else logging.WARNING)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self.main_logger.addHandler(console_handler)

    def _file_handler(self, file_path: Path, level: int) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        return handler

    # ----- Records -----
    def log_operation(
        self,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        file: Optional[PathLike] = None,
        line: Optional[int] = None,
        page: Optional[int] = None,
    ) -> None:
        """Record a completed pipeline step (INFO)."""
        self.main_logger.info(
            format_record("OPERATION", operation, details, file, line, page), stacklevel=2
        )

    def log_debug(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        file: Optional[PathLike] = None,
        line: Optional[int] = None,
        page: Optional[int] = None,
    ) -> None:
        self.main_logger.debug(
            format_record("DEBUG", message, details, file, line, page), stacklevel=2
        )

    def log_warning(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        file: Optional[PathLike] = None,
        line: Optional[int] = None,
        page: Optional[int] = None,
    ) -> None:
        """Record content that was skipped or kept as is."""
        self.warning_count += 1
        self.main_logger.warning(
            format_record("WARNING", message, details, file, line, page), stacklevel=2
        )

    def log_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        *,
        file: Optional[PathLike] = None,
        line: Optional[int] = None,
        page: Optional[int] = None,
    ) -> None:
        """
        Record an exception in errors.log with its context and traceback.

        Args:
            error: Exception that occurred
            context: Extra fields (operation name, paths, ...)
            file: Markdown file being processed
            line: Source line of the block that failed
            page: Diary page being built or fetched
        """
        self.error_count += 1
        summary = f"{type(error).__name__}: {error}"
        self.error_logger.error(
            format_record("ERROR", summary, context, file, line, page), stacklevel=2
        )
        self.error_logger.error(f"Traceback:\n{traceback.format_exc()}", stacklevel=2)


class NullLogger:
    """
    DiaristLogger stand-in that records nothing.

    Lets passes call logging methods without checking for a logger first.
    """

    warning_count = 0
    error_count = 0

    def log_operation(self, name: str, details: Optional[Dict] = None, **location: Any) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict] = None, **location: Any) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict] = None, **location: Any) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict] = None, **location: Any) -> None:
        pass


_null_logger = NullLogger()


def safe_logger(logger: Optional[DiaristLogger]) -> DiaristLogger:
    """
    Return ``logger``, or the shared NullLogger when it is None.

    Usage:
        safe_logger(self.logger).log_warning("Skipping block", file=path, line=3)
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Log a failed command, print a short message and exit.

    The full record (context and traceback) goes to errors.log through the
    logger stored in ``ctx.obj``; the terminal gets one line, or the
    traceback too with ``-v``. Never returns.

    Args:
        ctx: Click context holding ``logger`` and ``verbose``
        error: Exception that ended the command
        operation: Failed operation (e.g. 'build_diary')
        additional_context: Extra fields such as the input file
        exit_code: Process exit status (default: 1)
    """
    logger: Optional[DiaristLogger] = ctx.obj.get("logger")
    verbose: bool = ctx.obj.get("verbose", False)

    context = {"operation": operation}
    if additional_context:
        context.update(additional_context)

    safe_logger(logger).log_error(error, context)
    click.echo(format_cli_error(error, verbose), err=True)
    sys.exit(exit_code)
