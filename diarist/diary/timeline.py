#!/usr/bin/env python3
"""
timeline.py
-----------
Incremental loading of diary pages for an infinite-scroll timeline.

The first page is rendered with the site; later pages are fetched from
``/api/diary/{page}.json`` when the reader scrolls near the bottom or asks
for more.

States:
    idle       - more pages may exist, nothing in flight
    loading    - one page request outstanding
    exhausted  - no further requests will ever be made

Rules:
    - at most one request at a time, and never two for the same page
    - displayed entries only grow, in server order
    - an empty page or any fetch failure makes the timeline exhausted
    - after ``close()`` no request starts and late results are dropped

Usage:
    async with httpx.AsyncClient(base_url="https://example.org") as client:
        controller = TimelineController.over_http(
            client, first_page.entries, first_page.pagination
        )
        await controller.load_more()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import asyncio
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Set

# --- Third party imports ---
import httpx

# --- Local imports ---
from diarist.core.exceptions import PaginationFetchError
from diarist.core.logging_manager import DiaristLogger, safe_logger
from diarist.core.settings import (
    API_DIARY_PATH,
    SCROLL_DEBOUNCE_SECONDS,
    SCROLL_THRESHOLD_PX,
)
from diarist.dataclasses.diary_entry import DiaryPage, PaginationInfo, ParsedEntry


PageFetcher = Callable[[int], Awaitable[DiaryPage]]


class TimelineState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    EXHAUSTED = "exhausted"


class HttpPageFetcher:
    """
    Fetch diary pages over HTTP.

    Attributes:
        client: Shared httpx.AsyncClient (owned by the caller)
        base_url: Prefix for the page URLs; may be "" when the client has
            its own ``base_url``
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str = "") -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")

    def page_url(self, page: int) -> str:
        return f"{self.base_url}{API_DIARY_PATH}/{page}.json"

    async def __call__(self, page: int) -> DiaryPage:
        """
        GET one page.

        Raises:
            PaginationFetchError: On transport errors, non-2xx responses,
                invalid JSON or a body that is not a diary page
        """
        url = self.page_url(page)
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise PaginationFetchError(f"Request for {url} failed: {e}") from e

        if not response.is_success:
            raise PaginationFetchError(
                f"Request for {url} returned HTTP {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PaginationFetchError(f"Response from {url} is not JSON") from e

        try:
            return DiaryPage.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise PaginationFetchError(f"Response from {url} is not a diary page: {e}") from e


class TimelineController:
    """
    Pagination state machine behind the diary timeline.

    Attributes:
        displayed_entries: Entries shown so far (append-only)
        current_page: Last page whose entries were appended
        has_more: Whether another page may be requested
        is_loading: True while a request is outstanding
        in_flight: Page numbers currently being fetched
        closed: Set by ``close()``
    """

    def __init__(
        self,
        initial_entries: Iterable[ParsedEntry],
        pagination: PaginationInfo,
        fetch_page: PageFetcher,
        logger: Optional[DiaristLogger] = None,
        scroll_threshold: int = SCROLL_THRESHOLD_PX,
        debounce_seconds: float = SCROLL_DEBOUNCE_SECONDS,
    ) -> None:
        self.displayed_entries: List[ParsedEntry] = list(initial_entries)
        self.current_page = pagination.current_page
        self.has_more = pagination.has_more
        self.is_loading = False
        self.in_flight: Set[int] = set()
        self.closed = False

        self.fetch_page = fetch_page
        self.logger = logger
        self.scroll_threshold = scroll_threshold
        self.debounce_seconds = debounce_seconds

        self._scroll_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Future] = set()

    @classmethod
    def over_http(
        cls,
        client: httpx.AsyncClient,
        initial_entries: Iterable[ParsedEntry],
        pagination: PaginationInfo,
        base_url: str = "",
        logger: Optional[DiaristLogger] = None,
    ) -> TimelineController:
        """Controller fetching pages with an HttpPageFetcher."""
        return cls(initial_entries, pagination, HttpPageFetcher(client, base_url), logger)

    @property
    def state(self) -> TimelineState:
        if self.is_loading:
            return TimelineState.LOADING
        if not self.has_more:
            return TimelineState.EXHAUSTED
        return TimelineState.IDLE

    # ----- Loading -----
    async def load_more(self) -> bool:
        """
        Fetch and append the next page.

        Returns:
            True if entries were appended, False otherwise (guarded out,
            empty page, failure or closed while waiting)
        """
        if self.closed or self.is_loading or not self.has_more:
            return False

        next_page = self.current_page + 1
        if next_page in self.in_flight:
            return False

        self.in_flight.add(next_page)
        self.is_loading = True
        logger = safe_logger(self.logger)
        try:
            page = await self.fetch_page(next_page)
            if self.closed:
                logger.log_debug("Timeline closed, dropping page", page=next_page)
                return False

            if not page.entries:
                self.has_more = False
                return False

            self.displayed_entries.extend(page.entries)
            self.current_page = next_page
            self.has_more = page.pagination.has_more
            logger.log_debug(
                "Loaded diary page",
                {"entries": len(page.entries), "has_more": self.has_more},
                page=next_page,
            )
            return True
        except Exception as e:  # any fetch failure ends the session
            logger.log_error(e, {"operation": "load_diary_page"}, page=next_page)
            self.has_more = False
            return False
        finally:
            self.in_flight.discard(next_page)
            self.is_loading = False

    # ----- Scroll trigger -----
    def is_near_bottom(
        self, scroll_top: float, viewport_height: float, document_height: float
    ) -> bool:
        return viewport_height + scroll_top >= document_height - self.scroll_threshold

    def on_scroll(
        self, scroll_top: float, viewport_height: float, document_height: float
    ) -> None:
        """
        Debounced scroll handler.

        Each call cancels the previously scheduled check, so only the last
        scroll position within the debounce window is evaluated. Must be
        called from inside the running event loop.
        """
        if self.closed:
            return
        if self._scroll_handle is not None:
            self._scroll_handle.cancel()
        loop = asyncio.get_running_loop()
        self._scroll_handle = loop.call_later(
            self.debounce_seconds,
            self._check_scroll,
            scroll_top,
            viewport_height,
            document_height,
        )

    def _check_scroll(
        self, scroll_top: float, viewport_height: float, document_height: float
    ) -> None:
        self._scroll_handle = None
        if self.closed or not self.is_near_bottom(scroll_top, viewport_height, document_height):
            return
        task = asyncio.ensure_future(self.load_more())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_pending(self) -> None:
        """Wait for loads started by scroll events."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ----- Teardown -----
    def close(self) -> None:
        """Stop scheduling work; in-flight fetches finish but are ignored."""
        self.closed = True
        if self._scroll_handle is not None:
            self._scroll_handle.cancel()
            self._scroll_handle = None
