"""Extraction session: drive one page of a resolved browser session.

The session passed in is owned by the call. It is released on every exit
path; if releasing fails while another error is already propagating, the
release failure is logged and the original error wins.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, TypeVar

from playwright.async_api import Error as PlaywrightError

from hnscrape.common.exceptions import (
    NavigationFailureException,
    QueryFailureException,
    SessionReleaseException,
)
from hnscrape.common.models import ScrapeResult
from hnscrape.extraction.hacker_news import (
    EXTRACT_ROWS_JS,
    HACKER_NEWS_URL,
    parse_rows,
)

if TYPE_CHECKING:
    from playwright.async_api import Page

    from hnscrape.connection.session import BrowserSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _with_release(
    session: BrowserSession, work: Callable[[], Awaitable[T]]
) -> T:
    """Run ``work`` and close ``session`` afterwards, whatever happens."""
    try:
        result = await work()
    except BaseException:
        try:
            await session.close()
        except SessionReleaseException as release_error:
            logger.error(
                f"Failed to release browser session after error: {release_error}"
            )
        raise
    await session.close()
    return result


async def _open_page(session: BrowserSession, url: str) -> Page:
    try:
        page = await session.new_page()
        # Wait for DOMContentLoaded only, not the load event
        await page.goto(url, wait_until="domcontentloaded")
    except PlaywrightError as e:
        raise NavigationFailureException(
            f"Navigation failed: {e}", url
        ) from e
    return page


async def run(
    session: BrowserSession,
    limit: int = 30,
    source_url: str = HACKER_NEWS_URL,
) -> ScrapeResult:
    """Scrape the listing at ``source_url`` and release ``session``.

    Args:
        session: A live session from the negotiator. Closed on return.
        limit: Maximum number of articles to keep. 0 yields an empty list.
        source_url: Listing page to navigate to.

    Returns:
        ScrapeResult stamped with the time navigation completed.

    Raises:
        ValueError: If ``limit`` is negative.
        NavigationFailureException: If the page could not be loaded.
        QueryFailureException: If the in-page query failed.
        SessionReleaseException: If only the release itself failed.
    """

    async def work() -> ScrapeResult:
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        page = await _open_page(session, source_url)
        scraped_at = datetime.now(timezone.utc)

        try:
            rows = await page.evaluate(EXTRACT_ROWS_JS)
        except PlaywrightError as e:
            raise QueryFailureException(
                f"Extraction query failed: {e}", source_url
            ) from e
        if not isinstance(rows, list):
            raise QueryFailureException(
                f"Extraction query returned {type(rows).__name__}, "
                "expected a list",
                source_url,
            )

        articles = parse_rows(rows, base_url=source_url)[:limit]
        logger.info(
            f"Extracted {len(articles)} of {len(rows)} rows from {source_url}"
        )
        return ScrapeResult(
            scraped_at=scraped_at,
            source=source_url,
            articles=articles,
        )

    return await _with_release(session, work)


async def page_title(session: BrowserSession, url: str) -> str:
    """Navigate to ``url``, return the document title, release ``session``."""

    async def work() -> str:
        page = await _open_page(session, url)
        try:
            return await page.title()
        except PlaywrightError as e:
            raise QueryFailureException(
                f"Could not read page title: {e}", url
            ) from e

    return await _with_release(session, work)
