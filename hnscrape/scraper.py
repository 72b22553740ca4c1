"""Public entry points: scrape the Hacker News front page, read a page title."""

from __future__ import annotations

import logging
from typing import Any

from hnscrape.common.models import ScrapeResult
from hnscrape.connection.negotiator import BrowserNegotiator
from hnscrape.data_types import LocalLaunch, ScrapeOptions, describe_target
from hnscrape.extraction.session import page_title, run

logger = logging.getLogger(__name__)


async def scrape(
    options: ScrapeOptions | None = None,
    negotiator: BrowserNegotiator | None = None,
    **overrides: Any,
) -> ScrapeResult:
    """Connect to a browser and scrape up to ``options.limit`` articles.

    Args:
        options: Scrape options; defaults to ``ScrapeOptions()``.
        negotiator: Negotiator to connect with; defaults to a fresh one.
        **overrides: Field overrides applied on top of ``options``
            (e.g. ``scrape(limit=5)``).

    Returns:
        The ScrapeResult. The browser session is released before returning.

    Raises:
        BrowserConnectionException: If no session could be established. The
            extraction never starts in that case.
        ExtractionException: If navigation or the in-page query failed.
    """
    options = options or ScrapeOptions()
    if overrides:
        options = ScrapeOptions.model_validate(
            {**options.model_dump(), **overrides}
        )
    negotiator = negotiator or BrowserNegotiator()

    target = options.connection_target()
    logger.info(f"Scraping via {describe_target(target)}")

    session = await negotiator.connect(target)
    return await run(session, options.limit)


async def get_title(
    url: str,
    headless: bool = True,
    negotiator: BrowserNegotiator | None = None,
) -> str:
    """Launch a local browser and return the title of ``url``."""
    negotiator = negotiator or BrowserNegotiator()
    session = await negotiator.connect(LocalLaunch(headless=headless))
    return await page_title(session, url)
