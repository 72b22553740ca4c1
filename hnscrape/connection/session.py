"""Resolved browser session.

A BrowserSession owns the Playwright instance and the Browser handle that the
negotiator produced. Whoever holds it is responsible for calling close()
exactly once; later calls are no-ops.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from playwright.async_api import Error as PlaywrightError

from hnscrape.common.exceptions import SessionReleaseException
from hnscrape.data_types import ConnectionTarget, describe_target

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)


class BrowserSession:
    """A live control connection to one browser.

    Args:
        playwright: The started Playwright instance backing the connection.
        browser: Launched or CDP-connected browser.
        target: The connection target this session was resolved from.

    Example:
        session = await BrowserNegotiator().connect(LocalLaunch())
        async with session:
            page = await session.new_page()
            ...
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        target: ConnectionTarget,
    ) -> None:
        self.playwright = playwright
        self.browser = browser
        self.target = target
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def new_page(self) -> Page:
        """Open a new page in a fresh context of the session's browser."""
        if self._closed:
            raise RuntimeError("Browser session is already closed")
        return await self.browser.new_page()

    async def close(self) -> None:
        """Close the browser connection and stop Playwright.

        For a CDP-attached browser this disconnects without killing the
        remote process. Playwright is stopped even if closing the browser
        fails.

        Raises:
            SessionReleaseException: If closing the browser or stopping
                Playwright failed.
        """
        if self._closed:
            logger.debug(
                f"Session for {describe_target(self.target)} already closed"
            )
            return
        self._closed = True

        release_error: BaseException | None = None
        try:
            await self.browser.close()
        except PlaywrightError as e:
            release_error = e
        finally:
            try:
                await self.playwright.stop()
            except PlaywrightError as e:
                release_error = release_error or e

        if release_error is not None:
            raise SessionReleaseException(
                f"Failed to release browser session for "
                f"{describe_target(self.target)}: {release_error}"
            ) from release_error

        logger.debug(f"Released session for {describe_target(self.target)}")

    async def __aenter__(self) -> BrowserSession:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
