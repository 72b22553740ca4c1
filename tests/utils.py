"""Test utilities: Playwright fakes and canned listing rows.

The fakes record every call so tests can assert on how the negotiator and the
extraction session drive the browser, without launching one.
"""

from typing import Any

import httpx
from playwright.async_api import Error as PlaywrightError

from tests.devtools_server import REPORTED_WS_URL

# Raw records as returned by EXTRACT_ROWS_JS for a three-row page
SAMPLE_ROWS: list[dict[str, Any]] = [
    {
        "rank": "1.",
        "title": "Rewriting it in Rust",
        "href": "https://example.com/rust",
        "score": "123 points",
        "author": "alice",
        "postedAt": "2026-10-19T08:00:00 1792396800",
        "comments": "45\xa0comments",
    },
    {
        "rank": "2.",
        "title": "Ask HN: What are you working on?",
        "href": "item?id=2",
        "score": "7 points",
        "author": "bob",
        "postedAt": "2026-10-19T09:30:00 1792402200",
        "comments": "discuss",
    },
    {
        "rank": "3.",
        "title": "Example (YC W24) is hiring",
        "href": "https://jobs.example.com/",
        "score": None,
        "author": None,
        "postedAt": "2026-10-19T07:00:00 1792393200",
        "comments": "4 hours ago",
    },
]


class FakePage:
    """Stand-in for playwright's Page."""

    def __init__(
        self,
        rows: Any = None,
        title: str = "Hacker News",
        goto_error: Exception | None = None,
        evaluate_error: Exception | None = None,
    ) -> None:
        self.rows = SAMPLE_ROWS if rows is None else rows
        self._title = title
        self.goto_error = goto_error
        self.evaluate_error = evaluate_error
        self.goto_calls: list[tuple[str, dict[str, Any]]] = []
        self.evaluate_calls = 0

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.goto_calls.append((url, kwargs))
        if self.goto_error is not None:
            raise self.goto_error

    async def evaluate(self, expression: str) -> Any:
        self.evaluate_calls += 1
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return self.rows

    async def title(self) -> str:
        return self._title


class FakeBrowser:
    """Stand-in for playwright's Browser."""

    def __init__(
        self, page: FakePage | None = None, close_error: Exception | None = None
    ) -> None:
        self.page = page or FakePage()
        self.close_error = close_error
        self.pages_opened = 0
        self.close_calls = 0

    async def new_page(self) -> FakePage:
        self.pages_opened += 1
        return self.page

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeChromium:
    """Stand-in for ``playwright.chromium``."""

    def __init__(
        self,
        browser: FakeBrowser,
        launch_error: Exception | None = None,
        connect_error: Exception | None = None,
    ) -> None:
        self.browser = browser
        self.launch_error = launch_error
        self.connect_error = connect_error
        self.launch_calls: list[dict[str, Any]] = []
        self.connect_calls: list[tuple[str, dict[str, Any]]] = []

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_calls.append(kwargs)
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser

    async def connect_over_cdp(
        self, endpoint_url: str, **kwargs: Any
    ) -> FakeBrowser:
        self.connect_calls.append((endpoint_url, kwargs))
        if self.connect_error is not None:
            raise self.connect_error
        return self.browser


class FakePlaywright:
    """Stand-in for a started Playwright instance."""

    def __init__(
        self, chromium: FakeChromium, stop_error: Exception | None = None
    ) -> None:
        self.chromium = chromium
        self.stop_error = stop_error
        self.stop_calls = 0

    async def stop(self) -> None:
        self.stop_calls += 1
        if self.stop_error is not None:
            raise self.stop_error


class FakePlaywrightFactory:
    """Callable standing in for ``async_playwright``.

    Example:
        factory = FakePlaywrightFactory()
        negotiator = BrowserNegotiator(playwright_factory=factory)
    """

    def __init__(
        self,
        browser: FakeBrowser | None = None,
        launch_error: Exception | None = None,
        connect_error: Exception | None = None,
        stop_error: Exception | None = None,
    ) -> None:
        self.browser = browser or FakeBrowser()
        self.playwright = FakePlaywright(
            FakeChromium(self.browser, launch_error, connect_error),
            stop_error=stop_error,
        )
        self.start_calls = 0

    @property
    def chromium(self) -> FakeChromium:
        return self.playwright.chromium

    @property
    def page(self) -> FakePage:
        return self.browser.page

    def __call__(self) -> "FakePlaywrightFactory":
        return self

    async def start(self) -> FakePlaywright:
        self.start_calls += 1
        return self.playwright


def playwright_error(message: str = "boom") -> PlaywrightError:
    return PlaywrightError(message)


class VersionEndpointHandler:
    """httpx.MockTransport handler answering ``/json/version``.

    Records every request it sees.
    """

    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.payload = (
            {"Browser": "Chrome/120.0", "webSocketDebuggerUrl": REPORTED_WS_URL}
            if payload is None
            else payload
        )
        self.text = text
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

