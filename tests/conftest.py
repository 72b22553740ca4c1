"""Shared fixtures: fake DevTools server, Playwright fakes."""

import asyncio
import socket
import threading
import time
from collections.abc import Generator
from contextlib import closing

import pytest
from aiohttp import web

from tests.devtools_server import DevToolsState, create_devtools_app
from tests.utils import FakePlaywrightFactory


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        # Give the server time to start
        time.sleep(0.1)

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(
                runner.cleanup(), self._loop
            )
            future.result(timeout=2.0)

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def devtools_state() -> DevToolsState:
    """Mutable state of the fake management API."""
    return DevToolsState()


@pytest.fixture
def devtools_server(
    devtools_state: DevToolsState,
) -> Generator[AioHttpTestServer, None, None]:
    """Start a fake Chromium management API on a random port.

    Yields:
        AioHttpTestServer whose ``url`` is the management base URL.
    """
    server = AioHttpTestServer(
        create_devtools_app(devtools_state), find_free_port()
    )
    server.start()
    yield server
    server.stop()


@pytest.fixture
def fake_playwright() -> FakePlaywrightFactory:
    """Playwright factory whose browser serves the sample rows."""
    return FakePlaywrightFactory()
