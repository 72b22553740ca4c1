"""Connection negotiation with local and remote Chromium browsers.

Three ways to get a browser are supported, one per ConnectionTarget variant:

- LocalLaunch: start a Chromium process with container-friendly flags.
- DirectEndpoint: connect to a known CDP WebSocket address.
- ManagementEndpoint: discover the WebSocket address from the browser's
  ``/json/version`` endpoint, then connect.

Discovery cannot be delegated to Playwright's ``connect_over_cdp(http_url)``
when the browser lives in another network namespace (a container reached by
service name, for instance), for two reasons:

1. Since Chrome 66 the DevTools HTTP endpoints reject any request whose
   ``Host`` header is not ``localhost`` or an IP literal (DNS-rebinding
   defense). ``GET /json/version`` with ``Host: browser:9222`` gets a 500.
   We send ``Host: localhost`` explicitly. httpx honours a caller-supplied
   Host header; fetch-style clients that forbid overriding it cannot be used.
2. The ``webSocketDebuggerUrl`` in the response always names the browser's
   own loopback host (``ws://localhost/devtools/browser/<id>``). Only its
   path is meaningful to us, so the host and port are replaced with the ones
   we reached the management endpoint on.

See https://bugs.chromium.org/p/chromium/issues/detail?id=813540
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from hnscrape.common.exceptions import (
    BadResponseException,
    HandshakeFailureException,
    NetworkFailureException,
)
from hnscrape.connection.session import BrowserSession
from hnscrape.data_types import (
    ConnectionTarget,
    DirectEndpoint,
    LocalLaunch,
    ManagementEndpoint,
    VersionInfo,
    describe_target,
)

logger = logging.getLogger(__name__)

# Chromium's sandbox needs kernel namespaces that containers rarely grant
LAUNCH_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

FORCED_HOST_HEADER = "localhost"


def rewrite_endpoint(ws_url: str, hostname: str, port: int) -> str:
    """Point a reported control-channel URL at the host we can actually reach.

    Scheme, path and query of ``ws_url`` are kept; host and port are
    replaced.

    Example:
        >>> rewrite_endpoint("ws://localhost/devtools/browser/XYZ", "browser", 9222)
        'ws://browser:9222/devtools/browser/XYZ'
    """
    parts = urlsplit(ws_url)
    host = f"[{hostname}]" if ":" in hostname else hostname
    return urlunsplit(parts._replace(netloc=f"{host}:{port}"))


class BrowserNegotiator:
    """Produces BrowserSessions for any ConnectionTarget.

    Args:
        playwright_factory: Callable returning a Playwright context manager
            with an async ``start()``; defaults to ``async_playwright``.
        transport: Optional httpx transport for the discovery request.
        timeout: Timeout in seconds for the discovery request.

    Example:
        negotiator = BrowserNegotiator()
        session = await negotiator.connect(ManagementEndpoint("http://browser:9222"))
    """

    def __init__(
        self,
        playwright_factory: Callable[[], Any] = async_playwright,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = 10.0,
    ) -> None:
        self.playwright_factory = playwright_factory
        self.transport = transport
        self.timeout = timeout

    async def connect(self, target: ConnectionTarget) -> BrowserSession:
        """Resolve ``target`` into a live BrowserSession.

        Raises:
            NetworkFailureException: The management endpoint was unreachable.
            BadResponseException: The management endpoint answered badly.
            HandshakeFailureException: Launch or CDP connect failed.
        """
        match target:
            case LocalLaunch():
                return await self._launch(target)
            case DirectEndpoint(control_channel_address=address):
                return await self._connect_over_cdp(
                    target, address, target.slow_motion_millis
                )
            case ManagementEndpoint():
                address = await self.discover_endpoint(target)
                return await self._connect_over_cdp(
                    target, address, target.slow_motion_millis
                )
            case _:
                raise TypeError(f"Unknown connection target: {target!r}")

    async def fetch_version_info(
        self, endpoint: ManagementEndpoint
    ) -> VersionInfo:
        """GET ``/json/version`` with the Host header forced to localhost.

        Raises:
            NetworkFailureException: On any transport-level failure.
            BadResponseException: On non-200 status or an unusable body.
        """
        url = endpoint.version_url
        logger.debug(f"Fetching version info from {url}")

        # Proxies from the environment would not reach a browser on the
        # local network and could rewrite the Host header
        async with httpx.AsyncClient(
            transport=self.transport, timeout=self.timeout, trust_env=False
        ) as client:
            try:
                response = await client.get(
                    url, headers={"Host": FORCED_HOST_HEADER}
                )
            except httpx.RequestError as e:
                raise NetworkFailureException(
                    f"HTTP request failed: {e}", endpoint.base_url
                ) from e

        if response.status_code != 200:
            raise BadResponseException(
                f"HTTP {response.status_code} from {url}",
                endpoint.base_url,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BadResponseException(
                f"Failed to parse JSON from {url}",
                endpoint.base_url,
                status_code=response.status_code,
                body=response.text,
            ) from e

        return VersionInfo.from_json(data, endpoint.base_url)

    async def discover_endpoint(self, endpoint: ManagementEndpoint) -> str:
        """Discover the control-channel address reachable from here."""
        info = await self.fetch_version_info(endpoint)
        address = rewrite_endpoint(
            info.web_socket_debugger_url, endpoint.hostname, endpoint.port
        )
        logger.debug(
            f"Rewrote {info.web_socket_debugger_url} to {address}"
        )
        return address

    async def _start_playwright(self, target: ConnectionTarget) -> Any:
        try:
            return await self.playwright_factory().start()
        except PlaywrightError as e:
            raise HandshakeFailureException(
                f"Failed to start playwright: {e}", describe_target(target)
            ) from e

    async def _launch(self, target: LocalLaunch) -> BrowserSession:
        playwright = await self._start_playwright(target)
        try:
            browser = await playwright.chromium.launch(
                headless=target.headless,
                slow_mo=target.slow_motion_millis,
                args=LAUNCH_ARGS,
            )
        except PlaywrightError as e:
            await _stop_quietly(playwright)
            raise HandshakeFailureException(
                f"Failed to launch chromium: {e}", describe_target(target)
            ) from e

        logger.info(f"Launched {describe_target(target)}")
        return BrowserSession(playwright, browser, target)

    async def _connect_over_cdp(
        self,
        target: ConnectionTarget,
        address: str,
        slow_motion_millis: int,
    ) -> BrowserSession:
        playwright = await self._start_playwright(target)
        try:
            browser = await playwright.chromium.connect_over_cdp(
                address, slow_mo=slow_motion_millis
            )
        except PlaywrightError as e:
            await _stop_quietly(playwright)
            raise HandshakeFailureException(
                f"CDP connect to {address} failed: {e}",
                describe_target(target),
            ) from e

        logger.info(f"Connected to browser at {address}")
        return BrowserSession(playwright, browser, target)


async def connect(target: ConnectionTarget) -> BrowserSession:
    """Resolve ``target`` with a default BrowserNegotiator."""
    return await BrowserNegotiator().connect(target)


async def _stop_quietly(playwright: Any) -> None:
    """Stop ``playwright`` after a failed launch or connect.

    A failure here is logged; the handshake error being raised wins.
    """
    try:
        await playwright.stop()
    except PlaywrightError as e:
        logger.error(f"Failed to stop playwright after handshake error: {e}")
