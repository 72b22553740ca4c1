"""Data types describing how to reach a browser.

This module defines:

1. ConnectionTarget - a closed union of DirectEndpoint, ManagementEndpoint
   and LocalLaunch. Consumers match on it exhaustively with Python's match
   statement.
2. VersionInfo - the parsed body of a browser's ``/json/version`` response.
3. ScrapeOptions - the validated configuration accepted by ``scrape()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from hnscrape.common.exceptions import (
    BadResponseException,
    InvalidEndpointException,
)

DEFAULT_MANAGEMENT_PORT = 9222
DEFAULT_MANAGEMENT_URL = f"http://localhost:{DEFAULT_MANAGEMENT_PORT}"


@dataclass(frozen=True)
class DirectEndpoint:
    """An already-resolved control-channel address, used as-is.

    Attributes:
        control_channel_address: CDP WebSocket URL
            (e.g. ``ws://browser:9222/devtools/browser/<id>``).
        slow_motion_millis: Delay inserted between control actions.
    """

    control_channel_address: str
    slow_motion_millis: int = 0


@dataclass(frozen=True)
class ManagementEndpoint:
    """Base URL of a browser's HTTP management API.

    The control-channel address has to be discovered from ``/json/version``.

    Attributes:
        base_url: HTTP(S) URL such as ``http://puppeteer:9222``.
        slow_motion_millis: Delay inserted between control actions.
    """

    base_url: str
    slow_motion_millis: int = 0

    def __post_init__(self) -> None:
        try:
            parts = urlsplit(self.base_url)
            # Non-numeric or out-of-range ports raise here
            _ = parts.port
        except ValueError as e:
            raise InvalidEndpointException(
                f"Invalid management endpoint URL: {e}", self.base_url
            ) from e
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise InvalidEndpointException(
                "Management endpoint must be an http(s) URL with a host",
                self.base_url,
            )

    @property
    def scheme(self) -> str:
        return urlsplit(self.base_url).scheme

    @property
    def hostname(self) -> str:
        hostname = urlsplit(self.base_url).hostname
        if not hostname:
            raise InvalidEndpointException(
                "Management endpoint URL has no host", self.base_url
            )
        return hostname

    @property
    def port(self) -> int:
        """Port from the URL, or 9222 when the URL does not carry one."""
        return urlsplit(self.base_url).port or DEFAULT_MANAGEMENT_PORT

    @property
    def netloc(self) -> str:
        """``hostname:port`` with IPv6 literals bracketed."""
        host = self.hostname
        if ":" in host:
            host = f"[{host}]"
        return f"{host}:{self.port}"

    @property
    def version_url(self) -> str:
        return f"{self.scheme}://{self.netloc}/json/version"


@dataclass(frozen=True)
class LocalLaunch:
    """Request to launch a fresh local Chromium process.

    Attributes:
        headless: Run without a visible window.
        slow_motion_millis: Delay inserted between control actions, for debugging.
    """

    headless: bool = True
    slow_motion_millis: int = 0


ConnectionTarget = DirectEndpoint | ManagementEndpoint | LocalLaunch


def describe_target(target: ConnectionTarget) -> str:
    """Return a short human-readable description of a target for messages."""
    match target:
        case DirectEndpoint(control_channel_address=address):
            return address
        case ManagementEndpoint(base_url=base_url):
            return base_url
        case LocalLaunch(headless=headless):
            return f"local chromium (headless={headless})"
        case _:
            raise TypeError(f"Unknown connection target: {target!r}")


@dataclass(frozen=True)
class VersionInfo:
    """Parsed ``/json/version`` response of a Chromium management API.

    Only ``web_socket_debugger_url`` is required. As reported by the browser
    it carries a loopback host and must be rewritten before use from
    another network namespace.
    """

    web_socket_debugger_url: str
    browser: str = ""
    protocol_version: str = ""
    user_agent: str = ""
    v8_version: str = ""
    webkit_version: str = ""

    @classmethod
    def from_json(cls, data: Any, target: str) -> VersionInfo:
        """Build a VersionInfo from a decoded JSON body.

        Args:
            data: The decoded JSON document.
            target: Management URL, for error reporting.

        Raises:
            BadResponseException: If the document is not an object or lacks a
                ``webSocketDebuggerUrl`` in ``ws://``/``wss://`` URL form.
        """
        if not isinstance(data, dict):
            raise BadResponseException(
                "Version info is not a JSON object", target, body=repr(data)
            )
        ws_url = data.get("webSocketDebuggerUrl")
        if not isinstance(ws_url, str) or not ws_url:
            raise BadResponseException(
                "Version info has no webSocketDebuggerUrl",
                target,
                body=repr(data),
            )
        try:
            parts = urlsplit(ws_url)
        except ValueError as e:
            raise BadResponseException(
                f"webSocketDebuggerUrl is not a URL: {e}",
                target,
                body=repr(data),
            ) from e
        if parts.scheme not in ("ws", "wss") or parts.path in ("", "/"):
            raise BadResponseException(
                f"webSocketDebuggerUrl is not a ws:// URL: {ws_url!r}",
                target,
                body=repr(data),
            )
        return cls(
            web_socket_debugger_url=ws_url,
            browser=_str_field(data, "Browser"),
            protocol_version=_str_field(data, "Protocol-Version"),
            user_agent=_str_field(data, "User-Agent"),
            v8_version=_str_field(data, "V8-Version"),
            webkit_version=_str_field(data, "WebKit-Version"),
        )


def _str_field(data: dict[str, Any], key: str) -> str:
    """String value of ``key``, or ``""`` when absent or not a string."""
    value = data.get(key)
    return value if isinstance(value, str) else ""


class ScrapeOptions(BaseModel):
    """Options accepted by ``scrape()``.

    Attributes:
        limit: Maximum number of articles returned.
        headless: Run the browser headless. Only meaningful for local launch.
        slow_motion_millis: Artificial delay between control actions.
        control_channel_address: CDP WebSocket URL to attach to directly.
        management_base_url: Management API base URL to discover the control
            channel from. ``None`` disables remote attach.
        launch_local: Ignore ``management_base_url`` and launch a local browser.
    """

    limit: int = Field(default=30, ge=0)
    headless: bool = True
    slow_motion_millis: int = Field(default=0, ge=0)
    control_channel_address: str | None = None
    management_base_url: str | None = DEFAULT_MANAGEMENT_URL
    launch_local: bool = False

    def connection_target(self) -> ConnectionTarget:
        """Pick the connection target.

        Precedence: direct address, then management endpoint, then local launch.
        """
        if self.control_channel_address:
            return DirectEndpoint(
                self.control_channel_address,
                slow_motion_millis=self.slow_motion_millis,
            )
        if self.management_base_url and not self.launch_local:
            return ManagementEndpoint(
                self.management_base_url,
                slow_motion_millis=self.slow_motion_millis,
            )
        return LocalLaunch(
            headless=self.headless,
            slow_motion_millis=self.slow_motion_millis,
        )
