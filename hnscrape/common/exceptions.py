"""Exception types for browser connection and extraction errors.

Two families mirror the two halves of a scrape:

1. BrowserConnectionException - raised while negotiating a control channel
   to a browser (discovery HTTP call, endpoint parsing, CDP handshake).
2. ExtractionException - raised while driving an already-connected browser
   (navigation, in-page query).

None of these are retried by the library. Retry policy belongs to callers.
"""

from __future__ import annotations

from typing import Any


class BrowserConnectionException(Exception):
    """Base class for failures while connecting to a browser.

    Attributes:
        message: Human-readable description of the failure.
        target: Description of the connection target (URL or launch mode).
        context: Additional context for diagnosis.
    """

    def __init__(
        self,
        message: str,
        target: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            target: The address or launch mode that was being connected to.
            context: Optional dict of additional context (status, body, etc).
        """
        self.message = message
        self.target = target
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        parts.append(f"Target: {self.target}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class NetworkFailureException(BrowserConnectionException):
    """Raised when the management endpoint cannot be reached.

    Covers DNS failures, refused connections, resets and timeouts of the
    discovery HTTP request.
    """


class BadResponseException(BrowserConnectionException):
    """Raised when the management endpoint answers with something unusable.

    Either the status code was not 200, the body was not JSON, or the JSON
    did not carry a ``webSocketDebuggerUrl`` string.

    Attributes:
        status_code: HTTP status of the discovery response, if one was received.
        body: Response body (truncated) for diagnosis.
    """

    def __init__(
        self,
        message: str,
        target: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body

        context: dict[str, Any] = {}
        if status_code is not None:
            context["status_code"] = status_code
        if body:
            context["body"] = body[:200]

        super().__init__(message, target, context)


class InvalidEndpointException(BrowserConnectionException, ValueError):
    """Raised when a management endpoint URL cannot be parsed.

    Also a ValueError, so option validation can treat it as bad input.
    """


class HandshakeFailureException(BrowserConnectionException):
    """Raised when the browser could not be launched or the CDP connect failed."""


class ExtractionException(Exception):
    """Base class for failures while driving a connected browser.

    Attributes:
        message: Human-readable description of the failure.
        url: The page URL being worked on.
    """

    def __init__(self, message: str, url: str) -> None:
        self.message = message
        self.url = url
        super().__init__(f"{message}\nURL: {url}")


class NavigationFailureException(ExtractionException):
    """Raised when the page could not be navigated to the source URL."""


class QueryFailureException(ExtractionException):
    """Raised when the in-page extraction query fails or returns garbage."""


class SessionReleaseException(Exception):
    """Raised when closing a browser session fails.

    Only raised when nothing else went wrong first; a release failure on an
    error path is logged and the original error propagates instead.
    """
