"""Connection negotiation with local and remote browsers.

This package turns a ConnectionTarget into a live BrowserSession, working
around Chromium's Host-header validation and the loopback host it reports in
its control-channel address.
"""

from hnscrape.connection.negotiator import (
    BrowserNegotiator,
    connect,
    rewrite_endpoint,
)
from hnscrape.connection.session import BrowserSession

__all__ = ["BrowserNegotiator", "BrowserSession", "connect", "rewrite_endpoint"]
