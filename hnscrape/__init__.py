"""
Hacker News front-page scraper driven through a real browser.

The browser can be launched locally or attached remotely, including a
Chromium running in another container that is only reachable through its
DevTools management endpoint.
"""

from hnscrape.common.models import Article, ScrapeResult
from hnscrape.data_types import ScrapeOptions
from hnscrape.scraper import get_title, scrape

__all__ = ["Article", "ScrapeOptions", "ScrapeResult", "get_title", "scrape"]
