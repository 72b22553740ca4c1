"""Page navigation and article extraction over a BrowserSession."""

from hnscrape.extraction.session import page_title, run

__all__ = ["page_title", "run"]
