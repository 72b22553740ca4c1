"""Hacker News front-page row extraction.

The in-page query only collects raw strings, one record per listing row, with
``null`` for any missing sub-element. Turning them into Articles happens here
in Python, where every field degrades to an empty/zero default on its own so
one odd row (a job post without score or author, say) never fails the batch.

Everything in this module depends on the site's current markup and wording.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import urljoin

from hnscrape.common.models import Article

logger = logging.getLogger(__name__)

HACKER_NEWS_URL = "https://news.ycombinator.com/"

EXTRACT_ROWS_JS = """
() => {
  const text = (el) => (el ? el.textContent : null);
  const rows = [];
  document.querySelectorAll("tr.athing").forEach((row) => {
    const titleLink = row.querySelector("span.titleline > a");
    const subtext = row.nextElementSibling;
    if (!titleLink || !subtext) return;

    const links = subtext.querySelectorAll("a");
    const age = subtext.querySelector("span.age");
    rows.push({
      rank: text(row.querySelector("span.rank")),
      title: titleLink.textContent,
      href: titleLink.getAttribute("href"),
      score: text(subtext.querySelector("span.score")),
      author: text(subtext.querySelector("a.hnuser")),
      postedAt: age ? age.getAttribute("title") : null,
      comments: links.length ? links[links.length - 1].textContent : null,
    });
  });
  return rows;
}
"""

_INT_RE = re.compile(r"\d+")
_COMMENTS_RE = re.compile(r"(\d+)\s*comment")


def _first_int(text: Any) -> int:
    """First run of digits in ``text``, or 0."""
    if not isinstance(text, str):
        return 0
    match = _INT_RE.search(text)
    return int(match.group()) if match else 0


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_comment_count(text: Any) -> int:
    """Best-effort comment count from the last subtext link.

    ``"42\xa0comments"`` gives 42; ``"discuss"``, ``"hide"`` or nothing gives 0.
    """
    if not isinstance(text, str):
        return 0
    match = _COMMENTS_RE.search(text.replace("\xa0", " "))
    return int(match.group(1)) if match else 0


def parse_row(raw: dict[str, Any], base_url: str = HACKER_NEWS_URL) -> Article:
    """Turn one raw row record into an Article.

    Missing or unparsable fields fall back to ``""`` or ``0``. Relative links
    (``item?id=...`` for Ask/Show HN posts) are resolved against ``base_url``.
    """
    href = _text(raw.get("href"))
    posted_at = raw.get("postedAt")
    return Article(
        rank=_first_int(raw.get("rank")),
        title=_text(raw.get("title")),
        url=urljoin(base_url, href) if href else "",
        points=_first_int(raw.get("score")),
        author=_text(raw.get("author")),
        comment_count=parse_comment_count(raw.get("comments")),
        posted_at=posted_at if isinstance(posted_at, str) else "",
    )


def parse_rows(
    rows: Iterable[Any], base_url: str = HACKER_NEWS_URL
) -> list[Article]:
    """Parse raw row records in page order.

    Entries that are not objects at all are skipped with a warning.
    """
    articles: list[Article] = []
    for index, raw in enumerate(rows):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed row {index}: {raw!r}")
            continue
        articles.append(parse_row(raw, base_url))
    return articles
