"""Pydantic models for scraped Hacker News data.

Models serialize with camelCase aliases, which is the JSON shape written by
the CLI. Python code uses the snake_case field names.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Article(_CamelModel):
    """One entry of the front-page listing.

    Attributes:
        rank: 1-based position on the page, 0 if the rank was unreadable.
        title: Link text, may be empty.
        url: Absolute URL of the story (site-relative links are resolved).
        points: Score, 0 when the row has none (e.g. job posts).
        author: Submitter, empty when the row has none.
        comment_count: Number of comments, 0 when absent or unparsable.
        posted_at: ``title`` attribute of the age element, empty if absent.
    """

    rank: int = Field(ge=0)
    title: str = ""
    url: str = ""
    points: int = Field(default=0, ge=0)
    author: str = ""
    comment_count: int = Field(default=0, ge=0)
    posted_at: str = ""


class ScrapeResult(_CamelModel):
    """The bounded, timestamped outcome of one scrape.

    ``article_count`` is derived from ``articles`` so the two cannot disagree.
    """

    scraped_at: datetime
    source: str
    articles: list[Article] = Field(default_factory=list)

    @computed_field(alias="articleCount")  # type: ignore[prop-decorator]
    @property
    def article_count(self) -> int:
        return len(self.articles)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to the camelCase JSON document."""
        return self.model_dump_json(by_alias=True, indent=indent)
