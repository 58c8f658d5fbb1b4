"""
Data models for the feed engine.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Article(BaseModel):
    """A normalized entry extracted from a feed."""

    title: str = Field(..., description="Article title")
    link: str = Field(..., description="Article URL")
    description: str = Field("", description="Short description or summary")
    publish_date: datetime = Field(..., description="Publication date/time (UTC)")
    content: str = Field("", description="Full content, falling back to the description")

    class Config:
        frozen = True


class FetchOutcome(BaseModel):
    """Result of fetching one feed source inside a batch."""

    source_url: str
    articles: list[Article] = Field(default_factory=list)
    succeeded: bool = False

    class Config:
        frozen = True

    @classmethod
    def from_articles(cls, source_url: str, articles: list[Article]) -> "FetchOutcome":
        # An empty list is the failure signal; a feed with no usable items looks the same.
        return cls(source_url=source_url, articles=articles, succeeded=bool(articles))


class AggregationReport(BaseModel):
    """Per-source outcomes of a batch fetch, in completion order."""

    outcomes: list[FetchOutcome]
    success_count: int
    fail_count: int
    duration_seconds: float = 0.0

    @classmethod
    def from_outcomes(cls, outcomes: list[FetchOutcome], duration_seconds: float = 0.0) -> "AggregationReport":
        fail_count = sum(1 for outcome in outcomes if not outcome.articles)
        return cls(
            outcomes=outcomes,
            success_count=len(outcomes) - fail_count,
            fail_count=fail_count,
            duration_seconds=duration_seconds,
        )
