"""
Article digest built from aggregated feeds.

The digest is the numbered article summary handed to the podcast script
generator as source material.
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Sequence

from feed_engine.aggregator import FeedAggregator, aggregator as default_aggregator
from feed_engine.config import settings
from feed_engine.models import Article

logger = logging.getLogger(__name__)

NO_SOURCES_MESSAGE = "(no feed sources available)"
NO_ARTICLES_MESSAGE = "(no recent articles)"

RANGES = ("latest", "today")


def select_articles(
    articles: list[Article],
    limit: int = 10,
    range: str = "latest",
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[Article]:
    """
    Pick the articles that go into a digest.

    Args:
        articles: Articles, newest first
        limit: Maximum number of articles to keep
        range: 'latest' keeps everything, 'today' keeps articles since midnight
        now: Reference time for 'today'
        tz: Timezone whose midnight starts the day, defaults to local time

    Returns:
        At most `limit` articles, in input order
    """
    if range not in RANGES:
        raise ValueError(f"Unknown range: {range!r}")

    if range == "today":
        now = now or datetime.now(timezone.utc)
        start_of_day = now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
        articles = [a for a in articles if a.publish_date >= start_of_day]

    return articles[: max(limit, 0)]


def format_digest(articles: list[Article], snippet_length: int | None = None) -> str:
    """Render articles as numbered title/description blocks."""
    if not articles:
        return NO_ARTICLES_MESSAGE

    if snippet_length is None:
        snippet_length = settings.digest_snippet_length

    return "\n\n".join(
        f"[{index}] {article.title}\n{article.description[:snippet_length]}"
        for index, article in enumerate(articles, start=1)
    )


async def build_digest(
    urls: Sequence[str],
    limit: int | None = None,
    range: str = "latest",
    aggregator: FeedAggregator | None = None,
) -> str:
    """
    Fetch the given feeds and render a digest of their newest articles.

    Args:
        urls: Feed source URLs
        limit: Maximum number of articles, defaults to settings.digest_limit
        range: 'latest' or 'today'
        aggregator: Aggregator to fetch with, defaults to the global instance

    Returns:
        Digest text
    """
    if not urls:
        return NO_SOURCES_MESSAGE

    if range not in RANGES:
        raise ValueError(f"Unknown range: {range!r}")

    aggregator = aggregator or default_aggregator
    articles = await aggregator.fetch_multiple(urls)
    selected = select_articles(articles, limit=settings.digest_limit if limit is None else limit, range=range)

    logger.info(f"Digest built from {len(selected)} of {len(articles)} articles")
    return format_digest(selected)
