"""Tests for the article digest."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from feed_engine.models import Article
from feed_engine.service import (
    NO_ARTICLES_MESSAGE,
    NO_SOURCES_MESSAGE,
    build_digest,
    format_digest,
    select_articles,
)

NOW = datetime(2025, 10, 8, 15, 0, tzinfo=timezone.utc)


def make_article(title: str, published: datetime, description: str = "") -> Article:
    return Article(title=title, link=f"https://d.example.com/{title}", description=description, publish_date=published)


@pytest.fixture
def articles() -> list[Article]:
    return [
        make_article("today-late", datetime(2025, 10, 8, 14, 0, tzinfo=timezone.utc), "late"),
        make_article("today-early", datetime(2025, 10, 8, 0, 0, tzinfo=timezone.utc), "early"),
        make_article("yesterday", datetime(2025, 10, 7, 23, 59, tzinfo=timezone.utc), "old"),
    ]


def test_select_latest_applies_limit(articles):
    """Test that 'latest' keeps order and truncates to the limit."""
    assert [a.title for a in select_articles(articles, limit=2)] == ["today-late", "today-early"]


def test_select_today_filters_before_midnight(articles):
    """Test that 'today' drops articles published before midnight."""
    selected = select_articles(articles, limit=10, range="today", now=NOW, tz=timezone.utc)
    assert [a.title for a in selected] == ["today-late", "today-early"]


def test_select_today_uses_the_given_timezone_midnight(articles):
    """Test that the day starts at midnight of the requested timezone."""
    eastern = timezone(timedelta(hours=-5))
    selected = select_articles(articles, limit=10, range="today", now=NOW, tz=eastern)
    assert [a.title for a in selected] == ["today-late"]


def test_select_today_defaults_to_local_midnight(articles):
    """Test that without a timezone the local midnight is used."""
    local_start = NOW.astimezone().replace(hour=0, minute=0, second=0, microsecond=0)
    expected = [a.title for a in articles if a.publish_date >= local_start]

    selected = select_articles(articles, limit=10, range="today", now=NOW)
    assert [a.title for a in selected] == expected


def test_select_rejects_unknown_range(articles):
    """Test that an unknown range is an error."""
    with pytest.raises(ValueError):
        select_articles(articles, range="weekly")


def test_format_digest_numbers_entries(articles):
    """Test the numbered title/description layout."""
    text = format_digest(articles[:2])
    assert text == "[1] today-late\nlate\n\n[2] today-early\nearly"


def test_format_digest_truncates_description():
    """Test that descriptions are cut to the snippet length."""
    article = make_article("long", NOW, "x" * 500)
    assert format_digest([article], snippet_length=200) == "[1] long\n" + "x" * 200


def test_format_digest_empty():
    """Test the placeholder for an empty digest."""
    assert format_digest([]) == NO_ARTICLES_MESSAGE


def test_build_digest_without_sources():
    """Test that no sources short-circuits without fetching."""
    aggregator = MagicMock()
    aggregator.fetch_multiple = AsyncMock()

    assert asyncio.run(build_digest([], aggregator=aggregator)) == NO_SOURCES_MESSAGE
    aggregator.fetch_multiple.assert_not_called()


def test_build_digest_fetches_and_formats(articles):
    """Test that the digest is built from the aggregated articles."""
    aggregator = MagicMock()
    aggregator.fetch_multiple = AsyncMock(return_value=articles)

    text = asyncio.run(build_digest(["https://a.example.com/rss"], limit=1, aggregator=aggregator))

    aggregator.fetch_multiple.assert_awaited_once_with(["https://a.example.com/rss"])
    assert text == "[1] today-late\nlate"


def test_build_digest_with_no_articles():
    """Test the placeholder when every source comes back empty."""
    aggregator = MagicMock()
    aggregator.fetch_multiple = AsyncMock(return_value=[])

    assert asyncio.run(build_digest(["https://a.example.com/rss"], aggregator=aggregator)) == NO_ARTICLES_MESSAGE
