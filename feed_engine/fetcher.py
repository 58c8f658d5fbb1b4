"""
Single feed fetcher for the feed engine.
"""

import asyncio
import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

import httpx

from feed_engine.config import settings
from feed_engine.errors import FetchTimeout, InvalidURL, NetworkError, ParseFailure
from feed_engine.extractor import extract_articles, parse_document
from feed_engine.models import Article
from feed_engine.race import race

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """
    Check that a source URL is an absolute http(s) URL.

    Raises:
        InvalidURL: If the URL is malformed
    """
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
        parsed.port  # raises ValueError when out of range
        httpx.URL(candidate)
    except (ValueError, httpx.InvalidURL) as e:
        raise InvalidURL(url, str(e)) from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname or " " in candidate:
        raise InvalidURL(url)
    return candidate


class FeedFetcher:
    """Fetches one feed and races it against a timeout."""

    def __init__(self, client: httpx.AsyncClient, timeout: float | None = None):
        self.client = client
        self.timeout = settings.fetch_timeout if timeout is None else timeout

    async def fetch(self, url: str, retries: int = 0) -> list[Article]:
        """
        Fetch, parse and extract a single feed.

        Args:
            url: Feed source URL
            retries: Accepted for compatibility; no retry is ever attempted

        Returns:
            Articles in document order

        Raises:
            InvalidURL: Before any I/O, if the URL is malformed
            NetworkError: If the request fails or returns an error status
            ParseFailure: If the body is not a supported feed
            FetchTimeout: If the fetch does not settle within the time budget
        """
        feed_url = validate_url(url)
        articles = await race(self._retrieve(feed_url), self._expire(feed_url))
        logger.info(f"Fetched {len(articles)} articles from {feed_url}")
        return articles

    async def _retrieve(self, url: str) -> list[Article]:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.InvalidURL as e:
            raise InvalidURL(url, str(e)) from e
        except httpx.HTTPStatusError as e:
            raise NetworkError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise NetworkError(url, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise NetworkError(url, str(e)) from e

        body = response.content
        content_type = response.headers.get("content-type")
        loop = asyncio.get_running_loop()
        # A parse already running in the worker thread is not interrupted by a timeout; its result is dropped.
        return await loop.run_in_executor(None, self._parse, url, body, content_type)

    @staticmethod
    def _parse(url: str, body: bytes, content_type: str | None) -> list[Article]:
        try:
            document = parse_document(body, content_type, source=url)
        except ParseFailure:
            raise
        except Exception as e:
            raise ParseFailure(url, str(e)) from e
        return extract_articles(document, now=datetime.now(timezone.utc))

    async def _expire(self, url: str) -> list[Article]:
        await asyncio.sleep(self.timeout)
        raise FetchTimeout(url, f"no result after {self.timeout:g}s")
