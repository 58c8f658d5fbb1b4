"""
Concurrent aggregation of many feed sources.
"""

import asyncio
import logging
import time
from typing import Callable, Sequence

import httpx

from feed_engine.config import settings
from feed_engine.errors import FetchError
from feed_engine.fetcher import FeedFetcher
from feed_engine.models import AggregationReport, Article, FetchOutcome

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class FeedAggregator:
    """Fans out one fetch per feed source and joins the results."""

    def __init__(self, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = settings.fetch_timeout if timeout is None else timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        # The race in FeedFetcher owns the time budget, so the client itself has none.
        return httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            follow_redirects=True,
            timeout=None,
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=None),
            transport=self.transport,
        )

    async def fetch(self, url: str, retries: int = 0) -> list[Article]:
        """
        Fetch a single feed source.

        Unlike the batch operations, failures are raised as FetchError.
        """
        async with self._client() as client:
            return await FeedFetcher(client, self.timeout).fetch(url, retries=retries)

    async def fetch_multiple(
        self,
        urls: Sequence[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[Article]:
        """
        Fetch all sources concurrently and merge their articles.

        Args:
            urls: Feed source URLs
            on_progress: Called with (completed, total) as each source settles

        Returns:
            Articles from every source, newest first
        """
        outcomes = await self._gather(urls, on_progress)

        all_articles: list[Article] = []
        for outcome in outcomes:
            all_articles.extend(outcome.articles)

        return sort_articles(all_articles)

    async def fetch_multiple_with_details(
        self,
        urls: Sequence[str],
        on_progress: ProgressCallback | None = None,
    ) -> AggregationReport:
        """
        Fetch all sources concurrently and report one outcome per source.

        Args:
            urls: Feed source URLs
            on_progress: Called with (completed, total) as each source settles

        Returns:
            AggregationReport with outcomes in completion order
        """
        start_time = time.time()
        outcomes = await self._gather(urls, on_progress)
        report = AggregationReport.from_outcomes(outcomes, duration_seconds=time.time() - start_time)

        logger.info(
            f"Aggregation complete: {report.success_count} succeeded, {report.fail_count} failed, "
            f"{report.duration_seconds:.2f}s"
        )
        return report

    async def _gather(self, urls: Sequence[str], on_progress: ProgressCallback | None) -> list[FetchOutcome]:
        total = len(urls)
        if not total:
            return []

        outcomes: list[FetchOutcome] = []
        async with self._client() as client:
            fetcher = FeedFetcher(client, self.timeout)
            tasks = [asyncio.create_task(self._fetch_outcome(fetcher, url)) for url in urls]
            try:
                # This loop is the only writer of the completion count.
                for completed, next_done in enumerate(asyncio.as_completed(tasks), start=1):
                    outcomes.append(await next_done)
                    if on_progress is not None:
                        on_progress(completed, total)
            finally:
                for task in tasks:
                    if not task.done():
                        task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

        return outcomes

    @staticmethod
    async def _fetch_outcome(fetcher: FeedFetcher, url: str) -> FetchOutcome:
        try:
            articles = await fetcher.fetch(url)
        except FetchError as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            articles = []
        except Exception as e:
            logger.error(f"Unexpected error fetching {url}: {e}", exc_info=True)
            articles = []
        return FetchOutcome.from_articles(url, articles)


def sort_articles(articles: list[Article], descending: bool = True) -> list[Article]:
    """
    Sort articles by publication date.

    The sort is stable, so articles with equal dates keep their relative order.
    """
    return sorted(articles, key=lambda a: a.publish_date, reverse=descending)


# Global aggregator instance
aggregator = FeedAggregator()
