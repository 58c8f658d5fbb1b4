#!/usr/bin/env python3
"""
Script to fetch feeds and print the merged article list as JSON.

Usage:
    python scripts/fetch_feeds.py [URL ...] [--output articles.json]

Without URLs, every preset feed is fetched.
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from feed_engine.aggregator import FeedAggregator, sort_articles
from feed_engine.config import PRESET_FEEDS, settings


def print_progress(completed: int, total: int) -> None:
    print(f"  [{completed}/{total}] sources settled", file=sys.stderr)


async def main(urls: list[str], output: Path | None) -> int:
    """Fetch the feeds, report per-source results and write the articles."""
    if not urls:
        urls = [url for feeds in PRESET_FEEDS.values() for url in feeds]

    print("Starting feed fetch...", file=sys.stderr)
    print(f"Sources: {len(urls)}, timeout: {settings.fetch_timeout:g}s", file=sys.stderr)

    report = await FeedAggregator().fetch_multiple_with_details(urls, on_progress=print_progress)

    print(file=sys.stderr)
    for outcome in report.outcomes:
        if outcome.succeeded:
            print(f"OK     {outcome.source_url} ({len(outcome.articles)} articles)", file=sys.stderr)
        else:
            print(f"FAILED {outcome.source_url}", file=sys.stderr)

    articles = sort_articles([a for outcome in report.outcomes for a in outcome.articles])

    data = {
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
        "articles": [
            {
                "title": a.title,
                "link": a.link,
                "description": a.description,
                "publishDate": a.publish_date.isoformat(),
                "content": a.content,
            }
            for a in articles
        ],
    }

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        print(f"Written {len(articles)} articles to {output}", file=sys.stderr)
    else:
        json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
        print()

    # Summary
    print(file=sys.stderr)
    print("=== Summary ===", file=sys.stderr)
    print(f"Feeds: {report.success_count} successful, {report.fail_count} failed", file=sys.stderr)
    print(f"Articles: {len(articles)} in {report.duration_seconds:.2f}s", file=sys.stderr)

    return 0 if report.success_count else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Fetch RSS, Atom and JSON feeds")
    parser.add_argument("urls", nargs="*", help="Feed source URLs (defaults to the preset feeds)")
    parser.add_argument("--output", type=Path, help="Write JSON here instead of stdout")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.urls, args.output)))
