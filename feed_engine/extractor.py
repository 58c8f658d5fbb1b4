"""
Feed document parsing and article extraction.

Raw feed bytes are classified into one of three document shapes (RSS, Atom,
JSON Feed) and each shape is normalized into Article records. Entries missing
a required field are dropped; extraction itself never raises.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import feedparser
from dateutil import parser as date_parser

from feed_engine.errors import ParseFailure
from feed_engine.models import Article

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RssDocument:
    """RSS 0.9x/1.0/2.0 channel with its items."""

    entries: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class AtomDocument:
    """Atom feed with its entries."""

    entries: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class JsonFeedDocument:
    """JSON Feed with its items."""

    items: list[Any] = field(default_factory=list)


FeedDocument = RssDocument | AtomDocument | JsonFeedDocument


def parse_document(body: bytes, content_type: str | None = None, source: str = "") -> FeedDocument:
    """
    Classify a raw feed body into one of the supported document shapes.

    Args:
        body: Raw response body
        content_type: Content-Type header of the response, if known
        source: Source URL, only used in error messages

    Returns:
        RssDocument, AtomDocument or JsonFeedDocument

    Raises:
        ParseFailure: If the body is not a supported feed
    """
    if _looks_like_json(body, content_type):
        return _parse_json_feed(body, source)

    headers = {"content-type": content_type} if content_type else None
    feed = feedparser.parse(body, response_headers=headers)
    version = feed.get("version") or ""

    if version.startswith("rss"):
        return RssDocument(entries=list(feed.entries))
    if version.startswith("atom"):
        return AtomDocument(entries=list(feed.entries))

    if feed.bozo:
        raise ParseFailure(source, f"Failed to parse feed: {feed.get('bozo_exception')}")
    raise ParseFailure(source, "Unrecognized feed format")


def _looks_like_json(body: bytes, content_type: str | None) -> bool:
    if content_type and "json" in content_type.lower():
        return True
    return body.lstrip(b"\xef\xbb\xbf \t\r\n")[:1] == b"{"


def _parse_json_feed(body: bytes, source: str) -> JsonFeedDocument:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ParseFailure(source, f"Invalid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise ParseFailure(source, "Not a JSON Feed document")

    return JsonFeedDocument(items=data["items"])


def extract_articles(document: FeedDocument, now: datetime | None = None) -> list[Article]:
    """
    Normalize a feed document into articles, in document order.

    Args:
        document: Parsed feed document
        now: Clock value used as the publication date of JSON Feed items

    Returns:
        List of articles; malformed entries are skipped
    """
    if isinstance(document, RssDocument):
        candidates = [_rss_article(entry) for entry in document.entries]
    elif isinstance(document, AtomDocument):
        candidates = [_atom_article(entry) for entry in document.entries]
    elif isinstance(document, JsonFeedDocument):
        clock = now or datetime.now(timezone.utc)
        candidates = [_json_feed_article(item, clock) for item in document.items]
    else:
        raise TypeError(f"Unsupported feed document: {type(document).__name__}")

    return [article for article in candidates if article is not None]


def _rss_article(entry: dict) -> Article | None:
    try:
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        published = _entry_date(entry, "published")

        if not title or not link or not published:
            return None

        # feedparser copies content:encoded into summary without summary_detail when <description> is absent.
        description = (entry.get("summary") or "") if entry.get("summary_detail") else ""
        return Article(
            title=title,
            link=link,
            description=description,
            publish_date=published,
            content=_first_content(entry) or description,
        )

    except Exception as e:
        logger.debug(f"Failed to parse RSS item: {e}")
        return None


def _atom_article(entry: dict) -> Article | None:
    try:
        title = (entry.get("title") or "").strip()
        links = entry.get("links") or []
        link = (links[0].get("href") or "").strip() if links else ""
        updated = _entry_date(entry, "updated")

        if not title or not link or not updated:
            return None

        summary = entry.get("summary") or ""
        return Article(
            title=title,
            link=link,
            description=summary,
            publish_date=updated,
            content=_first_content(entry) or summary,
        )

    except Exception as e:
        logger.debug(f"Failed to parse Atom entry: {e}")
        return None


def _json_feed_article(item: Any, clock: datetime) -> Article | None:
    try:
        if not isinstance(item, dict):
            return None

        title = item.get("title")
        url = item.get("url")
        if not isinstance(title, str) or not title.strip():
            return None
        if not isinstance(url, str) or not url.strip():
            return None

        summary = item.get("summary") or ""
        # Always the extraction time; date_published is never read.
        return Article(
            title=title.strip(),
            link=url.strip(),
            description=summary,
            publish_date=clock,
            content=item.get("content_html") or item.get("content_text") or summary,
        )

    except Exception as e:
        logger.debug(f"Failed to parse JSON Feed item: {e}")
        return None


def _first_content(entry: dict) -> str:
    contents = entry.get("content") or []
    if contents:
        return contents[0].get("value") or ""
    return ""


def _entry_date(entry: dict, name: str) -> datetime | None:
    """Read a feedparser date field, falling back to parsing the raw string."""
    parsed = entry.get(f"{name}_parsed")
    if parsed:
        try:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            pass

    raw = entry.get(name)
    if raw:
        try:
            value = date_parser.parse(raw)
        except (ValueError, TypeError, OverflowError):
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    return None
