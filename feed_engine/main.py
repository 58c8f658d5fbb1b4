"""
FastAPI application for the feed engine.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from feed_engine.aggregator import FeedAggregator, aggregator
from feed_engine.config import PRESET_FEEDS, settings
from feed_engine.errors import FetchError, FetchTimeout, InvalidURL
from feed_engine.models import Article
from feed_engine.service import RANGES, build_digest

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class SourcesRequest(BaseModel):
    """Batch request body."""

    urls: list[str] = Field(default_factory=list, description="Feed source URLs")


class FeedRequest(BaseModel):
    """Single-source request body."""

    url: str = Field(..., description="Feed source URL")
    retries: int = Field(0, description="Accepted but not used")


class DigestRequest(SourcesRequest):
    """Digest request body."""

    limit: int = Field(settings.digest_limit, ge=0, description="Maximum number of articles")
    range: str = Field("latest", description="'latest' or 'today'")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting feed engine")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Feed Engine API",
    description="RSS, Atom and JSON Feed aggregation API",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_aggregator() -> FeedAggregator:
    """Aggregator used by the endpoints."""
    return aggregator


def article_to_json(article: Article) -> dict:
    return {
        "title": article.title,
        "link": article.link,
        "description": article.description,
        "publishDate": article.publish_date.isoformat(),
        "content": article.content,
    }


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    """Map single-source fetch errors to HTTP responses."""
    if isinstance(exc, InvalidURL):
        status_code = 422
    elif isinstance(exc, FetchTimeout):
        status_code = 504
    else:
        status_code = 502

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "url": exc.url, "reason": exc.reason},
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Feed engine is running"}


@app.get("/api/presets")
async def list_presets():
    """Get preset feed sources by topic."""
    return {"presets": PRESET_FEEDS}


@app.post("/api/articles")
async def merged_articles(body: SourcesRequest, feeds: FeedAggregator = Depends(get_aggregator)):
    """
    Fetch all sources and return their articles merged, newest first.

    Sources that fail contribute nothing; the request itself never fails because of them.
    """
    articles = await feeds.fetch_multiple(body.urls)
    return JSONResponse(
        content={
            "articles": [article_to_json(a) for a in articles],
            "totalCount": len(articles),
        }
    )


@app.post("/api/outcomes")
async def source_outcomes(body: SourcesRequest, feeds: FeedAggregator = Depends(get_aggregator)):
    """Fetch all sources and report one outcome per source, in completion order."""
    report = await feeds.fetch_multiple_with_details(body.urls)
    return JSONResponse(
        content={
            "outcomes": [
                {
                    "sourceUrl": outcome.source_url,
                    "succeeded": outcome.succeeded,
                    "articles": [article_to_json(a) for a in outcome.articles],
                }
                for outcome in report.outcomes
            ],
            "successCount": report.success_count,
            "failCount": report.fail_count,
            "durationSeconds": report.duration_seconds,
        }
    )


@app.post("/api/feed")
async def single_feed(body: FeedRequest, feeds: FeedAggregator = Depends(get_aggregator)):
    """Fetch one source. Failures are returned as error responses."""
    articles = await feeds.fetch(body.url, retries=body.retries)
    return {"articles": [article_to_json(a) for a in articles], "totalCount": len(articles)}


@app.post("/api/digest")
async def digest(body: DigestRequest, feeds: FeedAggregator = Depends(get_aggregator)):
    """Build a numbered digest of the newest articles."""
    if body.range not in RANGES:
        return JSONResponse(status_code=422, content={"error": "invalid_range", "reason": body.range})

    text = await build_digest(body.urls, limit=body.limit, range=body.range, aggregator=feeds)
    return {"digest": text}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feed_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
