"""
Configuration settings for the feed engine.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True

    # CORS
    cors_origins: list[str] = ["http://localhost:8080", "http://127.0.0.1:8080"]

    # Feed fetching
    fetch_timeout: float = 10.0  # seconds, per feed
    user_agent: str = "PodcastFeedEngine/1.0"

    # Digest
    digest_limit: int = 10
    digest_snippet_length: int = 200

    class Config:
        env_prefix = "FEED_"


# Default feed sources grouped by topic
PRESET_FEEDS: dict[str, list[str]] = {
    "swift": [
        "https://www.swift.org/blog/rss.xml",
        "https://nshipster.com/feed.xml",
        "https://www.avanderlee.com/feed/",
    ],
    "ai": [
        "https://openai.com/blog/rss/",
        "https://www.anthropic.com/rss.xml",
    ],
    "tech-news": [
        "https://techcrunch.com/feed/",
        "https://www.theverge.com/rss/index.xml",
        "https://36kr.com/feed",
    ],
    "design": [
        "https://www.smashingmagazine.com/feed/",
        "https://www.nngroup.com/feed/rss/",
    ],
}


settings = Settings()
