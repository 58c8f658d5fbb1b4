"""Shared fixtures for tests."""

import httpx
import pytest

from tests.feeds import FeedServer


@pytest.fixture
def feed_server() -> FeedServer:
    return FeedServer()


@pytest.fixture
def transport(feed_server: FeedServer) -> httpx.MockTransport:
    return httpx.MockTransport(feed_server.handle)
