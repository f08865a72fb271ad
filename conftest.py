"""Shared fixtures for the paper finder tests."""

import random

import httpx
import pytest

from paper_finder.cache import TTLCache
from paper_finder.paper_sources.models import Paper
from paper_finder.retry import RetryExecutor


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_paper(title: str = "A Paper", **overrides) -> Paper:
    fields = {
        "title": title,
        "abstract": "An abstract.",
        "authors": ["Ada Lovelace"],
        "published_date": "2023-01-01",
        "url": "https://example.org/paper",
        "source": "Test",
        "citations": 0,
        "relevance_score": 0.5,
    }
    fields.update(overrides)
    return Paper(**fields)


def json_transport(routes: dict[str, object], calls: list[httpx.Request] | None = None):
    """MockTransport answering by URL path fragment; values are JSON bodies, str bodies or status codes."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        for suffix, body in routes.items():
            if suffix in request.url.path:
                if isinstance(body, int):
                    return httpx.Response(body)
                if isinstance(body, str):
                    return httpx.Response(200, text=body)
                return httpx.Response(200, json=body)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(max_entries=100, ttl_seconds=60, clock=clock)


@pytest.fixture
def retry(sleep) -> RetryExecutor:
    return RetryExecutor(max_attempts=3, base_delay=0.01, sleep=sleep)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)
