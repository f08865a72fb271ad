"""Low-level arXiv API client with rate limiting."""

import asyncio
import logging

import arxiv

from ..rate_limit import RateLimiter
from ..retry import RetryExecutor
from ..settings import ARXIV_RATE_LIMIT_SECONDS

logger = logging.getLogger(__name__)


class ArXivClient:
    """Async wrapper around the arxiv Python library.

    The library call is blocking, so it runs in a worker thread. Each attempt
    takes a rate-limit slot and the whole request is retried with backoff;
    the library's own retries are disabled.
    """

    def __init__(
        self,
        rate_limit_seconds: float = ARXIV_RATE_LIMIT_SECONDS,
        retry: RetryExecutor | None = None,
    ):
        """
        Initialize arXiv client.

        Args:
            rate_limit_seconds: Minimum seconds between requests (3.0 per arXiv guidelines)
            retry: Retry policy wrapped around each search
        """
        self._rate_limiter = RateLimiter(rate_limit_seconds)
        self._retry = retry or RetryExecutor()
        self._client = arxiv.Client(
            page_size=100,
            delay_seconds=0,  # We handle rate limiting ourselves
            num_retries=0,
        )

    async def search(
        self,
        query: str,
        max_results: int = 10,
        sort_by: arxiv.SortCriterion = arxiv.SortCriterion.SubmittedDate,
        sort_order: arxiv.SortOrder = arxiv.SortOrder.Descending,
    ) -> list[arxiv.Result]:
        """
        Search arXiv for papers matching query.

        Args:
            query: Search query (supports arXiv query syntax, e.g. "all:graph neural")
            max_results: Maximum results to return
            sort_by: Sort criterion (Relevance, LastUpdatedDate, SubmittedDate)
            sort_order: Sort order (Ascending, Descending)

        Returns:
            List of arxiv.Result objects
        """
        search = arxiv.Search(
            query=query,
            max_results=max_results,
            sort_by=sort_by,
            sort_order=sort_order,
        )

        async def attempt() -> list[arxiv.Result]:
            await self._rate_limiter.acquire()
            # Run in thread pool since arxiv.py is synchronous
            return await asyncio.to_thread(lambda: list(self._client.results(search)))

        results = await self._retry.run(attempt)

        logger.debug(f"arXiv search '{query}' returned {len(results)} results")
        return results
