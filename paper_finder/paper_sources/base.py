"""Shared provider plumbing: caching, failure isolation and HTTP access."""

import logging
import random
import time
from typing import Any

import httpx

from ..cache import TTLCache
from ..errors import ProviderError
from ..retry import RetryExecutor
from ..settings import USER_AGENT
from .models import Paper, PriorTier, prior_score

logger = logging.getLogger(__name__)


class BaseProviderClient:
    """
    Base class for paper providers.

    Subclasses set ``name`` (also the ``source`` cache namespace) and implement
    ``_fetch(term)``, which may raise freely. ``search(term)`` wraps it with:
    - cache lookup and store under ``name:term``
    - conversion of any failure into a logged ProviderError and an empty list
    - truncation to ``max_results``

    Failed searches are not cached, so the next call retries the upstream.
    """

    name: str = "provider"
    tier: PriorTier = PriorTier.REAL

    def __init__(
        self,
        cache: TTLCache | None = None,
        retry: RetryExecutor | None = None,
        max_results: int = 10,
        rng: random.Random | None = None,
    ):
        """
        Initialize the provider.

        Args:
            cache: Shared result cache (None disables caching)
            retry: Retry policy for upstream calls
            max_results: Maximum papers returned per term
            rng: Random source for relevance priors
        """
        self._cache = cache
        self._retry = retry or RetryExecutor()
        self._max_results = max_results
        self._rng = rng or random.Random()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        pass

    async def _fetch(self, term: str) -> list[Paper]:
        raise NotImplementedError

    def _prior(self) -> float:
        return prior_score(self.tier, self._rng)

    async def search(self, term: str) -> list[Paper]:
        """Search the provider for one term. Never raises."""
        key = TTLCache.make_key(self.name, term)

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info(f"{self.name}: results for '{term[:50]}' retrieved from cache")
                return [paper.model_copy(deep=True) for paper in cached]

        start = time.perf_counter()
        try:
            papers = (await self._fetch(term))[: self._max_results]
        except Exception as e:
            error = e if isinstance(e, ProviderError) else ProviderError(self.name, str(e))
            logger.error(f"Search failed for '{term[:50]}': {error}")
            return []

        if self._cache is not None:
            self._cache.set(key, papers)

        elapsed = time.perf_counter() - start
        logger.info(f"{self.name}: {len(papers)} papers for '{term[:50]}' ({elapsed:.2f}s)")
        return [paper.model_copy(deep=True) for paper in papers]

    async def health_check(self) -> bool:
        """Query the upstream directly, bypassing the cache."""
        try:
            result = await self._fetch("test")
        except Exception as e:
            logger.warning(f"{self.name} health check failed: {e}")
            return False
        return isinstance(result, list)


class HttpProviderClient(BaseProviderClient):
    """
    Provider backed by an ``httpx.AsyncClient``.

    The client is created on ``__aenter__`` and closed on ``__aexit__`` unless
    one was injected, in which case its lifecycle belongs to the caller.
    Every GET goes through the retry policy and raises on non-2xx status.

    Usage:
        async with DOAJProvider(cache=cache) as provider:
            papers = await provider.search("open access")
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client: httpx.AsyncClient | None = http_client

    async def __aenter__(self):
        if self._owns_client and self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager."
            )
        return self._client

    async def _before_request(self) -> None:
        """Hook run before every attempt (e.g. to take a rate-limit slot)."""

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET with retry. Raises RetryExhausted if every attempt fails."""

        async def request() -> httpx.Response:
            await self._before_request()
            response = await self.client.get(
                url,
                params=params,
                headers={"User-Agent": USER_AGENT},
            )
            logger.debug(f"{self.name}: {response.status_code} from {url}")
            response.raise_for_status()
            return response

        return await self._retry.run(request)

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._get(url, params)
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(self.name, f"malformed JSON payload: {e}") from e
