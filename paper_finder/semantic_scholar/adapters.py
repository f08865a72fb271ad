"""Semantic Scholar provider implementing the paper search protocol."""

import logging

from pydantic import ValidationError

from ..paper_sources.base import HttpProviderClient
from ..paper_sources.models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, normalize_date, today_iso
from ..rate_limit import RateLimiter
from ..settings import SEMANTIC_SCHOLAR_BASE_URL, SEMANTIC_SCHOLAR_REQUESTS_PER_SECOND
from .models import PaperSearchResult, SearchResponse

logger = logging.getLogger(__name__)

SEARCH_FIELDS = [
    "paperId",
    "title",
    "abstract",
    "authors",
    "year",
    "publicationDate",
    "citationCount",
    "url",
    "externalIds",
]


class SemanticScholarProvider(HttpProviderClient):
    """
    Provider for the Semantic Scholar Graph API.

    Queried anonymously, so requests share the public rate limit; a
    client-side limiter spaces attempts out. This is the only provider with
    real citation counts.

    Usage:
        async with SemanticScholarProvider(cache=cache) as provider:
            papers = await provider.search("large language models reasoning")
    """

    name = "semantic_scholar"
    source = "Semantic Scholar"

    def __init__(
        self,
        *,
        base_url: str = SEMANTIC_SCHOLAR_BASE_URL,
        requests_per_second: float = SEMANTIC_SCHOLAR_REQUESTS_PER_SECOND,
        **kwargs,
    ):
        """
        Initialize the Semantic Scholar provider.

        Args:
            base_url: Graph API base URL
            requests_per_second: Client-side request rate (0 disables limiting)
            **kwargs: Passed to HttpProviderClient
        """
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = RateLimiter.per_second(requests_per_second)

    async def _before_request(self) -> None:
        await self.rate_limiter.acquire()

    async def _fetch(self, term: str) -> list[Paper]:
        params = {
            "query": term,
            "fields": ",".join(SEARCH_FIELDS),
            "limit": min(self._max_results, 100),  # API max is 100 per request
            "offset": 0,
        }

        logger.debug(f"Searching papers: query='{term}', limit={params['limit']}")
        data = await self._get_json(f"{self.base_url}/paper/search", params)
        response = SearchResponse.model_validate(data)

        logger.debug(f"Search returned {len(response.data)} papers (total available: {response.total})")

        papers: list[Paper] = []
        for result in response.data:
            try:
                papers.append(self._to_paper(result))
            except ValidationError as e:
                logger.debug(f"Skipping Semantic Scholar paper {result.paper_id}: {e}")
        return papers

    def _to_paper(self, result: PaperSearchResult) -> Paper:
        """Convert a search result to the canonical Paper."""
        authors = [a.name for a in result.authors if a.name]
        published = normalize_date(result.publication_date) or normalize_date(result.year)

        return Paper(
            title=result.title or "",
            abstract=result.abstract or NO_ABSTRACT,
            authors=authors or [UNKNOWN_AUTHOR],
            published_date=published or today_iso(),
            url=result.url or f"https://www.semanticscholar.org/paper/{result.paper_id}",
            source=self.source,
            citations=max(result.citation_count or 0, 0),
            relevance_score=self._prior(),
        )
