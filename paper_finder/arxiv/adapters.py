"""arXiv provider implementing the paper search protocol."""

import logging
import re

import arxiv
from pydantic import ValidationError

from ..paper_sources.base import BaseProviderClient
from ..paper_sources.models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, normalize_date, today_iso
from ..settings import ARXIV_RATE_LIMIT_SECONDS
from .client import ArXivClient

logger = logging.getLogger(__name__)

_VERSION_SUFFIX = re.compile(r"v\d+$")


def _extract_arxiv_id(entry_id: str) -> str:
    """Extract clean arXiv ID from entry URL.

    Example: "http://arxiv.org/abs/2301.00001v1" -> "2301.00001"
    """
    id_part = entry_id.split("/abs/")[-1]
    return _VERSION_SUFFIX.sub("", id_part)


class ArXivProvider(BaseProviderClient):
    """
    Provider for the arXiv Atom feed.

    arXiv has no citation counts, so every paper reports 0 citations.

    Usage:
        async with ArXivProvider(cache=cache) as provider:
            papers = await provider.search("transformer attention")
    """

    name = "arxiv"
    source = "arXiv"

    def __init__(
        self,
        *,
        rate_limit_seconds: float = ARXIV_RATE_LIMIT_SECONDS,
        client: ArXivClient | None = None,
        **kwargs,
    ):
        """
        Initialize arXiv provider.

        Args:
            rate_limit_seconds: Minimum seconds between requests (default: 3.0)
            client: Optional preconfigured ArXivClient
            **kwargs: Passed to BaseProviderClient (cache, retry, max_results, rng)
        """
        super().__init__(**kwargs)
        self._client = client or ArXivClient(
            rate_limit_seconds=rate_limit_seconds,
            retry=self._retry,
        )

    async def _fetch(self, term: str) -> list[Paper]:
        results = await self._client.search(
            query=f"all:{term}",
            max_results=self._max_results,
        )

        papers: list[Paper] = []
        for result in results:
            try:
                papers.append(self._to_paper(result))
            except ValidationError as e:
                logger.warning(f"Skipping unparseable arXiv entry {result.entry_id}: {e}")
        return papers

    def _to_paper(self, result: arxiv.Result) -> Paper:
        """Convert arxiv.Result to the canonical Paper."""
        arxiv_id = _extract_arxiv_id(result.entry_id)
        authors = [author.name for author in result.authors if author.name]

        return Paper(
            title=result.title or "",
            abstract=(result.summary or "").strip() or NO_ABSTRACT,
            authors=authors or [UNKNOWN_AUTHOR],
            published_date=normalize_date(result.published) or today_iso(),
            url=f"https://arxiv.org/abs/{arxiv_id}" if arxiv_id else "",
            source=self.source,
            citations=0,
            relevance_score=self._prior(),
        )
