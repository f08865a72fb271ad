"""CORE (core.ac.uk) provider, API v3."""

import logging

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..paper_sources.base import HttpProviderClient
from ..paper_sources.models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, normalize_date, today_iso
from ..settings import CORE_BASE_URL

logger = logging.getLogger(__name__)


class CoreAuthor(BaseModel):
    name: str | None = None


class CoreWork(BaseModel):
    """One entry of ``results`` from ``/search/works``."""

    id: int | str | None = None
    title: str | None = None
    abstract: str | None = None
    authors: list[CoreAuthor] = Field(default_factory=list)
    published_date: str | None = Field(None, alias="publishedDate")
    year_published: int | None = Field(None, alias="yearPublished")
    download_url: str | None = Field(None, alias="downloadUrl")
    citation_count: int | None = Field(None, alias="citationCount")

    model_config = {"populate_by_name": True}

    @field_validator("authors", mode="before")
    @classmethod
    def _coerce_authors(cls, value):
        # Older records list authors as bare strings
        if not isinstance(value, list):
            return []
        return [{"name": a} if isinstance(a, str) else a for a in value]


class CoreResponse(BaseModel):
    total_hits: int = Field(0, alias="totalHits")
    results: list[CoreWork] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class COREProvider(HttpProviderClient):
    """Provider for CORE open access aggregator search."""

    name = "core"
    source = "CORE"

    def __init__(self, *, base_url: str = CORE_BASE_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def _fetch(self, term: str) -> list[Paper]:
        data = await self._get_json(
            f"{self.base_url}/search/works",
            {"q": term, "limit": self._max_results},
        )
        response = CoreResponse.model_validate(data)

        papers: list[Paper] = []
        for work in response.results:
            try:
                papers.append(self._to_paper(work))
            except ValidationError as e:
                logger.debug(f"Skipping CORE work {work.id}: {e}")
        return papers

    def _to_paper(self, work: CoreWork) -> Paper:
        authors = [a.name.strip() for a in work.authors if a.name and a.name.strip()]
        published = normalize_date(work.published_date) or normalize_date(work.year_published)

        return Paper(
            title=work.title or "",
            abstract=work.abstract or NO_ABSTRACT,
            authors=authors or [UNKNOWN_AUTHOR],
            published_date=published or today_iso(),
            url=work.download_url or f"https://core.ac.uk/works/{work.id}",
            source=self.source,
            citations=max(work.citation_count or 0, 0),
            relevance_score=self._prior(),
        )
