"""DOAJ (Directory of Open Access Journals) provider."""

import logging
from urllib.parse import quote

from pydantic import BaseModel, Field, ValidationError

from ..paper_sources.base import HttpProviderClient
from ..paper_sources.models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, normalize_date, today_iso
from ..settings import DOAJ_BASE_URL

logger = logging.getLogger(__name__)


class DOAJAuthor(BaseModel):
    name: str | None = None


class DOAJLink(BaseModel):
    url: str | None = None
    type: str | None = None


class DOAJBibJson(BaseModel):
    title: str | None = None
    abstract: str | None = None
    author: list[DOAJAuthor] = Field(default_factory=list)
    year: str | int | None = None
    month: str | int | None = None
    link: list[DOAJLink] = Field(default_factory=list)


class DOAJArticle(BaseModel):
    id: str = ""
    bibjson: DOAJBibJson = Field(default_factory=DOAJBibJson)


class DOAJResponse(BaseModel):
    total: int = 0
    results: list[DOAJArticle] = Field(default_factory=list)


class DOAJProvider(HttpProviderClient):
    """Provider for the DOAJ article search API (no key required for search)."""

    name = "doaj"
    source = "DOAJ"

    def __init__(self, *, base_url: str = DOAJ_BASE_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def _fetch(self, term: str) -> list[Paper]:
        # The query is part of the path, not a parameter
        url = f"{self.base_url}/search/articles/{quote(term, safe='')}"
        data = await self._get_json(url, {"pageSize": self._max_results})
        response = DOAJResponse.model_validate(data)

        papers: list[Paper] = []
        for article in response.results:
            try:
                papers.append(self._to_paper(article))
            except ValidationError as e:
                logger.debug(f"Skipping DOAJ article {article.id or '?'}: {e}")
        return papers

    def _to_paper(self, article: DOAJArticle) -> Paper:
        bib = article.bibjson
        authors = [a.name.strip() for a in bib.author if a.name and a.name.strip()]

        published = None
        if bib.year:
            month = str(bib.month).zfill(2) if bib.month and str(bib.month).isdigit() else "01"
            published = normalize_date(f"{bib.year}-{month}-01") or normalize_date(str(bib.year))

        fulltext = next((link.url for link in bib.link if link.url and link.type == "fulltext"), None)
        url = fulltext or next((link.url for link in bib.link if link.url), None)

        return Paper(
            title=bib.title or "",
            abstract=bib.abstract or NO_ABSTRACT,
            authors=authors or [UNKNOWN_AUTHOR],
            published_date=published or today_iso(),
            url=url or f"https://doaj.org/article/{article.id}",
            source=self.source,
            citations=0,
            relevance_score=self._prior(),
        )
