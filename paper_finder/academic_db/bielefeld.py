"""BASE (Bielefeld Academic Search Engine) provider.

BASE returns Dublin Core fields, each of which may be a string or a list
depending on the record.
"""

import logging
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from ..paper_sources.base import HttpProviderClient
from ..paper_sources.models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, normalize_date, today_iso
from ..settings import BASE_SEARCH_URL

logger = logging.getLogger(__name__)


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


Scalar = Annotated[str | None, BeforeValidator(lambda v: None if _first(v) is None else str(_first(v)))]
StrList = Annotated[list[str], BeforeValidator(lambda v: [str(x) for x in _as_list(v)])]


class BaseDocument(BaseModel):
    dctitle: Scalar = None
    dcdescription: Scalar = None
    dccreator: StrList = Field(default_factory=list)
    dcyear: Scalar = None
    dcdate: Scalar = None
    dclink: Scalar = None
    dcidentifier: StrList = Field(default_factory=list)


class BaseResult(BaseModel):
    num_found: int = Field(0, alias="numFound")
    docs: list[BaseDocument] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class BaseSearchResponse(BaseModel):
    response: BaseResult = Field(default_factory=BaseResult)


class BASEProvider(HttpProviderClient):
    """Provider for the BASE HTTP search interface."""

    name = "base"
    source = "BASE"

    def __init__(self, *, base_url: str = BASE_SEARCH_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url

    async def _fetch(self, term: str) -> list[Paper]:
        data = await self._get_json(
            self.base_url,
            {
                "func": "PerformSearch",
                "query": term,
                "format": "json",
                "hits": self._max_results,
            },
        )
        result = BaseSearchResponse.model_validate(data).response

        papers: list[Paper] = []
        for doc in result.docs:
            try:
                papers.append(self._to_paper(doc))
            except ValidationError as e:
                logger.debug(f"Skipping BASE record '{doc.dctitle}': {e}")
        return papers

    def _to_paper(self, doc: BaseDocument) -> Paper:
        authors = [a.strip() for a in doc.dccreator if a.strip()]
        published = normalize_date(doc.dcdate) or normalize_date(doc.dcyear)
        url = doc.dclink or next(
            (i for i in doc.dcidentifier if i.startswith("http")), "https://www.base-search.net/"
        )

        return Paper(
            title=doc.dctitle or "",
            abstract=doc.dcdescription or NO_ABSTRACT,
            authors=authors or [UNKNOWN_AUTHOR],
            published_date=published or today_iso(),
            url=url,
            source=self.source,
            citations=0,
            relevance_score=self._prior(),
        )
