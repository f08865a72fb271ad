"""PubMed provider using the NCBI E-utilities.

Two requests per term: ``esearch`` (JSON) returns PMIDs, ``efetch`` (XML)
returns the ``PubmedArticle`` records for them.
"""

import logging
import re
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException
from pydantic import BaseModel, Field, ValidationError

from ..errors import ProviderError
from ..paper_sources.base import HttpProviderClient
from ..paper_sources.models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, normalize_date, today_iso
from ..settings import PUBMED_EUTILS_BASE_URL

logger = logging.getLogger(__name__)

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


class ESearchResult(BaseModel):
    idlist: list[str] = Field(default_factory=list)


class ESearchResponse(BaseModel):
    esearchresult: ESearchResult = Field(default_factory=ESearchResult)


class PubMedArticle(BaseModel):
    """Fields extracted from one ``PubmedArticle`` element."""

    pmid: str = ""
    title: str = ""
    abstract: str = ""
    authors: list[str] = Field(default_factory=list)
    year: int | None = None
    month: int | None = None
    day: int | None = None


def _text(element: Element | None) -> str:
    """All text under element (titles may contain inline markup like <i>)."""
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def _parse_month(value: str | None) -> int | None:
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    return _MONTHS.get(value[:3].lower())


def _parse_pub_date(pub_date: Element | None) -> tuple[int | None, int | None, int | None]:
    if pub_date is None:
        return None, None, None

    year = pub_date.findtext("Year")
    if year and year.strip().isdigit():
        day = pub_date.findtext("Day")
        return (
            int(year),
            _parse_month(pub_date.findtext("Month")),
            int(day) if day and day.strip().isdigit() else None,
        )

    # e.g. <MedlineDate>1998 Dec-1999 Jan</MedlineDate>
    medline = pub_date.findtext("MedlineDate") or ""
    match = re.match(r"(\d{4})(?:\s+([A-Za-z]{3}))?", medline)
    if match:
        return int(match.group(1)), _parse_month(match.group(2)), None
    return None, None, None


def parse_pubmed_xml(xml_text: str) -> list[PubMedArticle]:
    """
    Parse an efetch XML document into PubMedArticle records.

    Raises:
        ProviderError: If the document is not well-formed XML
    """
    try:
        root = ET.fromstring(xml_text)
    except (ET.ParseError, DefusedXmlException) as e:
        raise ProviderError("pubmed", f"malformed XML payload: {e}") from e

    articles: list[PubMedArticle] = []
    for element in root.iter("PubmedArticle"):
        authors: list[str] = []
        for author in element.findall(".//AuthorList/Author"):
            name = " ".join(
                part for part in (author.findtext("ForeName"), author.findtext("LastName")) if part
            )
            name = name or author.findtext("CollectiveName") or ""
            if name.strip():
                authors.append(name.strip())

        abstract = " ".join(
            _text(section) for section in element.findall(".//Abstract/AbstractText")
        ).strip()

        year, month, day = _parse_pub_date(element.find(".//Article/Journal/JournalIssue/PubDate"))

        articles.append(
            PubMedArticle(
                pmid=(element.findtext(".//MedlineCitation/PMID") or "").strip(),
                title=_text(element.find(".//Article/ArticleTitle")),
                abstract=abstract,
                authors=authors,
                year=year,
                month=month,
                day=day,
            )
        )
    return articles


class PubMedProvider(HttpProviderClient):
    """
    Provider for PubMed via E-utilities.

    Usage:
        async with PubMedProvider(cache=cache) as provider:
            papers = await provider.search("propofol sedation")
    """

    name = "pubmed"
    source = "PubMed"

    def __init__(self, *, base_url: str = PUBMED_EUTILS_BASE_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def _fetch(self, term: str) -> list[Paper]:
        data = await self._get_json(
            f"{self.base_url}/esearch.fcgi",
            {"db": "pubmed", "term": term, "retmax": self._max_results, "retmode": "json"},
        )
        pmids = ESearchResponse.model_validate(data).esearchresult.idlist
        if not pmids:
            return []

        response = await self._get(
            f"{self.base_url}/efetch.fcgi",
            {"db": "pubmed", "id": ",".join(pmids), "retmode": "xml"},
        )

        papers: list[Paper] = []
        for article in parse_pubmed_xml(response.text):
            try:
                papers.append(self._to_paper(article))
            except ValidationError as e:
                logger.warning(f"Failed to parse PubMed article {article.pmid or '?'}: {e}")
        return papers

    def _to_paper(self, article: PubMedArticle) -> Paper:
        published = None
        if article.year:
            published = normalize_date(
                f"{article.year:04d}-{article.month or 1:02d}-{article.day or 1:02d}"
            ) or normalize_date(article.year)

        return Paper(
            title=article.title,
            abstract=article.abstract or NO_ABSTRACT,
            authors=article.authors or [UNKNOWN_AUTHOR],
            published_date=published or today_iso(),
            url=(
                f"https://pubmed.ncbi.nlm.nih.gov/{article.pmid}/"
                if article.pmid
                else "https://pubmed.ncbi.nlm.nih.gov/"
            ),
            source=self.source,
            citations=0,  # Would need an extra call per article
            relevance_score=self._prior(),
        )
