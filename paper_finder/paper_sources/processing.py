"""Post-processing of aggregated provider results.

The pipeline is validate -> enrich -> deduplicate -> rank -> limit. Every
stage is a pure function over a list of papers; ``ResultProcessor`` chains
them with configured limits.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .models import Paper, normalize_date, today_iso

logger = logging.getLogger(__name__)

DEFAULT_RELEVANCE_THRESHOLD = 0.1
DEFAULT_MAX_RESULTS = 20
UNKNOWN = "Unknown"

_PUNCTUATION = re.compile(r"[^\w\s]")


def validate_papers(raw_papers: Iterable[Paper | Mapping[str, Any]]) -> list[Paper]:
    """
    Keep records satisfying the Paper invariants.

    Mappings are validated with ``Paper.model_validate``; failures are logged
    at DEBUG and dropped.
    """
    valid: list[Paper] = []
    dropped = 0
    for raw in raw_papers:
        if isinstance(raw, Paper):
            valid.append(raw)
            continue
        try:
            valid.append(Paper.model_validate(raw))
        except ValidationError as e:
            dropped += 1
            logger.debug(f"Dropping invalid paper record: {e.errors()[0]['msg']}")

    if dropped:
        logger.info(f"Validation dropped {dropped} of {len(valid) + dropped} records")
    return valid


def enrich_paper(paper: Paper) -> Paper:
    """Fill optional fields with their defaults and normalise the date."""
    return paper.model_copy(
        update={
            "authors": list(paper.authors) or [UNKNOWN],
            "published_date": normalize_date(paper.published_date) or today_iso(),
            "source": paper.source or UNKNOWN,
        }
    )


def _normalize(text: str) -> str:
    return " ".join(_PUNCTUATION.sub("", text.lower()).split())


def dedup_key(paper: Paper) -> str:
    """Key from normalised title and first author."""
    first_author = paper.authors[0] if paper.authors else ""
    return f"{_normalize(paper.title)}_{_normalize(first_author)}"


def deduplicate_papers(papers: Iterable[Paper]) -> list[Paper]:
    """Remove duplicates, keeping the first occurrence of each key."""
    seen: set[str] = set()
    unique: list[Paper] = []
    total = 0
    for paper in papers:
        total += 1
        key = dedup_key(paper)
        if key not in seen:
            seen.add(key)
            unique.append(paper)

    logger.debug(f"Deduplication: {total} -> {len(unique)} papers")
    return unique


def _date_key(paper: Paper) -> str:
    # ISO dates order lexicographically; unparseable dates sort oldest
    return normalize_date(paper.published_date) or ""


def rank_papers(
    papers: Iterable[Paper],
    threshold: float = DEFAULT_RELEVANCE_THRESHOLD,
) -> list[Paper]:
    """
    Rank papers by relevance, then citations, then recency.

    Papers are partitioned into score clusters: walking the score-sorted list,
    a new cluster starts when the gap to the previous score exceeds
    ``threshold``. Clusters are emitted highest-score first. Inside a cluster
    papers are ordered by citations then date, both descending, and full ties
    keep their input order. Scores within ``threshold`` of each other
    therefore never decide the order on their own.
    """
    indexed = list(enumerate(papers))
    by_score = sorted(indexed, key=lambda item: item[1].relevance_score, reverse=True)

    ranked: list[Paper] = []
    cluster: list[tuple[int, Paper]] = []
    for index, paper in by_score:
        if cluster and cluster[-1][1].relevance_score - paper.relevance_score > threshold:
            ranked.extend(_sort_cluster(cluster))
            cluster = []
        cluster.append((index, paper))
    ranked.extend(_sort_cluster(cluster))
    return ranked


def _sort_cluster(cluster: list[tuple[int, Paper]]) -> list[Paper]:
    in_input_order = sorted(cluster, key=lambda item: item[0])
    ordered = sorted(
        in_input_order,
        key=lambda item: (item[1].citations, _date_key(item[1])),
        reverse=True,
    )
    return [paper for _, paper in ordered]


def limit_papers(papers: list[Paper], limit: int = DEFAULT_MAX_RESULTS) -> list[Paper]:
    return papers[: max(limit, 0)]


class ResultProcessor:
    """
    Validate, enrich, deduplicate, rank and cap aggregated papers.

    Usage:
        processor = ResultProcessor(relevance_threshold=0.1, max_results=20)
        papers = processor.process(raw_papers)
    """

    def __init__(
        self,
        relevance_threshold: float = DEFAULT_RELEVANCE_THRESHOLD,
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self.relevance_threshold = relevance_threshold
        self.max_results = max_results

    def process(
        self,
        raw_papers: Iterable[Paper | Mapping[str, Any]],
        limit: int | None = None,
    ) -> list[Paper]:
        """
        Run the full pipeline.

        Args:
            raw_papers: Papers or paper-shaped mappings from any provider
            limit: Override for ``max_results``

        Returns:
            Ranked papers, at most ``limit`` (or ``max_results``) long
        """
        valid = validate_papers(raw_papers)
        enriched = [enrich_paper(p) for p in valid]
        unique = deduplicate_papers(enriched)
        ranked = rank_papers(unique, self.relevance_threshold)
        result = limit_papers(ranked, self.max_results if limit is None else limit)

        logger.info(
            f"Processed papers: {len(valid)} valid, {len(unique)} unique, {len(result)} returned"
        )
        return result


def group_by_source(papers: Iterable[Paper]) -> dict[str, list[Paper]]:
    """Group papers by source, preserving order within each group."""
    grouped: dict[str, list[Paper]] = {}
    for paper in papers:
        grouped.setdefault(paper.source or UNKNOWN, []).append(paper)
    return grouped


class PaperStatistics(BaseModel):
    """Summary figures for a result set."""

    total: int = 0
    sources: dict[str, int] = Field(default_factory=dict)
    citations_total: int = 0
    citations_average: float = 0.0
    citations_max: int = 0
    citations_min: int = 0
    earliest_date: str | None = None
    latest_date: str | None = None


def paper_statistics(papers: Iterable[Paper]) -> PaperStatistics:
    papers = list(papers)
    if not papers:
        return PaperStatistics()

    sources: dict[str, int] = {}
    for paper in papers:
        source = paper.source or UNKNOWN
        sources[source] = sources.get(source, 0) + 1

    citations = [p.citations for p in papers]
    dates = sorted(d for d in (normalize_date(p.published_date) for p in papers) if d)

    return PaperStatistics(
        total=len(papers),
        sources=sources,
        citations_total=sum(citations),
        citations_average=round(sum(citations) / len(papers), 2),
        citations_max=max(citations),
        citations_min=min(citations),
        earliest_date=dates[0] if dates else None,
        latest_date=dates[-1] if dates else None,
    )
