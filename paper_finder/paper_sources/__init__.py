"""Paper sources: canonical model, provider base classes and aggregation.

Provider implementations live in their own packages (``arxiv``,
``semantic_scholar``, ``academic_db``) and are wired together by
``paper_finder.config.factory``.

Usage:
    from paper_finder.paper_sources import SearchOrchestrator, SyntheticProvider

    async with SearchOrchestrator([SyntheticProvider()]) as orchestrator:
        papers = await orchestrator.search_papers(["graph neural networks"])
"""

from .models import NO_ABSTRACT, UNKNOWN_AUTHOR, Paper, PriorTier, normalize_date, prior_score
from .protocols import HealthCheckable, PaperSearchProvider
from .base import BaseProviderClient, HttpProviderClient
from .synthetic import SyntheticProvider
from .processing import (
    PaperStatistics,
    ResultProcessor,
    deduplicate_papers,
    group_by_source,
    paper_statistics,
    rank_papers,
)
from .orchestrator import HealthReport, Outcome, SearchOrchestrator, gather_settled

__all__ = [
    # Models
    "Paper",
    "PriorTier",
    "prior_score",
    "normalize_date",
    "NO_ABSTRACT",
    "UNKNOWN_AUTHOR",
    # Providers
    "PaperSearchProvider",
    "HealthCheckable",
    "BaseProviderClient",
    "HttpProviderClient",
    "SyntheticProvider",
    # Processing
    "ResultProcessor",
    "deduplicate_papers",
    "rank_papers",
    "group_by_source",
    "paper_statistics",
    "PaperStatistics",
    # Orchestration
    "SearchOrchestrator",
    "HealthReport",
    "Outcome",
    "gather_settled",
]
