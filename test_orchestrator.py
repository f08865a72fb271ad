"""Tests for concurrent fan-out, failure isolation and health checks."""

import asyncio

import pytest

from conftest import make_paper
from paper_finder.paper_sources.base import BaseProviderClient
from paper_finder.paper_sources.orchestrator import (
    HealthReport,
    Outcome,
    SearchOrchestrator,
    gather_settled,
)
from paper_finder.paper_sources.processing import ResultProcessor


class StaticProvider:
    """Provider returning fixed papers, or raising ``error`` from search."""

    def __init__(self, name, papers=None, error=None):
        self.name = name
        self.papers = papers or []
        self.error = error
        self.terms: list[str] = []
        self.entered = False
        self.exited = False

    async def search(self, term):
        self.terms.append(term)
        if self.error:
            raise self.error
        return list(self.papers)

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited = True


class CheckableProvider(StaticProvider):
    def __init__(self, name, healthy):
        super().__init__(name)
        self.healthy = healthy

    async def health_check(self):
        return self.healthy


class BrokenProvider(BaseProviderClient):
    name = "broken"

    async def _fetch(self, term):
        raise ConnectionError("connection refused")


class ExplodingProcessor(ResultProcessor):
    def process(self, raw_papers, limit=None):
        raise RuntimeError("bug in processing")


def test_gather_settled_reports_each_outcome():
    async def ok(value):
        return value

    async def fail():
        raise KeyError("missing")

    outcomes = asyncio.run(gather_settled([ok(1), fail(), ok(3)]))

    assert [o.ok for o in outcomes] == [True, False, True]
    assert outcomes[0].value == 1
    assert isinstance(outcomes[1].error, KeyError)
    assert outcomes[2] == Outcome(value=3)


def test_partial_failure_still_returns_ranked_results(sleep):
    good = StaticProvider(
        "good",
        papers=[
            make_paper("Low", relevance_score=0.3),
            make_paper("High", relevance_score=0.9),
        ],
    )
    raising = StaticProvider("raising", error=RuntimeError("boom"))
    orchestrator = SearchOrchestrator([good, BrokenProvider(), raising], sleep=sleep)

    papers = asyncio.run(orchestrator.search_papers(["term one", "term two"]))

    assert [p.title for p in papers] == ["High", "Low"]
    assert raising.terms == ["term one", "term two"]


def test_results_are_capped_by_processor(sleep):
    provider = StaticProvider("many", papers=[make_paper(f"P{i}") for i in range(30)])
    orchestrator = SearchOrchestrator(
        [provider], ResultProcessor(max_results=20), sleep=sleep
    )

    assert len(asyncio.run(orchestrator.search_papers(["x"]))) == 20
    assert len(asyncio.run(orchestrator.search_papers(["x"], limit=10))) == 10


def test_only_first_terms_are_searched(sleep):
    provider = StaticProvider("p")
    orchestrator = SearchOrchestrator([provider], max_concurrent_searches=3, sleep=sleep)

    asyncio.run(orchestrator.search_papers(["a", "b", "c", "d", "e"]))

    assert sorted(provider.terms) == ["a", "b", "c"]


def test_delay_between_provider_starts(sleep):
    providers = [StaticProvider(name) for name in ("p1", "p2", "p3")]
    orchestrator = SearchOrchestrator(providers, search_delay=0.1, sleep=sleep)

    asyncio.run(orchestrator.search_papers(["a", "b"]))

    # two gaps per term, no delay before the first provider
    assert sleep.delays == [0.1] * 4
    assert all(sorted(p.terms) == ["a", "b"] for p in providers)


def test_blank_terms_and_no_providers(sleep):
    provider = StaticProvider("p", papers=[make_paper()])
    assert asyncio.run(SearchOrchestrator([provider], sleep=sleep).search_papers([])) == []
    assert asyncio.run(SearchOrchestrator([provider], sleep=sleep).search_papers(["  "])) == []
    assert asyncio.run(SearchOrchestrator([], sleep=sleep).search_papers(["x"])) == []
    assert provider.terms == []


def test_internal_error_returns_empty(sleep):
    provider = StaticProvider("p", papers=[make_paper()])
    orchestrator = SearchOrchestrator([provider], ExplodingProcessor(), sleep=sleep)
    assert asyncio.run(orchestrator.search_papers(["x"])) == []


def test_context_manager_enters_every_provider():
    providers = [StaticProvider("a"), StaticProvider("b")]

    async def go():
        async with SearchOrchestrator(providers):
            assert all(p.entered for p in providers)

    asyncio.run(go())
    assert all(p.exited for p in providers)


class FailingToOpen(StaticProvider):
    async def __aenter__(self):
        raise ConnectionError("cannot open client")


def test_failed_enter_closes_already_opened_providers():
    opened = StaticProvider("opened")
    orchestrator = SearchOrchestrator([opened, FailingToOpen("failing")])

    async def go():
        async with orchestrator:
            pass

    with pytest.raises(ConnectionError):
        asyncio.run(go())
    assert opened.entered and opened.exited


def test_duplicate_provider_names_rejected():
    with pytest.raises(ValueError, match="Duplicate provider names"):
        SearchOrchestrator([StaticProvider("x"), StaticProvider("x")])


def test_health_check_reports_each_provider():
    providers = [
        CheckableProvider("checkable", healthy=True),
        StaticProvider("plain"),
        StaticProvider("raising", error=ConnectionError("down")),
        CheckableProvider("unhealthy", healthy=False),
    ]
    report = asyncio.run(SearchOrchestrator(providers).health_check())

    assert report.providers == {
        "checkable": True,
        "plain": True,
        "raising": False,
        "unhealthy": False,
    }
    assert report.status == "degraded"
    assert providers[1].terms == ["test"]
    assert report.model_dump()["status"] == "degraded"


def test_health_report_status():
    assert HealthReport(providers={"a": True, "b": True}).status == "healthy"
    assert HealthReport(providers={"a": True, "b": False}).status == "degraded"
    assert HealthReport().status == "degraded"
    assert HealthReport().timestamp


def test_search_stats():
    orchestrator = SearchOrchestrator(
        [StaticProvider("a")],
        ResultProcessor(relevance_threshold=0.2, max_results=15),
        max_concurrent_searches=2,
        search_delay=0.25,
    )
    assert orchestrator.search_stats() == {
        "providers": ["a"],
        "max_concurrent_searches": 2,
        "search_delay_ms": 250,
        "relevance_threshold": 0.2,
        "max_results": 15,
    }
