"""Tests for validation, deduplication and ranking of aggregated papers."""

import random
from datetime import date

from conftest import make_paper
from paper_finder.paper_sources.models import Paper
from paper_finder.paper_sources.processing import (
    ResultProcessor,
    dedup_key,
    deduplicate_papers,
    enrich_paper,
    group_by_source,
    limit_papers,
    paper_statistics,
    rank_papers,
    validate_papers,
)


def titles(papers: list[Paper]) -> list[str]:
    return [p.title for p in papers]


# Validation and enrichment


def test_validate_drops_invalid_records():
    raw = [
        {"title": "Good", "authors": ["A"], "citations": 3, "relevanceScore": 0.7},
        {"title": "   ", "authors": ["A"], "relevanceScore": 0.7},  # blank title
        {"title": "No score", "authors": ["A"]},
        {"title": "String citations", "citations": "12", "relevanceScore": 0.5},
        {"title": "Out of range", "relevanceScore": 1.5},
        {"title": "Negative", "citations": -1, "relevanceScore": 0.5},
        make_paper("Already a paper"),
    ]
    valid = validate_papers(raw)
    assert titles(valid) == ["Good", "Already a paper"]


def test_validate_accepts_snake_case_names():
    valid = validate_papers([{"title": "T", "relevance_score": 0.3, "published_date": "2020"}])
    assert valid[0].relevance_score == 0.3
    assert valid[0].published_date == "2020"


def test_enrich_fills_defaults():
    paper = Paper(title="Bare", relevance_score=0.4)
    enriched = enrich_paper(paper)

    assert enriched.authors == ["Unknown"]
    assert enriched.source == "Unknown"
    assert enriched.published_date == date.today().isoformat()
    assert paper.authors == []  # input untouched


def test_enrich_normalizes_dates():
    assert enrich_paper(make_paper(published_date="2021")).published_date == "2021-01-01"
    assert enrich_paper(make_paper(published_date="2019-07")).published_date == "2019-07-01"
    assert enrich_paper(make_paper(published_date="2022-03-04T10:00:00Z")).published_date == "2022-03-04"


# Deduplication


def test_title_variants_collapse_to_one_record():
    papers = [
        make_paper("Deep Learning: A Review", authors=["Yann LeCun"], source="arXiv"),
        make_paper("deep learning a review", authors=["Yann LeCun"], source="PubMed"),
    ]
    unique = deduplicate_papers(papers)
    assert len(unique) == 1
    assert unique[0].source == "arXiv"  # first occurrence wins


def test_same_title_different_first_author_kept():
    papers = [
        make_paper("Attention", authors=["A. Vaswani"]),
        make_paper("Attention", authors=["N. Shazeer"]),
    ]
    assert len(deduplicate_papers(papers)) == 2


def test_dedup_key_ignores_punctuation_case_and_spacing():
    a = make_paper("Graph  Neural Networks!", authors=["J. Doe"])
    b = make_paper("graph neural networks", authors=["j doe"])
    assert dedup_key(a) == dedup_key(b)


def test_dedup_is_idempotent():
    rng = random.Random(7)
    base_titles = ["Alpha", "alpha!", "Beta", "BETA", "Gamma", "Delta: x", "delta x"]
    papers = [
        make_paper(rng.choice(base_titles), authors=[rng.choice(["X", "x", "Y"])])
        for _ in range(40)
    ]
    once = deduplicate_papers(papers)
    assert deduplicate_papers(once) == once


# Ranking


def test_close_scores_are_ordered_by_citations():
    a = make_paper("A", relevance_score=0.95, citations=3)
    b = make_paper("B", relevance_score=0.90, citations=50)
    assert titles(rank_papers([a, b], threshold=0.1)) == ["B", "A"]


def test_distant_scores_are_ordered_by_score():
    a = make_paper("A", relevance_score=0.95, citations=0)
    b = make_paper("B", relevance_score=0.80, citations=1000)
    assert titles(rank_papers([b, a], threshold=0.1)) == ["A", "B"]


def test_equal_citations_fall_back_to_newer_date():
    old = make_paper("Old", relevance_score=0.7, citations=5, published_date="2019-05-01")
    new = make_paper("New", relevance_score=0.72, citations=5, published_date="2023-05-01")
    assert titles(rank_papers([old, new])) == ["New", "Old"]


def test_full_ties_keep_input_order():
    papers = [make_paper(f"P{i}", relevance_score=0.5, citations=1) for i in range(5)]
    assert titles(rank_papers(papers)) == ["P0", "P1", "P2", "P3", "P4"]


def test_chained_close_scores_form_one_group():
    # 0.90 and 0.74 are far apart but linked through 0.82
    papers = [
        make_paper("High", relevance_score=0.90, citations=1),
        make_paper("Mid", relevance_score=0.82, citations=2),
        make_paper("Low", relevance_score=0.74, citations=3),
    ]
    assert titles(rank_papers(papers, threshold=0.1)) == ["Low", "Mid", "High"]


def test_ranking_is_deterministic_and_idempotent():
    rng = random.Random(3)
    papers = [
        make_paper(
            f"P{i}",
            relevance_score=round(rng.random(), 2),
            citations=rng.randint(0, 5),
            published_date=f"20{rng.randint(10, 23)}-01-01",
        )
        for i in range(60)
    ]
    ranked = rank_papers(papers)
    assert rank_papers(ranked) == ranked

    def sort_keys(result):
        return [(p.citations, p.published_date) for p in result]

    # input order only breaks full ties, so the ranking keys never depend on it
    assert sort_keys(rank_papers(list(reversed(papers)))) == sort_keys(ranked)


def test_close_scores_with_equal_citations_keep_input_order():
    papers = [
        make_paper("A", relevance_score=0.85, citations=5, published_date="2020-01-01"),
        make_paper("B", relevance_score=0.90, citations=5, published_date="2020-01-01"),
    ]
    assert titles(rank_papers(papers)) == ["A", "B"]
    assert titles(rank_papers(list(reversed(papers)))) == ["B", "A"]


def test_distant_scores_still_decide_order():
    papers = [
        make_paper("Low", relevance_score=0.3, citations=5),
        make_paper("High", relevance_score=0.9, citations=5),
    ]
    assert titles(rank_papers(papers)) == ["High", "Low"]


# Limit and processor


def test_limit_papers():
    papers = [make_paper(f"P{i}") for i in range(5)]
    assert len(limit_papers(papers, 3)) == 3
    assert limit_papers(papers, 0) == []


def test_processor_pipeline():
    raw = [
        {"title": "Dup", "authors": ["Z"], "relevanceScore": 0.9, "citations": 1},
        {"title": "dup", "authors": ["z"], "relevanceScore": 0.1, "citations": 100},
        {"title": "", "relevanceScore": 0.9},
        {"title": "Other", "relevanceScore": 0.3, "publishedDate": "2020"},
    ]
    result = ResultProcessor(relevance_threshold=0.1, max_results=20).process(raw)

    assert titles(result) == ["Dup", "Other"]
    assert result[1].published_date == "2020-01-01"
    assert result[1].authors == ["Unknown"]


def test_processor_limit_override():
    papers = [make_paper(f"P{i}") for i in range(30)]
    processor = ResultProcessor(max_results=20)
    assert len(processor.process(papers)) == 20
    assert len(processor.process(papers, limit=10)) == 10


# Grouping and statistics


def test_group_by_source_preserves_order():
    papers = [
        make_paper("a", source="arXiv"),
        make_paper("b", source="PubMed"),
        make_paper("c", source="arXiv"),
    ]
    grouped = group_by_source(papers)
    assert list(grouped) == ["arXiv", "PubMed"]
    assert titles(grouped["arXiv"]) == ["a", "c"]


def test_paper_statistics():
    papers = [
        make_paper("a", source="arXiv", citations=10, published_date="2020-01-01"),
        make_paper("b", source="PubMed", citations=0, published_date="2023-06-01"),
        make_paper("c", source="arXiv", citations=5, published_date="2021-02-03"),
    ]
    stats = paper_statistics(papers)

    assert stats.total == 3
    assert stats.sources == {"arXiv": 2, "PubMed": 1}
    assert stats.citations_total == 15
    assert stats.citations_average == 5.0
    assert stats.citations_max == 10
    assert stats.citations_min == 0
    assert stats.earliest_date == "2020-01-01"
    assert stats.latest_date == "2023-06-01"


def test_paper_statistics_empty():
    stats = paper_statistics([])
    assert stats.total == 0
    assert stats.citations_min == 0
    assert stats.earliest_date is None
