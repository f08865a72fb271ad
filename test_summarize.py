"""Tests for research summaries."""

import asyncio

from conftest import make_paper
from paper_finder.config.factory import MockLLMProvider
from paper_finder.retry import RetryExecutor
from paper_finder.summarize import ResearchSummarizer, build_summary_prompt, fallback_summary


class BrokenLLM:
    async def complete(self, prompt, system_prompt=None, temperature=0.7, max_tokens=None):
        raise ConnectionError("refused")


def sample_papers(n: int = 7):
    return [
        make_paper(f"Paper {i}", authors=["A. Author", "B. Author"], citations=i, source=src)
        for i, src in zip(range(n), ["arXiv", "PubMed"] * n)
    ]


def test_prompt_lists_top_five():
    prompt = build_summary_prompt("sleep and memory", sample_papers(7))

    assert 'research query "sleep and memory"' in prompt
    assert "I found 7 relevant research papers" in prompt
    assert '1. "Paper 0" by A. Author, B. Author (0 citations, arXiv)' in prompt
    assert '5. "Paper 4"' in prompt
    assert "Paper 5" not in prompt


def test_fallback_names_count_and_sources():
    text = fallback_summary("sleep and memory", sample_papers(3))
    assert text.startswith('I found 3 research papers related to "sleep and memory".')
    assert "papers from arXiv, PubMed." in text


def test_summary_uses_llm_and_caches(cache, retry):
    llm = MockLLMProvider(response="  The field is moving fast.  ")
    summarizer = ResearchSummarizer(llm=llm, cache=cache, retry=retry)
    papers = sample_papers(4)

    first = asyncio.run(summarizer.summarize("topic", papers))
    second = asyncio.run(summarizer.summarize("topic", papers))

    assert first == second == "The field is moving fast."
    assert len(llm.calls) == 1
    assert llm.calls[0]["max_tokens"] == 500
    assert cache.has("ai_response:topic:4")


def test_summary_falls_back_on_failure(cache, sleep):
    summarizer = ResearchSummarizer(
        llm=BrokenLLM(),
        cache=cache,
        retry=RetryExecutor(max_attempts=2, base_delay=0, sleep=sleep),
    )
    text = asyncio.run(summarizer.summarize("topic", sample_papers(2)))

    assert text.startswith("I found 2 research papers")
    assert len(cache) == 0


def test_summary_without_llm():
    text = asyncio.run(ResearchSummarizer(llm=None).summarize("topic", []))
    assert text.startswith('I found 0 research papers related to "topic"')
