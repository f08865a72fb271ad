"""arXiv API integration for paper search.

This module provides a provider for the arXiv API that implements
the same protocol as the other paper sources.

Usage:
    from paper_finder.arxiv import ArXivProvider

    async with ArXivProvider(cache=cache) as provider:
        papers = await provider.search("transformer attention")
"""

from .adapters import ArXivProvider
from .client import ArXivClient

__all__ = ["ArXivProvider", "ArXivClient"]
