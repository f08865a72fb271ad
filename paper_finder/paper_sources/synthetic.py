"""Offline provider that fabricates template papers for a term.

Useful for demos and tests where no network is available. Scores come from
the synthetic prior tier so real results outrank these when both are present.
"""

import asyncio
from datetime import date, timedelta
from urllib.parse import quote_plus

from .base import BaseProviderClient
from .models import Paper, PriorTier

# (title template, authors, citation range)
TEMPLATES: list[tuple[str, list[str], tuple[int, int]]] = [
    ("Recent Advances in {term}", ["Dr. Jane Smith", "Prof. John Doe"], (10, 209)),
    ("{term}: A Comprehensive Review", ["Dr. Alice Johnson", "Dr. Bob Wilson"], (5, 154)),
    ("Novel Approaches to {term}", ["Prof. Carol Brown"], (1, 100)),
    ("Machine Learning Applications in {term}", ["Dr. David Lee", "Dr. Emma Davis"], (20, 319)),
]


class SyntheticProvider(BaseProviderClient):
    """
    Provider returning one paper per template after a short simulated delay.

    Usage:
        provider = SyntheticProvider(delay_range=(0.0, 0.0))
        papers = await provider.search("graph neural networks")
    """

    name = "synthetic"
    source = "Synthetic"
    tier = PriorTier.SYNTHETIC

    def __init__(
        self,
        *,
        delay_range: tuple[float, float] = (0.1, 0.3),
        sleep=asyncio.sleep,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.delay_range = delay_range
        self._sleep = sleep

    async def _fetch(self, term: str) -> list[Paper]:
        low, high = self.delay_range
        if high > 0:
            await self._sleep(self._rng.uniform(low, high))

        term = " ".join(term.split())
        if not term:
            return []

        papers = []
        for index, (title, authors, (min_cites, max_cites)) in enumerate(TEMPLATES):
            papers.append(
                Paper(
                    title=title.format(term=term),
                    abstract=(
                        f"This paper presents a comprehensive study on {term}, exploring "
                        f"various methodologies and approaches in the field."
                    ),
                    authors=list(authors),
                    published_date=self._random_date(),
                    url=f"https://example.org/synthetic?q={quote_plus(term)}&start={index}",
                    source=self.source,
                    citations=self._rng.randint(min_cites, max_cites),
                    relevance_score=self._prior(),
                )
            )
        return papers

    def _random_date(self) -> str:
        """A date within the last two years."""
        return (date.today() - timedelta(days=self._rng.randint(0, 730))).isoformat()
