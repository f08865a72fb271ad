"""Canonical paper model shared by every provider."""

import random
import re
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

NO_ABSTRACT = "No abstract available"
UNKNOWN_AUTHOR = "Unknown Author"


class Paper(BaseModel):
    """Paper metadata in the canonical shape returned to callers.

    Serialises with the external field names (``publishedDate``,
    ``relevanceScore``); Python code uses the snake_case attributes.
    """

    title: str
    abstract: str = ""
    authors: list[str] = Field(default_factory=list)
    published_date: str = Field("", alias="publishedDate")
    url: str = ""
    source: str = ""
    citations: int = Field(0, ge=0, strict=True)
    relevance_score: float = Field(..., ge=0.0, le=1.0, strict=True, alias="relevanceScore")

    model_config = {"populate_by_name": True}

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = " ".join(value.split())
        if not value:
            raise ValueError("title must not be empty")
        return value

    def to_dict(self) -> dict:
        """Serialise using the external field names."""
        return self.model_dump(by_alias=True)


class PriorTier(str, Enum):
    """Data-quality tier used to seed a provider-side relevance prior.

    Providers have no comparable relevance signal, so each record gets a
    placeholder score drawn from its tier's range. Real upstream results sit
    above synthetic filler so ranking favours them.
    """

    REAL = "real"
    SYNTHETIC = "synthetic"


PRIOR_RANGES: dict[PriorTier, tuple[float, float]] = {
    PriorTier.REAL: (0.6, 1.0),
    PriorTier.SYNTHETIC: (0.2, 0.6),
}


def prior_score(tier: PriorTier, rng: random.Random | None = None) -> float:
    """Draw a relevance prior uniformly from the tier's range."""
    low, high = PRIOR_RANGES[tier]
    return (rng or random).uniform(low, high)


_DATE_PATTERN = re.compile(r"^(\d{4})(?:-(\d{1,2}))?(?:-(\d{1,2}))?")


def normalize_date(value: str | int | date | datetime | None) -> str | None:
    """
    Normalise a provider date to ``YYYY-MM-DD``.

    Accepts full ISO timestamps, ``YYYY-MM`` and bare years (missing parts
    become 01). Returns None if nothing usable is found.

    Example: "2023-06-15T17:59:59Z" -> "2023-06-15", "2021" -> "2021-01-01"
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    match = _DATE_PATTERN.match(str(value).strip())
    if not match:
        return None

    year, month, day = match.groups()
    try:
        return date(int(year), int(month or 1), int(day or 1)).isoformat()
    except ValueError:
        return None


def today_iso() -> str:
    return date.today().isoformat()
