"""Semantic Scholar API integration."""

from .models import Author, PaperSearchResult, SearchResponse
from .adapters import SemanticScholarProvider

__all__ = [
    # Raw response models
    "Author",
    "PaperSearchResult",
    "SearchResponse",
    # Provider
    "SemanticScholarProvider",
]
