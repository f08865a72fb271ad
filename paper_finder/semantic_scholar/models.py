"""Pydantic models for Semantic Scholar API responses."""

from pydantic import BaseModel, Field


class Author(BaseModel):
    """Author information."""

    author_id: str | None = Field(None, alias="authorId")
    name: str | None = None


class PaperSearchResult(BaseModel):
    """Paper metadata returned from search endpoint."""

    paper_id: str = Field(..., alias="paperId")
    title: str | None = None
    abstract: str | None = None
    authors: list[Author] = Field(default_factory=list)
    year: int | None = None
    publication_date: str | None = Field(None, alias="publicationDate")
    citation_count: int | None = Field(None, alias="citationCount")
    url: str | None = None
    external_ids: dict[str, str | int] | None = Field(None, alias="externalIds")

    model_config = {"populate_by_name": True}


class SearchResponse(BaseModel):
    """Response from the paper search endpoint."""

    total: int = 0
    offset: int = 0
    next: int | None = None
    data: list[PaperSearchResult] = Field(default_factory=list)
