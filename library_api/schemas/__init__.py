"""Pydantic schemas for API request/response validation."""

from .search import (
    FALLBACK_SIMILARITY,
    MAX_SEARCH_LIMIT,
    ItemKind,
    SearchResponse,
    SearchResult,
    SkillSearchResult,
    WorkflowSearchResult,
)

__all__ = [
    "FALLBACK_SIMILARITY",
    "MAX_SEARCH_LIMIT",
    "ItemKind",
    "SearchResponse",
    "SearchResult",
    "SkillSearchResult",
    "WorkflowSearchResult",
]
