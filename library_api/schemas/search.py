"""Schemas for workflow and skill search results."""

from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

# Score assigned to every lexical (non-ranked) match
FALLBACK_SIMILARITY = 0.5

MAX_SEARCH_LIMIT = 50

ResultSource = Literal["system", "user"]
SearchMode = Literal["semantic", "lexical", "failed"]


class ItemKind(str, Enum):
    """Kind of library item a search runs over."""

    WORKFLOW = "workflow"
    SKILL = "skill"


class WorkflowSearchResult(BaseModel):
    """Workflow matched by a search."""

    id: UUID
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    complexity: str | None = None
    similarity: float = Field(..., ge=0.0, le=1.0)
    source: ResultSource


class SkillSearchResult(BaseModel):
    """Skill matched by a search."""

    id: UUID
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    attachment_count: int = 0
    similarity: float = Field(..., ge=0.0, le=1.0)
    source: ResultSource


SearchResult = WorkflowSearchResult | SkillSearchResult


class SearchResponse(BaseModel):
    """Outcome of one search call.

    ``mode`` records which path produced the results. ``failed`` means both the
    vector and the lexical path errored; ``results`` is then empty and ``error``
    carries a caller-presentable message.
    """

    kind: ItemKind
    query: str
    mode: SearchMode
    results: list[WorkflowSearchResult] | list[SkillSearchResult] = Field(
        default_factory=list
    )
    error: str | None = None
