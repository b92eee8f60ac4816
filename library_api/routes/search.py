"""API routes for workflow and skill search."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..providers import get_provider_registry
from ..schemas.search import MAX_SEARCH_LIMIT, SearchResponse
from ..services.semantic_search import (
    DEFAULT_SKILL_LIMIT,
    DEFAULT_WORKFLOW_LIMIT,
    SemanticSearchService,
)

router = APIRouter(prefix="/api/search", tags=["search"])


def get_search_service() -> SemanticSearchService:
    return get_provider_registry().get_search_service()


def get_caller_id(request: Request) -> UUID | None:
    """Caller identity set by the host's authentication middleware, if any."""
    return getattr(request.state, "user_id", None)


@router.get(
    "/workflows",
    response_model=SearchResponse,
    summary="Find workflows relevant to a task",
    description="Semantic search over workflows visible to the caller. Falls back to text matching.",
)
async def search_workflows(
    q: str = Query(..., min_length=1, max_length=1000, description="Task description"),
    limit: int = Query(DEFAULT_WORKFLOW_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    caller_id: UUID | None = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
    service: SemanticSearchService = Depends(get_search_service),
) -> SearchResponse:
    return await service.search_workflows(
        db=db, query=q, limit=limit, caller_id=caller_id
    )


@router.get(
    "/skills",
    response_model=SearchResponse,
    summary="Find skills relevant to a task",
    description="Semantic search over skills visible to the caller. Falls back to text matching.",
)
async def search_skills(
    q: str = Query(..., min_length=1, max_length=1000, description="Task description"),
    limit: int = Query(DEFAULT_SKILL_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    caller_id: UUID | None = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
    service: SemanticSearchService = Depends(get_search_service),
) -> SearchResponse:
    return await service.search_skills(
        db=db, query=q, limit=limit, caller_id=caller_id
    )
