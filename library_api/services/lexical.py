"""Substring search used when vector ranking is unavailable."""

import logging
from uuid import UUID

from opentelemetry import trace
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.telemetry import (
    SEARCH_AUTHENTICATED,
    SEARCH_KIND,
    SEARCH_LIMIT,
    SEARCH_RESULT_COUNT,
)
from ..schemas.search import FALLBACK_SIMILARITY, ItemKind, SearchResult
from .candidates import KIND_TABLES, visibility_predicate
from .results import build_result

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("library-api.lexical")


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def lexical_search(
    db: AsyncSession,
    kind: ItemKind,
    query: str,
    limit: int,
    caller_id: UUID | None = None,
) -> list[SearchResult]:
    """Case-insensitive substring match over name, description and content.

    Uses the same visibility rules as vector search. Matches are not ranked:
    each one scores FALLBACK_SIMILARITY, newest items first.

    Args:
        db: Database session.
        kind: Item kind to search.
        query: Text to look for; surrounding whitespace is ignored.
        limit: Maximum number of results.
        caller_id: Authenticated user, or None for anonymous callers.

    Returns:
        Matching results, possibly empty.
    """
    model = KIND_TABLES[kind].item

    with tracer.start_as_current_span("lexical.search") as span:
        span.set_attribute(SEARCH_KIND, kind.value)
        span.set_attribute(SEARCH_LIMIT, limit)
        span.set_attribute(SEARCH_AUTHENTICATED, caller_id is not None)

        pattern = _like_pattern(query.strip())
        stmt = (
            select(model)
            .where(
                visibility_predicate(kind, caller_id),
                or_(
                    model.name.ilike(pattern, escape="\\"),
                    model.description.ilike(pattern, escape="\\"),
                    model.content.ilike(pattern, escape="\\"),
                ),
            )
            .order_by(model.created_at.desc(), model.id)
            .limit(limit)
        )
        result = await db.execute(stmt)
        items = result.scalars().all()

        results = [build_result(kind, item, FALLBACK_SIMILARITY) for item in items]

        span.set_attribute(SEARCH_RESULT_COUNT, len(results))
        logger.info(
            "search.lexical_completed",
            extra={
                "kind": kind.value,
                "authenticated": caller_id is not None,
                "query_length": len(query),
                "results_count": len(results),
            },
        )

        return results
