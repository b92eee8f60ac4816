"""Semantic workflow and skill search with lexical fallback."""

import logging
import time
from collections.abc import Sequence
from uuid import UUID

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.events import LoggingSearchEventSink, SearchEventSink
from ..adapters.telemetry import (
    SEARCH_AUTHENTICATED,
    SEARCH_KIND,
    SEARCH_LIMIT,
    SEARCH_MODE,
    SEARCH_RESULT_COUNT,
)
from ..observability.metrics import SEARCH_DURATION, SEARCH_FALLBACKS, SEARCH_RESULTS
from ..schemas.search import ItemKind, SearchMode, SearchResponse, SearchResult
from .candidates import LibraryItem, load_candidates
from .embedding_gateway import EmbeddingGateway
from .lexical import lexical_search
from .results import build_result
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("library-api.semantic_search")

DEFAULT_WORKFLOW_LIMIT = 5
DEFAULT_SKILL_LIMIT = 10

SEARCH_FAILED_MESSAGE = "Search failed. Please try again."


class SemanticSearchService:
    """Rank workflows and skills against a free-text task description.

    Any failure on the vector path (no provider, provider error, store error)
    drops to lexical matching. Only when lexical matching also fails does the
    response come back with ``mode="failed"``; no exception escapes a search.
    """

    def __init__(
        self,
        gateway: EmbeddingGateway,
        events: SearchEventSink | None = None,
    ):
        self.gateway = gateway
        self.events = events or LoggingSearchEventSink()

    async def search_workflows(
        self,
        db: AsyncSession,
        query: str,
        limit: int = DEFAULT_WORKFLOW_LIMIT,
        caller_id: UUID | None = None,
    ) -> SearchResponse:
        return await self.search(db, ItemKind.WORKFLOW, query, limit, caller_id)

    async def search_skills(
        self,
        db: AsyncSession,
        query: str,
        limit: int = DEFAULT_SKILL_LIMIT,
        caller_id: UUID | None = None,
    ) -> SearchResponse:
        return await self.search(db, ItemKind.SKILL, query, limit, caller_id)

    async def search(
        self,
        db: AsyncSession,
        kind: ItemKind,
        query: str,
        limit: int,
        caller_id: UUID | None = None,
    ) -> SearchResponse:
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        started = time.perf_counter()

        with tracer.start_as_current_span("semantic_search.search") as span:
            span.set_attribute(SEARCH_KIND, kind.value)
            span.set_attribute(SEARCH_LIMIT, limit)
            span.set_attribute(SEARCH_AUTHENTICATED, caller_id is not None)

            if not self.gateway.is_configured:
                reason = "not_configured"
            else:
                query_vector = await self.gateway.embed_query(query)
                if query_vector is None:
                    reason = "embedding_unavailable"
                else:
                    try:
                        ranked = await self._rank(
                            db, kind, query_vector, limit, caller_id
                        )
                    except Exception as exc:
                        span.record_exception(exc)
                        reason = "vector_path_error"
                        self.events.emit(
                            "search.vector_path_failed",
                            kind=kind.value,
                            error=str(exc),
                            error_type=type(exc).__name__,
                        )
                        await self._reset_session(db, kind)
                    else:
                        return self._respond(
                            span, kind, query, "semantic", ranked, started
                        )

            SEARCH_FALLBACKS.labels(kind=kind.value, reason=reason).inc()
            span.set_attribute("search.fallback_reason", reason)
            logger.info(
                "search.fallback",
                extra={"kind": kind.value, "reason": reason},
            )

            try:
                matches = await lexical_search(db, kind, query, limit, caller_id)
            except Exception as exc:
                span.record_exception(exc)
                self.events.emit(
                    "search.failed",
                    kind=kind.value,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                return self._respond(
                    span,
                    kind,
                    query,
                    "failed",
                    [],
                    started,
                    error=SEARCH_FAILED_MESSAGE,
                )

            return self._respond(span, kind, query, "lexical", matches, started)

    async def _rank(
        self,
        db: AsyncSession,
        kind: ItemKind,
        query_vector: Sequence[float],
        limit: int,
        caller_id: UUID | None,
    ) -> list[SearchResult]:
        candidates = await load_candidates(db, kind, caller_id)

        scored: list[tuple[float, LibraryItem]] = []
        missing = 0
        mismatched = 0
        for candidate in candidates:
            if candidate.embedding is None:
                missing += 1
                continue
            if len(candidate.embedding) != len(query_vector):
                mismatched += 1
                continue
            scored.append(
                (cosine_similarity(query_vector, candidate.embedding), candidate.item)
            )

        if mismatched:
            self.events.emit(
                "search.embedding_dimension_mismatch",
                kind=kind.value,
                mismatched_count=mismatched,
                query_dimensions=len(query_vector),
            )

        logger.debug(
            "search.candidates_scored",
            extra={
                "kind": kind.value,
                "candidate_count": len(candidates),
                "scored_count": len(scored),
                "missing_embedding_count": missing,
                "mismatched_count": mismatched,
            },
        )

        # sort() is stable, so ties keep retrieval order
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [build_result(kind, item, score) for score, item in scored[:limit]]

    async def _reset_session(self, db: AsyncSession, kind: ItemKind) -> None:
        # A failed statement can leave the transaction aborted for the next query
        try:
            await db.rollback()
        except Exception as exc:
            self.events.emit(
                "search.session_reset_failed",
                kind=kind.value,
                error=str(exc),
            )

    def _respond(
        self,
        span: trace.Span,
        kind: ItemKind,
        query: str,
        mode: SearchMode,
        results: list[SearchResult],
        started: float,
        error: str | None = None,
    ) -> SearchResponse:
        elapsed = time.perf_counter() - started
        SEARCH_DURATION.labels(kind=kind.value, mode=mode).observe(elapsed)
        SEARCH_RESULTS.labels(kind=kind.value, mode=mode).observe(len(results))

        span.set_attribute(SEARCH_MODE, mode)
        span.set_attribute(SEARCH_RESULT_COUNT, len(results))

        logger.info(
            "search.completed",
            extra={
                "kind": kind.value,
                "mode": mode,
                "query_length": len(query),
                "results_count": len(results),
                "duration_ms": int(elapsed * 1000),
            },
        )

        return SearchResponse(
            kind=kind,
            query=query,
            mode=mode,
            results=results,  # type: ignore[arg-type]
            error=error,
        )
