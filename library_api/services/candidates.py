"""Authorization-scoped candidate sets for workflow and skill search."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from opentelemetry import trace
from sqlalchemy import ColumnElement, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.telemetry import (
    SEARCH_AUTHENTICATED,
    SEARCH_CANDIDATE_COUNT,
    SEARCH_KIND,
)
from ..models.associations import SkillReference, Visibility, WorkflowReference
from ..models.embedding import SkillEmbedding, WorkflowEmbedding
from ..models.skill import Skill
from ..models.workflow import Workflow
from ..schemas.search import ItemKind

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("library-api.candidates")

LibraryItem = Workflow | Skill


@dataclass(frozen=True)
class KindTables:
    """ORM entities backing one item kind."""

    item: Any
    embedding: Any
    embedding_item_id: Any
    reference_item_id: Any
    reference_user_id: Any


KIND_TABLES: dict[ItemKind, KindTables] = {
    ItemKind.WORKFLOW: KindTables(
        item=Workflow,
        embedding=WorkflowEmbedding,
        embedding_item_id=WorkflowEmbedding.workflow_id,
        reference_item_id=WorkflowReference.workflow_id,
        reference_user_id=WorkflowReference.user_id,
    ),
    ItemKind.SKILL: KindTables(
        item=Skill,
        embedding=SkillEmbedding,
        embedding_item_id=SkillEmbedding.skill_id,
        reference_item_id=SkillReference.skill_id,
        reference_user_id=SkillReference.user_id,
    ),
}


@dataclass
class Candidate:
    """An item the caller may see, with its stored embedding if one exists."""

    item: LibraryItem
    embedding: Sequence[float] | None


def visibility_predicate(kind: ItemKind, caller_id: UUID | None) -> ColumnElement[bool]:
    """Build the WHERE clause selecting the items visible to a caller.

    Every candidate must be active and not soft-deleted. Anonymous callers see
    public system items only. Authenticated callers additionally see every item
    they own, whatever its visibility, and system items they have referenced
    into their library even when those are private. The same rule applies to
    workflows and skills.
    """
    tables = KIND_TABLES[kind]
    model = tables.item

    live = and_(model.is_active.is_(True), model.deleted_at.is_(None))
    public_system = and_(
        model.is_system.is_(True),
        model.visibility == Visibility.PUBLIC.value,
    )

    if caller_id is None:
        return and_(live, public_system)

    referenced_ids = select(tables.reference_item_id).where(
        tables.reference_user_id == caller_id
    )
    return and_(
        live,
        or_(
            model.user_id == caller_id,
            public_system,
            and_(model.is_system.is_(True), model.id.in_(referenced_ids)),
        ),
    )


async def load_candidates(
    db: AsyncSession,
    kind: ItemKind,
    caller_id: UUID | None,
) -> list[Candidate]:
    """Load the caller's candidate set joined with stored embeddings.

    Args:
        db: Database session.
        kind: Item kind to load.
        caller_id: Authenticated user, or None for anonymous callers.

    Returns:
        One Candidate per visible item, newest first. ``embedding`` is None
        when the indexing job has not produced a vector for the item yet.
    """
    tables = KIND_TABLES[kind]
    model = tables.item

    with tracer.start_as_current_span("candidates.load") as span:
        span.set_attribute(SEARCH_KIND, kind.value)
        span.set_attribute(SEARCH_AUTHENTICATED, caller_id is not None)

        stmt = (
            select(model, tables.embedding.embedding)
            .outerjoin(tables.embedding, tables.embedding_item_id == model.id)
            .where(visibility_predicate(kind, caller_id))
            .order_by(model.created_at.desc(), model.id)
        )
        result = await db.execute(stmt)

        candidates = [
            Candidate(item=item, embedding=embedding)
            for item, embedding in result.all()
        ]

        span.set_attribute(SEARCH_CANDIDATE_COUNT, len(candidates))
        logger.debug(
            "candidates.loaded",
            extra={
                "kind": kind.value,
                "authenticated": caller_id is not None,
                "candidate_count": len(candidates),
            },
        )

        return candidates
