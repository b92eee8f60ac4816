"""Convert library items into serializable search results."""

from ..models.skill import Skill
from ..models.workflow import Workflow
from ..schemas.search import (
    ItemKind,
    ResultSource,
    SearchResult,
    SkillSearchResult,
    WorkflowSearchResult,
)
from .candidates import LibraryItem


def result_source(item: LibraryItem) -> ResultSource:
    return "system" if item.is_system else "user"


def _clamp_score(similarity: float) -> float:
    # Opposed vectors carry no relevance; results report 0..1
    return min(1.0, max(0.0, similarity))


def build_result(kind: ItemKind, item: LibraryItem, similarity: float) -> SearchResult:
    tags = sorted(tag.name for tag in item.tags)
    score = _clamp_score(similarity)

    if kind is ItemKind.WORKFLOW:
        assert isinstance(item, Workflow)
        return WorkflowSearchResult(
            id=item.id,
            title=item.name,
            description=item.description or "",
            tags=tags,
            complexity=item.complexity,
            similarity=score,
            source=result_source(item),
        )

    assert isinstance(item, Skill)
    return SkillSearchResult(
        id=item.id,
        name=item.name,
        description=item.description or "",
        tags=tags,
        attachment_count=len(item.attachments),
        similarity=score,
        source=result_source(item),
    )
