"""SQLAlchemy models for the application."""

from .associations import (
    SkillReference,
    SkillTag,
    Visibility,
    WorkflowReference,
    WorkflowTag,
)
from .embedding import EMBEDDING_DIM, SkillEmbedding, WorkflowEmbedding
from .skill import Skill, SkillAttachment
from .tag import Tag
from .user import User
from .workflow import Workflow

__all__ = [
    "EMBEDDING_DIM",
    "Skill",
    "SkillAttachment",
    "SkillEmbedding",
    "SkillReference",
    "SkillTag",
    "Tag",
    "User",
    "Visibility",
    "Workflow",
    "WorkflowEmbedding",
    "WorkflowReference",
    "WorkflowTag",
]
