"""Workflow model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, synonym
from sqlalchemy.sql import func

from ..database import Base
from .associations import Visibility

if TYPE_CHECKING:
    from .tag import Tag


class Workflow(Base):
    """Reusable multi-stage workflow definition for coding agents."""

    __tablename__ = "workflows"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=""
    )
    complexity: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # NULL for system workflows seeded without an owning account
    user_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    is_system_workflow: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false", index=True
    )
    is_system: Mapped[bool] = synonym("is_system_workflow")
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )
    visibility: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Visibility.PRIVATE.value,
        server_default=Visibility.PRIVATE.value,
        index=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False,
    )

    tags: Mapped[list["Tag"]] = relationship(
        "Tag", secondary="workflow_tags", lazy="selectin", order_by="Tag.name"
    )

    def __repr__(self) -> str:
        return f"<Workflow(id={self.id}, name={self.name}, system={self.is_system_workflow})>"
