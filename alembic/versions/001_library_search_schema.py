"""Library search schema

Revision ID: 001
Revises:
Create Date: 2026-09-28 10:00:00.000000

Creates the tables read by workflow and skill search:
1. users, tags
2. workflows / skills with owner, system flag, visibility and soft delete
3. workflow_tags / skill_tags, skill_attachments
4. workflow_references / skill_references - system items imported by a user
5. workflow_embeddings / skill_embeddings - one pgvector embedding per item
"""

from alembic import op
import sqlalchemy as sa
from pgvector.sqlalchemy import Vector

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

# text-embedding-3-small dimension
EMBEDDING_DIM = 1536

ITEM_KINDS = ("workflow", "skill")


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "tags",
        _uuid_pk(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
    )

    for kind in ITEM_KINDS:
        table = f"{kind}s"
        extra_columns = (
            [sa.Column("complexity", sa.String(20), nullable=True)]
            if kind == "workflow"
            else []
        )
        op.create_table(
            table,
            _uuid_pk(),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("content", sa.Text(), nullable=False, server_default=""),
            *extra_columns,
            sa.Column(
                "user_id",
                sa.UUID(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=True,
            ),
            sa.Column(
                f"is_system_{kind}",
                sa.Boolean(),
                nullable=False,
                server_default=sa.text("false"),
            ),
            sa.Column(
                "is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")
            ),
            sa.Column(
                "visibility", sa.String(20), nullable=False, server_default="PRIVATE"
            ),
            sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
            _timestamp("created_at"),
            _timestamp("updated_at"),
        )
        op.create_index(f"ix_{table}_name", table, ["name"])
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_is_system_{kind}", table, [f"is_system_{kind}"])
        op.create_index(f"ix_{table}_visibility", table, ["visibility"])
        op.create_index(f"ix_{table}_created_at", table, ["created_at"])

        op.create_table(
            f"{kind}_tags",
            sa.Column(
                f"{kind}_id",
                sa.UUID(),
                sa.ForeignKey(f"{table}.id", ondelete="CASCADE"),
                primary_key=True,
            ),
            sa.Column(
                "tag_id",
                sa.UUID(),
                sa.ForeignKey("tags.id", ondelete="CASCADE"),
                primary_key=True,
            ),
        )

        op.create_table(
            f"{kind}_references",
            _uuid_pk(),
            sa.Column(
                "user_id",
                sa.UUID(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                f"{kind}_id",
                sa.UUID(),
                sa.ForeignKey(f"{table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            _timestamp("created_at"),
            sa.UniqueConstraint("user_id", f"{kind}_id", name=f"uq_{kind}_reference"),
        )
        op.create_index(
            f"ix_{kind}_references_user_id", f"{kind}_references", ["user_id"]
        )

        op.create_table(
            f"{kind}_embeddings",
            _uuid_pk(),
            sa.Column(
                f"{kind}_id",
                sa.UUID(),
                sa.ForeignKey(f"{table}.id", ondelete="CASCADE"),
                nullable=False,
                unique=True,
            ),
            sa.Column("embedding", Vector(EMBEDDING_DIM), nullable=False),
            sa.Column("search_text", sa.Text(), nullable=False, server_default=""),
            _timestamp("updated_at"),
        )

    op.create_table(
        "skill_attachments",
        _uuid_pk(),
        sa.Column(
            "skill_id",
            sa.UUID(),
            sa.ForeignKey("skills.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("file_name", sa.String(255), nullable=False),
    )
    op.create_index("ix_skill_attachments_skill_id", "skill_attachments", ["skill_id"])


def downgrade() -> None:
    op.drop_table("skill_attachments")
    for kind in reversed(ITEM_KINDS):
        op.drop_table(f"{kind}_embeddings")
        op.drop_table(f"{kind}_references")
        op.drop_table(f"{kind}_tags")
        op.drop_table(f"{kind}s")
    op.drop_table("tags")
    op.drop_table("users")
    # Note: other databases objects may still depend on the vector extension
    op.execute("DROP EXTENSION IF EXISTS vector")
