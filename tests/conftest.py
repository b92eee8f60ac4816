"""Shared test fixtures and configuration."""

import asyncio
import os
from collections.abc import AsyncGenerator, Sequence
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set up test environment BEFORE importing app modules that use get_settings
os.environ.pop("OPENAI_API_KEY", None)
os.environ["ENV"] = "test"

from library_api.config import get_settings  # noqa: E402
from library_api.database import Base, get_db  # noqa: E402
from library_api.main import app  # noqa: E402
from library_api.models import (  # noqa: E402
    EMBEDDING_DIM,
    Skill,
    SkillAttachment,
    SkillEmbedding,
    SkillReference,
    Tag,
    User,
    Visibility,
    Workflow,
    WorkflowEmbedding,
    WorkflowReference,
)
from library_api.routes.search import get_search_service  # noqa: E402
from library_api.services.embedding_gateway import EmbeddingGateway  # noqa: E402
from library_api.services.semantic_search import SemanticSearchService  # noqa: E402

# Clear the lru_cache on get_settings to pick up test env vars
get_settings.cache_clear()


# Test database URL (in-memory SQLite for speed)
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def unit_vector(index: int, dim: int = EMBEDDING_DIM) -> list[float]:
    """One-hot vector; distinct indexes are orthogonal."""
    vector = [0.0] * dim
    vector[index] = 1.0
    return vector


def blend(weights: dict[int, float], dim: int = EMBEDDING_DIM) -> list[float]:
    """Vector with the given weight on each axis."""
    vector = [0.0] * dim
    for index, weight in weights.items():
        vector[index] = weight
    return vector


class FakeEmbeddingProvider:
    """Embedding provider returning canned vectors."""

    def __init__(
        self,
        vector: Sequence[Any] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        response: list[Any] | None = None,
    ):
        self.vector = list(vector) if vector is not None else unit_vector(0)
        self.error = error
        self.delay = delay
        self.response = response
        self.calls: list[dict[str, Any]] = []

    async def embed_texts(
        self,
        texts: list[str],
        model_id: str | None = None,
        dimensions: int | None = None,
    ) -> list[list[float]]:
        self.calls.append(
            {"texts": texts, "model_id": model_id, "dimensions": dimensions}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return [list(self.vector) for _ in texts]


class RecordingEventSink:
    """Event sink that keeps every emitted event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class LibraryFactory:
    """Create workflows, skills, embeddings and references in the test DB."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._tags: dict[str, Tag] = {}

    async def _tags_for(self, names: Sequence[str]) -> list[Tag]:
        tags = []
        for tag_name in names:
            if tag_name not in self._tags:
                tag = Tag(name=tag_name)
                self.db.add(tag)
                self._tags[tag_name] = tag
            tags.append(self._tags[tag_name])
        return tags

    async def workflow(
        self,
        name: str,
        *,
        owner: User | None = None,
        system: bool = False,
        visibility: Visibility = Visibility.PRIVATE,
        active: bool = True,
        deleted: bool = False,
        description: str | None = None,
        content: str = "",
        complexity: str | None = None,
        tags: Sequence[str] = (),
        embedding: Sequence[float] | None = None,
    ) -> Workflow:
        workflow = Workflow(
            name=name,
            description=description,
            content=content,
            complexity=complexity,
            user_id=owner.id if owner else None,
            is_system_workflow=system,
            is_active=active,
            visibility=visibility.value,
            deleted_at=datetime.now(timezone.utc) if deleted else None,
            tags=await self._tags_for(tags),
        )
        self.db.add(workflow)
        await self.db.flush()
        if embedding is not None:
            self.db.add(
                WorkflowEmbedding(
                    workflow_id=workflow.id,
                    embedding=list(embedding),
                    search_text=name.lower(),
                )
            )
        await self.db.commit()
        return workflow

    async def skill(
        self,
        name: str,
        *,
        owner: User | None = None,
        system: bool = False,
        visibility: Visibility = Visibility.PRIVATE,
        active: bool = True,
        deleted: bool = False,
        description: str | None = None,
        content: str = "",
        tags: Sequence[str] = (),
        attachments: Sequence[str] = (),
        embedding: Sequence[float] | None = None,
    ) -> Skill:
        skill = Skill(
            name=name,
            description=description,
            content=content,
            user_id=owner.id if owner else None,
            is_system_skill=system,
            is_active=active,
            visibility=visibility.value,
            deleted_at=datetime.now(timezone.utc) if deleted else None,
            tags=await self._tags_for(tags),
            attachments=[SkillAttachment(file_name=f) for f in attachments],
        )
        self.db.add(skill)
        await self.db.flush()
        if embedding is not None:
            self.db.add(
                SkillEmbedding(
                    skill_id=skill.id,
                    embedding=list(embedding),
                    search_text=name.lower(),
                )
            )
        await self.db.commit()
        return skill

    async def reference(self, user: User, item: Workflow | Skill) -> None:
        if isinstance(item, Workflow):
            self.db.add(WorkflowReference(user_id=user.id, workflow_id=item.id))
        else:
            self.db.add(SkillReference(user_id=user.id, skill_id=item.id))
        await self.db.commit()


def ids(results: Sequence[Any]) -> set[UUID]:
    return {r.id for r in results}


def make_service(
    provider: FakeEmbeddingProvider | None = None,
    events: RecordingEventSink | None = None,
    timeout_seconds: float = 1.0,
) -> SemanticSearchService:
    return SemanticSearchService(
        gateway=EmbeddingGateway(
            provider=provider,
            dimensions=EMBEDDING_DIM,
            timeout_seconds=timeout_seconds,
            events=events,
        ),
        events=events,
    )


@pytest_asyncio.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def library(db_session: AsyncSession) -> LibraryFactory:
    return LibraryFactory(db_session)


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(email="test@example.com", name="Test User")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user_2(db_session: AsyncSession) -> User:
    """Create a second test user."""
    user = User(email="test2@example.com", name="Test User 2")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database and search service overrides.

    The search service embeds every query as ``unit_vector(0)``.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_service] = lambda: make_service(
        FakeEmbeddingProvider(unit_vector(0))
    )

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
