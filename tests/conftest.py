"""Shared fixtures: in-memory interaction store and service doubles."""

import os

# Keep the test app free of the process-wide Prometheus registry and
# JSON log output; must be set before ``vta.app`` is imported.
os.environ.setdefault("VTA_METRICS__ENABLED", "false")
os.environ.setdefault("VTA_LOGGING__JSON_OUTPUT", "false")

from collections.abc import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from vta.infra.db.models import Base  # noqa: E402
from vta.infra.db.repository import InteractionRepository  # noqa: E402


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def repository(session_factory) -> InteractionRepository:
    return InteractionRepository(session_factory)


@pytest.fixture
def embedder() -> MagicMock:
    embedder = MagicMock()
    embedder.model_name = "text-embedding-3-small"
    embedder.embed = AsyncMock(return_value=[0.1, 0.2, 0.3])
    return embedder


@pytest.fixture
def course_index() -> MagicMock:
    index = MagicMock()
    index.namespace = "MCY660"
    index.open_index = AsyncMock(return_value=object())
    index.query = AsyncMock(
        return_value=[
            {"text": "Risk = threat x vulnerability x impact", "source": "week2.pdf"},
            {"text": "Qualitative risk uses ordinal scales", "source": "week3.pdf"},
        ]
    )
    return index
