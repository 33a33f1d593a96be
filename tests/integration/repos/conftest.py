"""Fixtures for repository tests against a real Postgres.

Set ``TEST_DATABASE_URL`` (``postgresql+asyncpg://...``) to a disposable
database; the tables are created and dropped around every test. Without it
these tests are skipped.
"""

import os
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from thermio.core.audit.models import WorkspaceEvent  # noqa: F401
from thermio.core.database import make_session_factory
from thermio.core.database.base import Base
from thermio.modules.exports.models import ExportRecord  # noqa: F401
from thermio.modules.notifications.models import Notification  # noqa: F401
from thermio.modules.temp_logs.models import TempLog, TempLogEvent  # noqa: F401
from thermio.modules.users.models import User  # noqa: F401
from thermio.modules.vehicles.models import Vehicle, ZoneType
from thermio.modules.workspaces.models import Workspace


TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL is not set")

    # One connection per session, so concurrent sessions really are concurrent
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def fleet(session_factory) -> Vehicle:
    """A committed workspace with one chiller vehicle."""
    async with session_factory() as session:
        workspace = Workspace(name="Cold Co", slug=f"cold-{uuid4().hex[:8]}")
        session.add(workspace)
        await session.flush()
        vehicle = Vehicle(
            workspace_id=workspace.id,
            registration="1ABC123",
            zone_type=ZoneType.CHILLER,
        )
        session.add(vehicle)
        await session.commit()
    return vehicle
