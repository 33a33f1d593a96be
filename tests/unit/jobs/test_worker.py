"""Unit tests for the arq worker hooks and schedule."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from thermio.core.jobs import worker
from thermio.core.jobs.tasks import expire_temporary_accounts, hourly_compliance


pytestmark = pytest.mark.unit


async def test_startup_builds_session_factory():
    engine = MagicMock()
    ctx: dict = {}

    with (
        patch.object(worker, "make_engine", return_value=engine) as make_engine,
        patch.object(worker, "configure_logging"),
    ):
        await worker.startup(ctx)

    make_engine.assert_called_once_with(pool_size=5, max_overflow=10)
    assert ctx["db_engine"] is engine
    assert ctx["db_session_factory"].kw["bind"] is engine


async def test_shutdown_disposes_engine():
    engine = MagicMock()
    engine.dispose = AsyncMock()

    await worker.shutdown({"db_engine": engine})

    engine.dispose.assert_awaited_once()


async def test_shutdown_without_engine():
    await worker.shutdown({})


def test_both_jobs_run_on_the_hour():
    crons = {c.coroutine: c for c in worker.WorkerSettings.cron_jobs}

    assert set(crons) == {hourly_compliance, expire_temporary_accounts}
    assert all(c.minute == 0 and c.unique for c in crons.values())
    assert worker.WorkerSettings.retry_jobs is False
