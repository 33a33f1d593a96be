"""Unit tests for the API-side job queue."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import pytest

from thermio.config import Settings
from thermio.core.errors import JobQueueUnavailableError, NotFoundError
from thermio.core.jobs.registry import (
    QueuePool,
    close_queue,
    enqueue,
    get_queue,
    hourly_job_id,
    open_queue,
    trigger_scheduled_job,
)
from thermio.core.jobs.utils import get_redis_settings


pytestmark = pytest.mark.unit

NOW = datetime(2024, 3, 8, 1, 42, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_queue():
    QueuePool.pool = None
    yield
    QueuePool.pool = None


@pytest.fixture
def pool() -> AsyncMock:
    QueuePool.pool = AsyncMock()
    return QueuePool.pool


class TestQueueLifecycle:
    """Opening and closing the pool held by the API process."""

    async def test_open_creates_pool_once(self):
        created = AsyncMock()

        with patch(
            "thermio.core.jobs.registry.create_pool", new_callable=AsyncMock
        ) as mock_create:
            mock_create.return_value = created

            assert await open_queue() is created
            assert await open_queue() is created

        mock_create.assert_awaited_once()

    def test_get_queue_without_pool(self):
        with pytest.raises(JobQueueUnavailableError):
            get_queue()

    async def test_close(self, pool):
        await close_queue()

        pool.close.assert_awaited_once()
        assert QueuePool.pool is None

    async def test_close_without_pool(self):
        await close_queue()

        assert QueuePool.pool is None


class TestHourlyJobId:
    def test_keyed_by_utc_hour(self):
        job_id = hourly_job_id("hourly_compliance", NOW)

        assert job_id == "hourly_compliance:2024-03-08T01"

    def test_local_offsets_normalized(self):
        perth = NOW.astimezone(ZoneInfo("Australia/Perth"))

        assert hourly_job_id("hourly_compliance", perth) == hourly_job_id(
            "hourly_compliance", NOW
        )

    def test_same_hour_shares_id(self):
        later = NOW + timedelta(minutes=15)

        assert hourly_job_id("x", NOW) == hourly_job_id("x", later)
        assert hourly_job_id("x", NOW) != hourly_job_id("x", later + timedelta(hours=1))

    def test_distinct_from_cron_ids(self):
        # arq names cron runs "cron:<name>:<ms>", so manual ids never collide
        assert not hourly_job_id("hourly_compliance", NOW).startswith("cron:")


class TestEnqueue:
    async def test_passes_options(self, pool):
        await enqueue("expire_temporary_accounts", _defer_by=timedelta(minutes=5))

        pool.enqueue_job.assert_awaited_once_with(
            "expire_temporary_accounts",
            _defer_by=timedelta(minutes=5),
            _job_id=None,
        )

    async def test_without_pool(self):
        with pytest.raises(JobQueueUnavailableError):
            await enqueue("hourly_compliance")


class TestTriggerScheduledJob:
    async def test_queues_with_hourly_id(self, pool):
        job_id, queued = await trigger_scheduled_job("hourly_compliance", NOW)

        assert job_id == "hourly_compliance:2024-03-08T01"
        assert queued is True
        pool.enqueue_job.assert_awaited_once_with(
            "hourly_compliance",
            _defer_by=None,
            _job_id="hourly_compliance:2024-03-08T01",
        )

    async def test_already_queued_this_hour(self, pool):
        pool.enqueue_job.return_value = None

        _, queued = await trigger_scheduled_job("expire_temporary_accounts", NOW)

        assert queued is False

    async def test_unknown_job(self, pool):
        with pytest.raises(NotFoundError) as exc_info:
            await trigger_scheduled_job("drop_tables", NOW)

        assert exc_info.value.details["resource_id"] == "drop_tables"
        pool.enqueue_job.assert_not_awaited()


def test_redis_settings_from_url():
    redis = get_redis_settings(
        Settings(redis_url="redis://:secret@cache.internal:6380/2")
    )

    assert redis.host == "cache.internal"
    assert redis.port == 6380
    assert redis.database == 2
    assert redis.password == "secret"
