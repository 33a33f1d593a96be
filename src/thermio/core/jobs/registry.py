"""Job queue access for the API process.

The worker owns the hourly cron schedule. The API only queues ad-hoc runs of
the same jobs, keyed by the UTC hour so repeated manual triggers within one
hour collapse into a single queued job. Cron runs carry arq's own
``cron:<name>:<timestamp>`` ids and are not deduplicated against them.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from arq import ArqRedis, create_pool

from thermio.core.errors import JobQueueUnavailableError, NotFoundError
from thermio.core.jobs.utils import get_redis_settings


log = structlog.get_logger()

SCHEDULED_JOBS = ("hourly_compliance", "expire_temporary_accounts")


class QueuePool:
    """Holds the connection pool opened at application startup."""

    pool: ArqRedis | None = None


async def open_queue() -> ArqRedis:
    if QueuePool.pool is None:
        QueuePool.pool = await create_pool(get_redis_settings())
        log.info("job_queue_opened")
    return QueuePool.pool


def get_queue() -> ArqRedis:
    """Return the open pool.

    Raises:
        JobQueueUnavailableError: If Redis was unreachable at startup
    """
    if QueuePool.pool is None:
        raise JobQueueUnavailableError()
    return QueuePool.pool


async def close_queue() -> None:
    if QueuePool.pool is not None:
        await QueuePool.pool.close()
        QueuePool.pool = None
        log.info("job_queue_closed")


def hourly_job_id(job_name: str, now: datetime) -> str:
    """Job id shared by every run of ``job_name`` within one UTC hour.

    >>> hourly_job_id("hourly_compliance", datetime(2024, 3, 8, 1, 42, tzinfo=UTC))
    'hourly_compliance:2024-03-08T01'
    """
    return f"{job_name}:{now.astimezone(UTC):%Y-%m-%dT%H}"


async def enqueue(
    job_name: str,
    *args: Any,
    _defer_by: timedelta | None = None,
    _job_id: str | None = None,
    **kwargs: Any,
) -> Any:
    """Queue a job; returns None when arq already holds ``_job_id``."""
    return await get_queue().enqueue_job(
        job_name,
        *args,
        _defer_by=_defer_by,
        _job_id=_job_id,
        **kwargs,
    )


async def trigger_scheduled_job(job_name: str, now: datetime) -> tuple[str, bool]:
    """Run one of the hourly jobs now instead of waiting for the cron.

    Returns:
        The hourly job id and whether a new job was queued

    Raises:
        NotFoundError: If ``job_name`` is not a scheduled job
        JobQueueUnavailableError: If the queue is not connected
    """
    if job_name not in SCHEDULED_JOBS:
        raise NotFoundError("Unknown job", resource="job", resource_id=job_name)

    job_id = hourly_job_id(job_name, now)
    job = await enqueue(job_name, _job_id=job_id)
    log.info("scheduled_job_triggered", job=job_name, job_id=job_id, queued=bool(job))
    return job_id, job is not None
