"""ARQ worker configuration.

Run with::

    arq thermio.core.jobs.worker.WorkerSettings

Both jobs fire at minute 0 of every UTC hour. Whether a workspace is due
for an export or a retention purge depends on its own local hour, so the
jobs run hourly and decide per workspace.
"""

from typing import Any, ClassVar

import structlog
from arq import cron

from thermio.config import settings
from thermio.core.database import make_engine, make_session_factory
from thermio.core.jobs.tasks import expire_temporary_accounts, hourly_compliance
from thermio.core.jobs.utils import get_redis_settings
from thermio.core.logging import configure_logging


log = structlog.get_logger()


async def startup(ctx: dict[str, Any]) -> None:
    """Open the database engine shared by all jobs of this worker."""
    configure_logging(
        log_level=settings.log_level,
        json_output=settings.is_production,
    )
    engine = make_engine(pool_size=5, max_overflow=10)
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = make_session_factory(engine)
    log.info("worker_startup", environment=settings.environment)


async def shutdown(ctx: dict[str, Any]) -> None:
    engine = ctx.get("db_engine")
    if engine is not None:
        await engine.dispose()
    log.info("worker_shutdown")


class WorkerSettings:
    functions: ClassVar[list[Any]] = [hourly_compliance, expire_temporary_accounts]

    cron_jobs: ClassVar[list[Any]] = [
        cron(hourly_compliance, minute=0, unique=True),
        cron(expire_temporary_accounts, minute=0, unique=True),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 900  # one pass walks every workspace
    keep_result = 3600
    retry_jobs = False  # cron jobs run again next hour
