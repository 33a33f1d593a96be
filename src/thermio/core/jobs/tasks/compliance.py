"""Hourly compliance work: scheduled exports and log retention.

The job fires at minute 0 of every hour. Whether anything happens for a
workspace is decided on that workspace's own clock (see
``thermio.modules.exports.policy``).
"""

from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thermio.config import Settings, get_settings
from thermio.core.calendar import utc_now
from thermio.modules.exports.repos import ExportRepository
from thermio.modules.exports.services import ExportService
from thermio.modules.temp_logs.repos import TempLogRepository
from thermio.modules.workspaces.repos import WorkspaceRepository
from thermio.modules.workspaces.settings import resolve_settings


log = structlog.get_logger()


async def active_workspace_ids(
    session_factory: async_sessionmaker[AsyncSession],
) -> list[UUID]:
    async with session_factory() as session:
        workspaces = await WorkspaceRepository(session).list_active()
        return [workspace.id for workspace in workspaces]


async def run_compliance_pass(
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime,
    app_settings: Settings | None = None,
) -> dict[str, int]:
    """Schedule due exports and purge expired logs for every active workspace.

    Each workspace is processed in its own transaction. A failure is logged
    and the pass moves on to the next workspace.

    Returns:
        Counts of exports scheduled, logs purged and workspaces failed
    """
    app_settings = app_settings or get_settings()
    totals = {"exports_scheduled": 0, "logs_purged": 0, "workspaces_failed": 0}

    for workspace_id in await active_workspace_ids(session_factory):
        async with session_factory() as session:
            try:
                workspace = await WorkspaceRepository(session).get_by_id(workspace_id)
                if workspace is None:
                    continue
                settings = resolve_settings(workspace, app_settings)
                service = ExportService(
                    ExportRepository(session), TempLogRepository(session)
                )
                if await service.schedule_due_export(workspace, settings, now):
                    totals["exports_scheduled"] += 1
                totals["logs_purged"] += await service.purge_expired_logs(
                    workspace, settings, now
                )
                await session.commit()
            except Exception:
                await session.rollback()
                totals["workspaces_failed"] += 1
                log.exception(
                    "scheduled_workspace_failed",
                    job="hourly_compliance",
                    workspace_id=str(workspace_id),
                )

    log.info("hourly_compliance_complete", **totals)
    return totals


async def hourly_compliance(ctx: dict[str, Any]) -> dict[str, int]:
    """ARQ entry point for :func:`run_compliance_pass`."""
    return await run_compliance_pass(ctx["db_session_factory"], utc_now())
