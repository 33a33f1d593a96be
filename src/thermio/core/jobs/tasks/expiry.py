"""Deactivation of temporary users and vehicles past their expiry."""

from datetime import datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thermio.core.calendar import utc_now
from thermio.core.jobs.tasks.compliance import active_workspace_ids
from thermio.modules.users.repos import UserRepository
from thermio.modules.users.services import UserService
from thermio.modules.vehicles.repos import VehicleRepository
from thermio.modules.vehicles.services import VehicleService


log = structlog.get_logger()


async def run_expiry_pass(
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime,
) -> dict[str, int]:
    totals = {"users_expired": 0, "vehicles_expired": 0, "workspaces_failed": 0}

    for workspace_id in await active_workspace_ids(session_factory):
        async with session_factory() as session:
            try:
                totals["users_expired"] += await UserService(
                    UserRepository(session)
                ).expire_temporary(workspace_id, now)
                totals["vehicles_expired"] += await VehicleService(
                    VehicleRepository(session)
                ).expire_temporary(workspace_id, now)
                await session.commit()
            except Exception:
                await session.rollback()
                totals["workspaces_failed"] += 1
                log.exception(
                    "scheduled_workspace_failed",
                    job="expire_temporary_accounts",
                    workspace_id=str(workspace_id),
                )

    log.info("expire_temporary_accounts_complete", **totals)
    return totals


async def expire_temporary_accounts(ctx: dict[str, Any]) -> dict[str, int]:
    return await run_expiry_pass(ctx["db_session_factory"], utc_now())
