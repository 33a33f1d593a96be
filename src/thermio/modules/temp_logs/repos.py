"""Temperature log repository.

Writes go through two primitives only: an idempotent conditional insert for
the day's log and a version-checked update per transition.
"""

from datetime import date, datetime
from typing import Annotated
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from thermio.api.dependencies import DBSession
from thermio.modules.temp_logs.lifecycle import Transition
from thermio.modules.temp_logs.models import TempLog, TempLogEvent, TempLogEventType


class TempLogRepository:
    """Repository for TempLog and its transcript."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_id(self, log_id: UUID, workspace_id: UUID) -> TempLog | None:
        result = await self.session.execute(
            select(TempLog)
            .where(TempLog.id == log_id, TempLog.workspace_id == workspace_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_key(
        self, workspace_id: UUID, vehicle_id: UUID, log_date: date
    ) -> TempLog | None:
        result = await self.session.execute(
            select(TempLog)
            .where(
                TempLog.workspace_id == workspace_id,
                TempLog.vehicle_id == vehicle_id,
                TempLog.log_date == log_date,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        workspace_id: UUID,
        vehicle_id: UUID,
        log_date: date,
        driver_id: UUID | None,
    ) -> tuple[TempLog, bool]:
        """Return the log for the key, inserting an empty one if absent.

        ``INSERT ... ON CONFLICT DO NOTHING`` on the unique key means
        concurrent first visits converge on a single row.

        Returns:
            Tuple of (log, whether this call created it)
        """
        stmt = (
            pg_insert(TempLog)
            .values(
                id=uuid4(),
                workspace_id=workspace_id,
                vehicle_id=vehicle_id,
                driver_id=driver_id,
                log_date=log_date,
                temps=[],
                checklist_done=False,
                shift_done=False,
                version=1,
            )
            .on_conflict_do_nothing(
                index_elements=["workspace_id", "vehicle_id", "log_date"]
            )
            .returning(TempLog.id)
        )
        inserted_id = (await self.session.execute(stmt)).scalar_one_or_none()

        log = await self.get_by_key(workspace_id, vehicle_id, log_date)
        if log is None:
            raise RuntimeError("temp log vanished after conditional insert")

        created = inserted_id is not None
        if created:
            self.session.add(
                TempLogEvent(
                    log_id=log.id,
                    event_type=TempLogEventType.LOG_OPENED,
                    version=log.version,
                    actor_id=driver_id,
                    payload={"log_date": log_date.isoformat()},
                )
            )
            await self.session.flush()
        return log, created

    async def apply_transition(
        self,
        log: TempLog,
        transition: Transition,
        actor_id: UUID | None,
    ) -> TempLog | None:
        """Persist ``transition`` if the log is still at the version it was read at.

        Returns:
            The updated log, or None if another writer got there first
        """
        stmt = (
            update(TempLog)
            .where(TempLog.id == log.id, TempLog.version == log.version)
            .values(**transition.changes, version=TempLog.version + 1)
            .returning(TempLog)
        )
        result = await self.session.execute(
            select(TempLog)
            .from_statement(stmt)
            .execution_options(populate_existing=True)
        )
        updated = result.scalar_one_or_none()
        if updated is None:
            return None

        self.session.add(
            TempLogEvent(
                log_id=updated.id,
                event_type=transition.event,
                version=updated.version,
                actor_id=actor_id,
                payload=transition.payload,
            )
        )
        await self.session.flush()
        return updated

    async def list_events(self, log_id: UUID) -> list[TempLogEvent]:
        result = await self.session.execute(
            select(TempLogEvent)
            .where(TempLogEvent.log_id == log_id)
            .order_by(TempLogEvent.version)
        )
        return list(result.scalars().all())

    async def list_recent(self, workspace_id: UUID, since: datetime) -> list[TempLog]:
        """Logs touched since ``since``; input of the live board."""
        result = await self.session.execute(
            select(TempLog)
            .where(TempLog.workspace_id == workspace_id, TempLog.updated_at >= since)
            .order_by(TempLog.updated_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_date_range(
        self,
        workspace_id: UUID,
        start: date,
        end: date,
        *,
        vehicle_id: UUID | None = None,
        driver_id: UUID | None = None,
    ) -> list[TempLog]:
        """Logs dated within ``[start, end]``, newest date first."""
        stmt = select(TempLog).where(
            TempLog.workspace_id == workspace_id,
            TempLog.log_date >= start,
            TempLog.log_date <= end,
        )
        if vehicle_id:
            stmt = stmt.where(TempLog.vehicle_id == vehicle_id)
        if driver_id:
            stmt = stmt.where(TempLog.driver_id == driver_id)
        result = await self.session.execute(
            stmt.order_by(TempLog.log_date.desc(), TempLog.created_at)
        )
        return list(result.scalars().all())

    async def list_history(
        self,
        workspace_id: UUID,
        *,
        vehicle_id: UUID | None = None,
        driver_id: UUID | None = None,
    ) -> list[TempLog]:
        """Every log of one vehicle or driver, oldest first."""
        stmt = select(TempLog).where(TempLog.workspace_id == workspace_id)
        if vehicle_id:
            stmt = stmt.where(TempLog.vehicle_id == vehicle_id)
        if driver_id:
            stmt = stmt.where(TempLog.driver_id == driver_id)
        result = await self.session.execute(
            stmt.order_by(TempLog.log_date, TempLog.created_at)
        )
        return list(result.scalars().all())

    async def count_by_date_range(
        self, workspace_id: UUID, start: date, end: date
    ) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(TempLog)
            .where(
                TempLog.workspace_id == workspace_id,
                TempLog.log_date >= start,
                TempLog.log_date <= end,
            )
        )
        return result.scalar_one()

    async def purge_before(self, workspace_id: UUID, cutoff: date) -> int:
        """Delete logs dated strictly before ``cutoff``.

        Returns:
            Number of logs deleted
        """
        result = await self.session.execute(
            delete(TempLog).where(
                TempLog.workspace_id == workspace_id, TempLog.log_date < cutoff
            )
        )
        return result.rowcount or 0


TempLogRepo = Annotated[TempLogRepository, Depends(TempLogRepository)]
