"""Export record queries."""

from datetime import date
from typing import Annotated, Any
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert

from thermio.api.dependencies import DBSession
from thermio.modules.exports.models import ExportRecord, ExportStatus


class ExportRepository:
    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create_if_absent(
        self,
        workspace_id: UUID,
        kind: str,
        period_start: date,
        period_end: date,
        **values: Any,
    ) -> ExportRecord | None:
        """Insert a record for the period unless one already exists.

        Returns:
            The new record, or None if the period was already recorded
        """
        stmt = (
            pg_insert(ExportRecord)
            .values(
                id=uuid4(),
                workspace_id=workspace_id,
                kind=kind,
                period_start=period_start,
                period_end=period_end,
                status=values.pop("status", ExportStatus.PENDING),
                log_count=values.pop("log_count", 0),
                recipients=values.pop("recipients", []),
                **values,
            )
            .on_conflict_do_nothing(
                index_elements=["workspace_id", "kind", "period_start", "period_end"]
            )
            .returning(ExportRecord)
        )
        result = await self.session.execute(
            select(ExportRecord)
            .from_statement(stmt)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_period(
        self, workspace_id: UUID, kind: str, period_start: date, period_end: date
    ) -> ExportRecord | None:
        result = await self.session.execute(
            select(ExportRecord).where(
                ExportRecord.workspace_id == workspace_id,
                ExportRecord.kind == kind,
                ExportRecord.period_start == period_start,
                ExportRecord.period_end == period_end,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_workspace(self, workspace_id: UUID) -> list[ExportRecord]:
        result = await self.session.execute(
            select(ExportRecord)
            .where(ExportRecord.workspace_id == workspace_id)
            .order_by(ExportRecord.created_at.desc())
        )
        return list(result.scalars().all())


ExportRepo = Annotated[ExportRepository, Depends(ExportRepository)]
