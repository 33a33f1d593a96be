"""Workspace event queries."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, func, select

from thermio.api.dependencies import DBSession
from thermio.core.audit.models import WorkspaceEvent


class WorkspaceEventRepository:
    """Read access to the workspace audit log."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def list_events(
        self,
        workspace_id: UUID,
        *,
        action_type: str | None = None,
        user_id: UUID | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[WorkspaceEvent], int]:
        """List events newest first.

        Returns:
            Tuple of (events on the requested page, total matching count)
        """
        stmt: Select[tuple[WorkspaceEvent]] = select(WorkspaceEvent).where(
            WorkspaceEvent.workspace_id == workspace_id
        )
        if action_type:
            stmt = stmt.where(WorkspaceEvent.action_type == action_type)
        if user_id:
            stmt = stmt.where(WorkspaceEvent.user_id == user_id)
        if since:
            stmt = stmt.where(WorkspaceEvent.created_at >= since)
        if until:
            stmt = stmt.where(WorkspaceEvent.created_at < until)

        count_result = await self.session.execute(
            select(func.count()).select_from(stmt.subquery())
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            stmt.order_by(WorkspaceEvent.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total


WorkspaceEventRepo = Annotated[
    WorkspaceEventRepository, Depends(WorkspaceEventRepository)
]
