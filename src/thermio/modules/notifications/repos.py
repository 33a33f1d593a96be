"""Notification queries."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select, update

from thermio.api.dependencies import DBSession
from thermio.core.constants import DEFAULT_PAGE_SIZE
from thermio.modules.notifications.models import Notification


class NotificationRepository:
    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, notification: Notification) -> Notification:
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

    async def list_by_workspace(
        self, workspace_id: UUID, *, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[Notification]:
        result = await self.session.execute(
            select(Notification)
            .where(Notification.workspace_id == workspace_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def unread_count(self, workspace_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.workspace_id == workspace_id,
                Notification.read.is_(False),
            )
        )
        return result.scalar_one()

    async def has_recent_unread(
        self,
        workspace_id: UUID,
        type_: str,
        since: datetime,
        *,
        vehicle_id: UUID | None = None,
    ) -> bool:
        """Whether an unread notification of ``type_`` exists since ``since``."""
        stmt = select(Notification.id).where(
            Notification.workspace_id == workspace_id,
            Notification.type == type_,
            Notification.read.is_(False),
            Notification.created_at >= since,
        )
        if vehicle_id:
            stmt = stmt.where(Notification.vehicle_id == vehicle_id)
        result = await self.session.execute(stmt.limit(1))
        return result.first() is not None

    async def mark_read(
        self, notification_id: UUID, workspace_id: UUID, at: datetime
    ) -> bool:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.workspace_id == workspace_id,
            )
            .values(read=True, read_at=at)
        )
        return bool(result.rowcount)

    async def mark_all_read(self, workspace_id: UUID, at: datetime) -> int:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.workspace_id == workspace_id,
                Notification.read.is_(False),
            )
            .values(read=True, read_at=at)
        )
        return result.rowcount or 0


NotificationRepo = Annotated[NotificationRepository, Depends(NotificationRepository)]
