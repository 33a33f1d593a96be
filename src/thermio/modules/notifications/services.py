"""Creating and reading notifications.

Like workspace events, notifications are side effects: each insert runs in
a SAVEPOINT and a failure is logged rather than propagated.
"""

from datetime import datetime, timedelta
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from thermio.core.calendar import utc_now
from thermio.core.errors import NotFoundError
from thermio.modules.notifications.models import Notification, NotificationType
from thermio.modules.notifications.repos import NotificationRepo


log = structlog.get_logger()


class NotificationService:
    def __init__(self, repo: NotificationRepo) -> None:
        self.repo = repo

    async def notify(
        self,
        workspace_id: UUID,
        type_: NotificationType,
        title: str,
        body: str | None = None,
        *,
        vehicle_id: UUID | None = None,
        driver_id: UUID | None = None,
    ) -> Notification | None:
        notification = Notification(
            workspace_id=workspace_id,
            type=type_,
            title=title[:255],
            body=body,
            vehicle_id=vehicle_id,
            driver_id=driver_id,
            read=False,
        )
        session = self.repo.session
        await session.flush()
        try:
            async with session.begin_nested():
                session.add(notification)
        except SQLAlchemyError:
            log.exception(
                "notification_failed",
                type=str(type_),
                workspace_id=str(workspace_id),
            )
            return None

        log.info(
            "notification_created",
            type=str(type_),
            workspace_id=str(workspace_id),
            vehicle_id=str(vehicle_id) if vehicle_id else None,
        )
        return notification

    async def notify_once(
        self,
        workspace_id: UUID,
        type_: NotificationType,
        title: str,
        body: str | None,
        *,
        since: datetime,
        vehicle_id: UUID | None = None,
        driver_id: UUID | None = None,
    ) -> Notification | None:
        """Notify unless an unread notification of the same kind exists since ``since``.

        Duplicates are matched per vehicle when ``vehicle_id`` is given.
        """
        if await self.repo.has_recent_unread(
            workspace_id, type_, since, vehicle_id=vehicle_id
        ):
            return None
        return await self.notify(
            workspace_id,
            type_,
            title,
            body,
            vehicle_id=vehicle_id,
            driver_id=driver_id,
        )

    async def notify_overdue(
        self,
        workspace_id: UUID,
        vehicle_id: UUID,
        registration: str,
        minutes: int,
        *,
        now: datetime,
        dedup_hours: int,
        driver_id: UUID | None = None,
        driver_name: str | None = None,
    ) -> Notification | None:
        hours, mins = divmod(minutes, 60)
        who = f" ({driver_name})" if driver_name else ""
        return await self.notify_once(
            workspace_id,
            NotificationType.OVERDUE_VEHICLE,
            f"{registration} overdue",
            f"No temperature reading for {hours}h {mins}m{who}",
            since=now - timedelta(hours=dedup_hours),
            vehicle_id=vehicle_id,
            driver_id=driver_id,
        )

    async def list_notifications(
        self, workspace_id: UUID
    ) -> tuple[list[Notification], int]:
        """Latest notifications and the workspace's unread count."""
        items = await self.repo.list_by_workspace(workspace_id)
        unread = await self.repo.unread_count(workspace_id)
        return items, unread

    async def mark_read(self, notification_id: UUID, workspace_id: UUID) -> None:
        if not await self.repo.mark_read(notification_id, workspace_id, utc_now()):
            raise NotFoundError(
                "Notification not found",
                resource="notification",
                resource_id=str(notification_id),
            )

    async def mark_all_read(self, workspace_id: UUID) -> int:
        return await self.repo.mark_all_read(workspace_id, utc_now())


NotificationSvc = Annotated[NotificationService, Depends(NotificationService)]
