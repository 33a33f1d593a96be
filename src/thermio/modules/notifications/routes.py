"""Notification routes."""

from uuid import UUID

from thermio.core.auth.dependencies import OfficeUser, WorkspaceId
from thermio.modules.notifications import router
from thermio.modules.notifications.schemas import (
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from thermio.modules.notifications.services import NotificationSvc


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
    description="The 50 most recent notifications and the unread count.",
)
async def list_notifications(
    workspace_id: WorkspaceId,
    service: NotificationSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> NotificationListResponse:
    items, unread = await service.list_notifications(workspace_id)
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        unread=unread,
    )


@router.post(
    "/read",
    response_model=MarkReadResponse,
    summary="Mark all notifications read",
)
async def mark_all_read(
    workspace_id: WorkspaceId,
    service: NotificationSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> MarkReadResponse:
    updated = await service.mark_all_read(workspace_id)
    return MarkReadResponse(updated=updated)


@router.post(
    "/{notification_id}/read",
    response_model=MarkReadResponse,
    summary="Mark a notification read",
)
async def mark_read(
    notification_id: UUID,
    workspace_id: WorkspaceId,
    service: NotificationSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> MarkReadResponse:
    await service.mark_read(notification_id, workspace_id)
    return MarkReadResponse(updated=1)
