"""Workspace configuration routes."""

from datetime import datetime
from uuid import UUID

from fastapi import Query

from thermio.core.audit.dependencies import WorkspaceEvents
from thermio.core.audit.repos import WorkspaceEventRepo
from thermio.core.auth.dependencies import OfficeUser, WorkspaceAdmin, WorkspaceId
from thermio.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from thermio.modules.workspaces import router
from thermio.modules.workspaces.dependencies import WorkspaceSettings
from thermio.modules.workspaces.schemas import (
    ChecklistUpdate,
    ComplianceSettingsResponse,
    SettingsUpdate,
    WorkspaceEventListResponse,
    WorkspaceEventResponse,
)
from thermio.modules.workspaces.services import WorkspaceSvc
from thermio.modules.workspaces.settings import ComplianceSettings


def _settings_response(settings: ComplianceSettings) -> ComplianceSettingsResponse:
    return ComplianceSettingsResponse.model_validate(
        settings.model_dump(exclude={"live_window_minutes", "force_sign_off_day"})
    )


@router.get(
    "/settings",
    response_model=ComplianceSettingsResponse,
    summary="Get compliance settings",
    description="Effective settings with defaults applied.",
)
async def get_settings(
    settings: WorkspaceSettings,
    current_user: WorkspaceAdmin,  # noqa: ARG001 - required for auth
) -> ComplianceSettingsResponse:
    return _settings_response(settings)


@router.put(
    "/settings",
    response_model=ComplianceSettingsResponse,
    summary="Update compliance settings",
)
async def update_settings(
    data: SettingsUpdate,
    workspace_id: WorkspaceId,
    service: WorkspaceSvc,
    events: WorkspaceEvents,
    current_user: WorkspaceAdmin,  # noqa: ARG001 - required for auth
) -> ComplianceSettingsResponse:
    settings = await service.update_settings(workspace_id, data, events)
    return _settings_response(settings)


@router.put(
    "/checklist",
    response_model=ComplianceSettingsResponse,
    summary="Replace checklist questions",
    description="Limited by the workspace question limit and a global cap.",
)
async def update_checklist(
    data: ChecklistUpdate,
    workspace_id: WorkspaceId,
    service: WorkspaceSvc,
    events: WorkspaceEvents,
    current_user: WorkspaceAdmin,  # noqa: ARG001 - required for auth
) -> ComplianceSettingsResponse:
    settings = await service.update_checklist(workspace_id, data.questions, events)
    return _settings_response(settings)


@router.get(
    "/events",
    response_model=WorkspaceEventListResponse,
    summary="Workspace audit log",
)
async def list_events(
    workspace_id: WorkspaceId,
    repo: WorkspaceEventRepo,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
    action_type: str | None = Query(None, description="Filter by action type"),
    user_id: UUID | None = Query(None, description="Filter by acting user"),
    since: datetime | None = Query(None, alias="from"),
    until: datetime | None = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> WorkspaceEventListResponse:
    items, total = await repo.list_events(
        workspace_id,
        action_type=action_type,
        user_id=user_id,
        since=since,
        until=until,
        page=page,
        page_size=page_size,
    )
    return WorkspaceEventListResponse(
        items=[WorkspaceEventResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )
