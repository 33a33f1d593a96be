"""Portal routes."""

from uuid import UUID

from fastapi import status

from thermio.core.auth.dependencies import Superadmin
from thermio.core.calendar import utc_now
from thermio.core.jobs import trigger_scheduled_job
from thermio.modules.portal import router
from thermio.modules.portal.schemas import JobTriggerResponse
from thermio.modules.workspaces.schemas import (
    LimitsUpdate,
    ProvisionedWorkspace,
    WorkspaceCreate,
    WorkspaceResponse,
)
from thermio.modules.workspaces.services import WorkspaceSvc


@router.get(
    "/workspaces",
    response_model=list[WorkspaceResponse],
    summary="List workspaces",
)
async def list_workspaces(
    service: WorkspaceSvc,
    current_user: Superadmin,  # noqa: ARG001 - required for auth
) -> list[WorkspaceResponse]:
    workspaces = await service.list_workspaces()
    return [WorkspaceResponse.model_validate(ws) for ws in workspaces]


@router.post(
    "/workspaces",
    response_model=ProvisionedWorkspace,
    status_code=status.HTTP_201_CREATED,
    summary="Provision a workspace",
    description="Also creates the owner account, an admin who must set a "
    "password on first sign-in.",
)
async def create_workspace(
    data: WorkspaceCreate,
    service: WorkspaceSvc,
    current_user: Superadmin,
) -> ProvisionedWorkspace:
    workspace, owner = await service.provision(data, current_user.id)
    return ProvisionedWorkspace(
        workspace=WorkspaceResponse.model_validate(workspace),
        owner_id=owner.id,
        owner_username=owner.username,
    )


@router.put(
    "/workspaces/{workspace_id}/limits",
    response_model=WorkspaceResponse,
    summary="Update workspace limits",
    description="Limits cannot drop below the active users or vehicles.",
)
async def update_limits(
    workspace_id: UUID,
    data: LimitsUpdate,
    service: WorkspaceSvc,
    current_user: Superadmin,
) -> WorkspaceResponse:
    workspace = await service.update_limits(workspace_id, data, current_user.id)
    return WorkspaceResponse.model_validate(workspace)


@router.post(
    "/workspaces/{workspace_id}/suspend",
    response_model=WorkspaceResponse,
    summary="Suspend a workspace",
)
async def suspend_workspace(
    workspace_id: UUID,
    service: WorkspaceSvc,
    current_user: Superadmin,
) -> WorkspaceResponse:
    workspace = await service.suspend(workspace_id, current_user.id)
    return WorkspaceResponse.model_validate(workspace)


@router.post(
    "/workspaces/{workspace_id}/reactivate",
    response_model=WorkspaceResponse,
    summary="Reactivate a workspace",
    description="Individually deactivated users remain deactivated.",
)
async def reactivate_workspace(
    workspace_id: UUID,
    service: WorkspaceSvc,
    current_user: Superadmin,
) -> WorkspaceResponse:
    workspace = await service.reactivate(workspace_id, current_user.id)
    return WorkspaceResponse.model_validate(workspace)


@router.post(
    "/jobs/{job_name}",
    response_model=JobTriggerResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Run a scheduled job now",
    description=(
        "Queues hourly_compliance or expire_temporary_accounts. "
        "A run already queued for the current hour is not repeated."
    ),
)
async def trigger_job(
    job_name: str,
    current_user: Superadmin,  # noqa: ARG001 - required for auth
) -> JobTriggerResponse:
    job_id, queued = await trigger_scheduled_job(job_name, utc_now())
    return JobTriggerResponse(job=job_name, job_id=job_id, queued=queued)
