"""User management routes.

Authentication itself (login, password changes) belongs to the identity
service; these endpoints manage workspace membership.
"""

from uuid import UUID

from fastapi import status

from thermio.core.audit.dependencies import WorkspaceEvents
from thermio.core.auth.dependencies import (
    AdminUser,
    CurrentUser,
    OfficeUser,
    WorkspaceId,
)
from thermio.modules.users import router
from thermio.modules.users.schemas import (
    OwnershipTransfer,
    RoleUpdate,
    UserCreate,
    UserResponse,
)
from thermio.modules.users.services import UserSvc


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
)
async def list_users(
    workspace_id: WorkspaceId,
    service: UserSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> list[UserResponse]:
    users = await service.list_users(workspace_id)
    return [UserResponse.model_validate(u) for u in users]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a user",
    description="Subject to the workspace user limit.",
)
async def create_user(
    data: UserCreate,
    workspace_id: WorkspaceId,
    service: UserSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,  # noqa: ARG001 - required for auth
) -> UserResponse:
    user = await service.create_user(workspace_id, data, events)
    return UserResponse.model_validate(user)


@router.post(
    "/{user_id}/deactivate",
    response_model=UserResponse,
    summary="Deactivate user",
)
async def deactivate_user(
    user_id: UUID,
    workspace_id: WorkspaceId,
    service: UserSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,  # noqa: ARG001 - required for auth
) -> UserResponse:
    user = await service.deactivate_user(user_id, workspace_id, events)
    return UserResponse.model_validate(user)


@router.post(
    "/{user_id}/reactivate",
    response_model=UserResponse,
    summary="Reactivate user",
)
async def reactivate_user(
    user_id: UUID,
    workspace_id: WorkspaceId,
    service: UserSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,  # noqa: ARG001 - required for auth
) -> UserResponse:
    user = await service.reactivate_user(user_id, workspace_id, events)
    return UserResponse.model_validate(user)


@router.post(
    "/transfer-ownership",
    response_model=UserResponse,
    summary="Transfer workspace ownership",
    description="Only the owner may call this. The recipient must be an active "
    "admin; the previous owner is demoted to driver.",
)
async def transfer_ownership(
    data: OwnershipTransfer,
    workspace_id: WorkspaceId,
    service: UserSvc,
    events: WorkspaceEvents,
    current_user: CurrentUser,
) -> UserResponse:
    new_owner = await service.transfer_ownership(
        data.new_owner_id, workspace_id, current_user, events
    )
    return UserResponse.model_validate(new_owner)


@router.put(
    "/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role",
)
async def update_role(
    user_id: UUID,
    data: RoleUpdate,
    workspace_id: WorkspaceId,
    service: UserSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,
) -> UserResponse:
    user = await service.update_role(
        user_id, workspace_id, data.role, current_user, events
    )
    return UserResponse.model_validate(user)
