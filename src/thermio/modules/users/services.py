"""User service for business logic."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from thermio.core.audit import AuditContext, WorkspaceEventService, actions
from thermio.core.auth.roles import Role, role_rank
from thermio.core.errors import (
    ConflictError,
    ForbiddenError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
)
from thermio.modules.users.models import User
from thermio.modules.users.repos import UserRepo
from thermio.modules.users.schemas import UserCreate
from thermio.modules.workspaces.repos import WorkspaceRepository


log = structlog.get_logger()


class UserService:
    """Service for workspace member management."""

    def __init__(self, repo: UserRepo) -> None:
        self.repo = repo

    async def get_user(self, user_id: UUID, workspace_id: UUID) -> User:
        user = await self.repo.get_by_id(user_id, workspace_id)
        if not user:
            raise NotFoundError(
                "User not found",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    async def list_users(self, workspace_id: UUID) -> list[User]:
        return await self.repo.list_by_workspace(workspace_id)

    async def create_user(
        self,
        workspace_id: UUID,
        data: UserCreate,
        events: WorkspaceEventService,
    ) -> User:
        """Add a member to the workspace.

        Raises:
            ConflictError: If the username is taken in this workspace
            LimitExceededError: If the workspace is at its user limit
        """
        if await self.repo.get_by_username(data.username, workspace_id):
            raise ConflictError(
                "Username already exists",
                error_code="username_exists",
                details={"username": data.username},
            )
        await self._check_limit(workspace_id)

        user = await self.repo.create(
            User(
                workspace_id=workspace_id,
                name=data.name,
                username=data.username,
                email=data.email,
                role=data.role,
                is_temporary=data.is_temporary,
                expires_at=data.expires_at,
                must_change_password=True,
            )
        )
        await events.record(
            actions.USER_CREATED,
            f"User {user.name} added as {user.role}",
            metadata={"user_id": str(user.id), "role": user.role},
        )
        return user

    async def deactivate_user(
        self, user_id: UUID, workspace_id: UUID, events: WorkspaceEventService
    ) -> User:
        """Disable one account. The workspace owner cannot be disabled."""
        user = await self.get_user(user_id, workspace_id)
        if user.is_owner:
            raise ForbiddenError(
                "The workspace owner cannot be deactivated",
                error_code="owner_protected",
            )
        user.is_active = False
        await self.repo.update(user)
        await events.record(
            actions.USER_SUSPENDED,
            f"User {user.name} deactivated",
            metadata={"user_id": str(user.id)},
        )
        return user

    async def reactivate_user(
        self, user_id: UUID, workspace_id: UUID, events: WorkspaceEventService
    ) -> User:
        user = await self.get_user(user_id, workspace_id)
        if not user.is_active:
            await self._check_limit(workspace_id)
        user.is_active = True
        await self.repo.update(user)
        await events.record(
            actions.USER_REACTIVATED,
            f"User {user.name} reactivated",
            metadata={"user_id": str(user.id)},
        )
        return user

    async def update_role(
        self,
        user_id: UUID,
        workspace_id: UUID,
        role: str,
        actor: User,
        events: WorkspaceEventService,
    ) -> User:
        """Change a member's role.

        The actor must outrank both the member's current and new role, so an
        admin can move drivers and office staff but only the owner can
        promote to or demote from admin.

        Raises:
            ValidationError: If the actor targets their own account
            ForbiddenError: For the owner or a role at or above the actor's
        """
        if user_id == actor.id:
            raise ValidationError(
                "You cannot change your own role", error_code="own_role"
            )
        user = await self.get_user(user_id, workspace_id)
        if user.is_owner:
            raise ForbiddenError(
                "The owner's role changes only through an ownership transfer",
                error_code="owner_protected",
            )

        actor_rank = role_rank(actor.role, is_owner=actor.is_owner)
        if role_rank(user.role) >= actor_rank or role_rank(role) >= actor_rank:
            raise ForbiddenError(
                "Role is at or above your own",
                error_code="role_hierarchy",
                details={"role": role, "current_role": user.role},
            )

        previous = user.role
        user.role = role
        await self.repo.update(user)
        await events.record(
            actions.ROLE_CHANGED,
            f"Role changed: {user.name} from {previous} to {role}",
            metadata={"user_id": str(user.id), "old_role": previous, "new_role": role},
        )
        return user

    async def transfer_ownership(
        self,
        new_owner_id: UUID,
        workspace_id: UUID,
        actor: User,
        events: WorkspaceEventService,
    ) -> User:
        """Hand ownership to an active admin; the previous owner becomes a driver.

        Raises:
            ForbiddenError: If the actor is not the current owner
            ValidationError: If the recipient is not an active admin
        """
        owner = await self.repo.get_by_id(actor.id, workspace_id)
        if owner is None or not owner.is_owner:
            raise ForbiddenError(
                "Only the workspace owner can transfer ownership",
                error_code="owner_required",
            )
        new_owner = await self.get_user(new_owner_id, workspace_id)
        eligible = new_owner.role == Role.ADMIN and new_owner.is_active
        if new_owner.is_owner or not eligible:
            raise ValidationError(
                "Ownership can only pass to an active admin",
                error_code="invalid_new_owner",
                details={"user_id": str(new_owner_id)},
            )

        # One owner per workspace: clear the old flag before setting the new one
        owner.is_owner = False
        owner.role = Role.DRIVER
        await self.repo.update(owner)
        new_owner.is_owner = True
        await self.repo.update(new_owner)

        await events.record(
            actions.OWNERSHIP_TRANSFERRED,
            f"Ownership transferred from {owner.username} to {new_owner.username}",
            metadata={
                "previous_owner": str(owner.id),
                "new_owner": str(new_owner.id),
            },
        )
        log.info(
            "ownership_transferred",
            workspace_id=str(workspace_id),
            previous_owner=str(owner.id),
            new_owner=str(new_owner.id),
        )
        return new_owner

    async def expire_temporary(self, workspace_id: UUID, now: datetime) -> int:
        """Deactivate temporary accounts past their expiry.

        Returns:
            Number of accounts deactivated
        """
        expired = await self.repo.list_expired_temporary(workspace_id, now)
        if not expired:
            return 0

        events = WorkspaceEventService(
            self.repo.session, AuditContext(workspace_id=workspace_id)
        )
        for user in expired:
            user.is_active = False
            await self.repo.update(user)
            await events.record(
                actions.USER_EXPIRED,
                f"Temporary user {user.name} expired",
                metadata={"user_id": str(user.id)},
            )
        log.info(
            "temporary_users_expired",
            workspace_id=str(workspace_id),
            count=len(expired),
        )
        return len(expired)

    async def _check_limit(self, workspace_id: UUID) -> None:
        workspace = await WorkspaceRepository(self.repo.session).get_by_id(
            workspace_id
        )
        active = await self.repo.count_active(workspace_id)
        if workspace and active >= workspace.max_users:
            raise LimitExceededError(
                f"Workspace is limited to {workspace.max_users} active users",
                details={"limit": workspace.max_users, "active": active},
            )


UserSvc = Annotated[UserService, Depends(UserService)]
