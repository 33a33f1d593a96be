"""Workspace configuration and provisioning."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from thermio.config import get_settings
from thermio.core.audit import AuditContext, WorkspaceEventService, actions
from thermio.core.auth.roles import Role
from thermio.core.errors import ConflictError, LimitExceededError, NotFoundError
from thermio.core.utils.text import generate_slug
from thermio.modules.users.models import User
from thermio.modules.users.repos import UserRepository
from thermio.modules.vehicles.repos import VehicleRepository
from thermio.modules.workspaces.models import Workspace, WorkspaceStatus
from thermio.modules.workspaces.repos import WorkspaceRepo
from thermio.modules.workspaces.schemas import (
    LimitsUpdate,
    SettingsUpdate,
    WorkspaceCreate,
)
from thermio.modules.workspaces.settings import ComplianceSettings, resolve_settings


log = structlog.get_logger()


class WorkspaceService:
    """Business logic for workspace settings, checklist and lifecycle."""

    def __init__(self, repo: WorkspaceRepo) -> None:
        self.repo = repo

    async def get_workspace(self, workspace_id: UUID) -> Workspace:
        workspace = await self.repo.get_by_id(workspace_id)
        if not workspace:
            raise NotFoundError(
                "Workspace not found",
                resource="workspace",
                resource_id=str(workspace_id),
            )
        return workspace

    async def compliance_settings(self, workspace_id: UUID) -> ComplianceSettings:
        workspace = await self.get_workspace(workspace_id)
        return resolve_settings(workspace, get_settings())

    async def update_settings(
        self,
        workspace_id: UUID,
        data: SettingsUpdate,
        events: WorkspaceEventService,
    ) -> ComplianceSettings:
        """Replace the compliance configuration.

        Keys this version does not manage are preserved in the stored JSON.
        """
        workspace = await self.get_workspace(workspace_id)
        workspace.settings = {**workspace.settings, **data.model_dump(mode="json")}
        await self.repo.update(workspace)

        await events.record(
            actions.SETTINGS_UPDATED,
            "Compliance settings updated",
            metadata={
                "timezone": data.timezone,
                "overdue_minutes": data.overdue_minutes,
                "sign_off_weekday": data.sign_off.weekday,
            },
        )
        return resolve_settings(workspace, get_settings())

    async def update_checklist(
        self,
        workspace_id: UUID,
        questions: list[str],
        events: WorkspaceEventService,
    ) -> ComplianceSettings:
        """Replace the pre-trip checklist questions.

        Logs already submitted keep the questions they were answered against.

        Raises:
            LimitExceededError: Above the workspace limit or the global cap
        """
        workspace = await self.get_workspace(workspace_id)
        cleaned = [q.strip() for q in questions if q.strip()]
        limit = min(workspace.max_questions, get_settings().checklist_hard_limit)
        if len(cleaned) > limit:
            raise LimitExceededError(
                f"Checklist is limited to {limit} questions",
                details={"limit": limit, "requested": len(cleaned)},
            )

        workspace.checklist_questions = cleaned
        await self.repo.update(workspace)

        await events.record(
            actions.CHECKLIST_UPDATED,
            f"Checklist questions updated ({len(cleaned)} questions)",
            metadata={"count": len(cleaned)},
        )
        return resolve_settings(workspace, get_settings())

    # ============================================================
    # Portal
    # ============================================================

    async def list_workspaces(self) -> list[Workspace]:
        return await self.repo.list_all()

    async def provision(
        self, data: WorkspaceCreate, actor_id: UUID
    ) -> tuple[Workspace, User]:
        """Create a workspace and its owner account. The slug is immutable afterwards.

        Raises:
            ConflictError: If the slug is taken
        """
        slug = data.slug or generate_slug(data.name)
        if not slug or await self.repo.get_by_slug(slug):
            raise ConflictError(
                "Workspace slug is not available",
                error_code="slug_taken",
                details={"slug": slug},
            )

        workspace = await self.repo.create(
            Workspace(
                name=data.name,
                slug=slug,
                status=WorkspaceStatus.ACTIVE,
                max_users=data.max_users,
                max_vehicles=data.max_vehicles,
                max_questions=data.max_questions,
                settings={"timezone": data.timezone} if data.timezone else {},
                checklist_questions=[],
            )
        )
        await self._record(
            workspace,
            actor_id,
            actions.WORKSPACE_CREATED,
            f"Workspace {workspace.name} created",
        )
        owner = await UserRepository(self.repo.session).create(
            User(
                workspace_id=workspace.id,
                name=data.owner.name,
                username=data.owner.username,
                email=data.owner.email,
                role=Role.ADMIN,
                is_owner=True,
                must_change_password=True,
            )
        )
        await self._record(
            workspace,
            actor_id,
            actions.USER_CREATED,
            f"Owner {owner.name} added as admin",
        )
        log.info(
            "workspace_provisioned",
            workspace_id=str(workspace.id),
            slug=slug,
            owner_id=str(owner.id),
        )
        return workspace, owner

    async def update_limits(
        self, workspace_id: UUID, data: LimitsUpdate, actor_id: UUID
    ) -> Workspace:
        """Change the user, vehicle and checklist limits of a workspace.

        Raises:
            ConflictError: If a limit would drop below current active usage
        """
        workspace = await self.get_workspace(workspace_id)
        session = self.repo.session
        usage = {
            "max_users": await UserRepository(session).count_active(workspace_id),
            "max_vehicles": await VehicleRepository(session).count_active(
                workspace_id
            ),
        }
        for field, active in usage.items():
            limit = getattr(data, field)
            if limit < active:
                raise ConflictError(
                    f"Cannot lower {field} to {limit} with {active} active",
                    error_code="limit_below_usage",
                    details={"field": field, "limit": limit, "active": active},
                )

        workspace.max_users = data.max_users
        workspace.max_vehicles = data.max_vehicles
        workspace.max_questions = min(
            data.max_questions, get_settings().checklist_hard_limit
        )
        await self.repo.update(workspace)
        await self._record(
            workspace,
            actor_id,
            actions.LIMITS_UPDATED,
            f"Limits set to {workspace.max_users} users, "
            f"{workspace.max_vehicles} vehicles, "
            f"{workspace.max_questions} questions",
        )
        return workspace

    async def suspend(self, workspace_id: UUID, actor_id: UUID) -> Workspace:
        """Suspend a workspace; its users are refused until reactivation."""
        workspace = await self.get_workspace(workspace_id)
        workspace.status = WorkspaceStatus.SUSPENDED
        await self.repo.update(workspace)
        await self._record(
            workspace,
            actor_id,
            actions.WORKSPACE_SUSPENDED,
            f"Workspace {workspace.name} suspended",
        )
        log.info("workspace_suspended", workspace_id=str(workspace.id))
        return workspace

    async def reactivate(self, workspace_id: UUID, actor_id: UUID) -> Workspace:
        """Reactivate a workspace.

        Users that were deactivated individually stay deactivated.
        """
        workspace = await self.get_workspace(workspace_id)
        workspace.status = WorkspaceStatus.ACTIVE
        await self.repo.update(workspace)
        await self._record(
            workspace,
            actor_id,
            actions.WORKSPACE_REACTIVATED,
            f"Workspace {workspace.name} reactivated",
        )
        log.info("workspace_reactivated", workspace_id=str(workspace.id))
        return workspace

    async def _record(
        self, workspace: Workspace, actor_id: UUID, action: str, description: str
    ) -> None:
        events = WorkspaceEventService(
            self.repo.session, AuditContext(workspace_id=workspace.id, user_id=actor_id)
        )
        await events.record(action, description, metadata={"slug": workspace.slug})


WorkspaceSvc = Annotated[WorkspaceService, Depends(WorkspaceService)]
