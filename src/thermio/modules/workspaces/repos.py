"""Workspace repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from thermio.api.dependencies import DBSession
from thermio.modules.workspaces.models import Workspace, WorkspaceStatus


class WorkspaceRepository:
    """Repository for Workspace database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, workspace: Workspace) -> Workspace:
        self.session.add(workspace)
        await self.session.flush()
        await self.session.refresh(workspace)
        return workspace

    async def get_by_id(self, workspace_id: UUID) -> Workspace | None:
        result = await self.session.execute(
            select(Workspace).where(Workspace.id == workspace_id)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Workspace | None:
        result = await self.session.execute(
            select(Workspace).where(Workspace.slug == slug)
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> list[Workspace]:
        """Active workspaces, oldest first; the scheduled jobs walk this list."""
        result = await self.session.execute(
            select(Workspace)
            .where(Workspace.status == WorkspaceStatus.ACTIVE)
            .order_by(Workspace.created_at)
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Workspace]:
        result = await self.session.execute(
            select(Workspace).order_by(Workspace.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(self, workspace: Workspace) -> Workspace:
        await self.session.flush()
        await self.session.refresh(workspace)
        return workspace


WorkspaceRepo = Annotated[WorkspaceRepository, Depends(WorkspaceRepository)]
