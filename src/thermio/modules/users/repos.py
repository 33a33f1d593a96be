"""User repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from thermio.api.dependencies import DBSession
from thermio.modules.users.models import User


class UserRepository:
    """Repository for User database operations.

    All queries are scoped to a workspace when appropriate.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(
        self, user_id: UUID, workspace_id: UUID | None = None
    ) -> User | None:
        """Get a user by ID, optionally scoped to a workspace."""
        stmt = select(User).where(User.id == user_id)
        if workspace_id:
            stmt = stmt.where(User.workspace_id == workspace_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str, workspace_id: UUID) -> User | None:
        result = await self.session.execute(
            select(User).where(
                User.workspace_id == workspace_id,
                func.lower(User.username) == username.lower(),
            )
        )
        return result.scalar_one_or_none()

    async def list_by_workspace(self, workspace_id: UUID) -> list[User]:
        result = await self.session.execute(
            select(User).where(User.workspace_id == workspace_id).order_by(User.name)
        )
        return list(result.scalars().all())

    async def count_active(self, workspace_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(User)
            .where(User.workspace_id == workspace_id, User.is_active.is_(True))
        )
        return result.scalar_one()

    async def list_expired_temporary(
        self, workspace_id: UUID, now: datetime
    ) -> list[User]:
        """Active temporary accounts whose expiry has passed."""
        result = await self.session.execute(
            select(User).where(
                User.workspace_id == workspace_id,
                User.is_temporary.is_(True),
                User.is_active.is_(True),
                User.expires_at.is_not(None),
                User.expires_at <= now,
            )
        )
        return list(result.scalars().all())

    async def update(self, user: User) -> User:
        await self.session.flush()
        await self.session.refresh(user)
        return user


UserRepo = Annotated[UserRepository, Depends(UserRepository)]
