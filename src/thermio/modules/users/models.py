"""User database models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.auth.roles import Role
from thermio.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from thermio.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """A person who drives, reviews or administers a workspace.

    Platform superadmins have no workspace. Credentials live with the
    identity service; ``password_history`` is maintained there and only
    stored here.

    Attributes:
        workspace_id: Owning workspace, None for superadmins
        name: Display name
        username: Login name, unique within the workspace
        role: driver, office, admin or superadmin
        is_owner: The workspace owner; at most one per workspace
        is_active: Individually disabled users stay disabled even when
            their workspace is reactivated
        is_temporary: Account expires at ``expires_at``
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "username", name="uq_users_workspace_username"
        ),
        Index(
            "uq_users_one_owner_per_workspace",
            "workspace_id",
            unique=True,
            postgresql_where=text("is_owner"),
        ),
    )

    workspace_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    username: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20), default=Role.DRIVER, nullable=False)
    is_owner: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    must_change_password: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    consent_accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    password_history: Mapped[list[Any]] = mapped_column(
        JSONB,
        default=list,
        nullable=False,
    )
    is_temporary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
