"""Workspace event (audit log) database model."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.constants import (
    MAX_ACTION_TYPE_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_IPV6_LENGTH,
)
from thermio.core.database.base import Base, UUIDMixin, WorkspaceMixin


class WorkspaceEvent(Base, UUIDMixin, WorkspaceMixin):
    """One entry of a workspace's audit log.

    Attributes:
        user_id: The user who performed the action (None for scheduled work)
        action_type: One of the names in ``thermio.core.audit.actions``
        description: Human-readable summary shown in the activity feed
        metadata_: Structured context (vehicle id, log date, changed fields...)
        ip_address: Client IP address
        user_agent: Client user agent string
        request_id: Correlation ID for request tracing
        created_at: When the action occurred
    """

    __tablename__ = "workspace_events"

    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action_type: Mapped[str] = mapped_column(
        String(MAX_ACTION_TYPE_LENGTH),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=False,
    )
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",  # Column name in database
        JSONB,
        nullable=True,
    )

    # Request context
    ip_address: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    request_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<WorkspaceEvent(id={self.id}, action_type={self.action_type})>"
