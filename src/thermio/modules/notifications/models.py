"""Notification database model."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.database.base import Base, UUIDMixin, WorkspaceMixin


class NotificationType(StrEnum):
    OVERDUE_VEHICLE = "overdue_vehicle"
    EXCEPTION = "exception"
    SIGNOFF_REQUIRED = "signoff_required"
    SYSTEM = "system"


class Notification(Base, UUIDMixin, WorkspaceMixin):
    """An alert shown to the office staff of a workspace."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index(
            "ix_notifications_workspace_unread",
            "workspace_id",
            "read",
            "created_at",
        ),
    )

    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    vehicle_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=True
    )
    driver_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, read={self.read})>"
