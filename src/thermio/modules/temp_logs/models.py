"""Daily temperature log models."""

from datetime import date, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.constants import MAX_IPV6_LENGTH, MAX_USER_AGENT_LENGTH
from thermio.core.database.base import Base, TimestampMixin, UUIDMixin, WorkspaceMixin


class TempLogEventType(StrEnum):
    LOG_OPENED = "log_opened"
    CHECKLIST_SUBMITTED = "checklist_submitted"
    READING_ADDED = "reading_added"
    READING_EDITED = "reading_edited"
    SHIFT_ENDED = "shift_ended"
    ADMIN_SIGNED_OFF = "admin_signed_off"
    COMMENTS_UPDATED = "comments_updated"


class TempLog(Base, UUIDMixin, TimestampMixin, WorkspaceMixin):
    """One vehicle's record for one workspace-local calendar day.

    ``temps`` is an append-only list of readings::

        {"id": "...", "time": "2024-03-08T06:02:11+00:00", "type": "start",
         "values": {"dispatch": 2.1, "chiller": "3"}}

    Values are stored exactly as submitted and only coerced to numbers when
    evaluated. Every accepted change bumps ``version`` and is mirrored in
    ``temp_log_events``.
    """

    __tablename__ = "temp_logs"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id",
            "vehicle_id",
            "log_date",
            name="uq_temp_logs_workspace_vehicle_date",
        ),
    )

    vehicle_id: Mapped[UUID] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    driver_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    log_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    temps: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, default=list, nullable=False
    )

    # Pre-trip checklist
    checklist_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    checklist: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    checklist_snapshot: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONB, nullable=True
    )
    checklist_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # End of shift
    shift_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    odometer: Mapped[str | None] = mapped_column(String(32), nullable=True)
    signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    shift_ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Admin countersignature
    admin_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_signed_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    admin_signed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    admin_ip: Mapped[str | None] = mapped_column(String(MAX_IPV6_LENGTH), nullable=True)
    admin_user_agent: Mapped[str | None] = mapped_column(
        String(MAX_USER_AGENT_LENGTH), nullable=True
    )

    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    def __init__(self, **kwargs: Any) -> None:
        # Column defaults only apply at flush; a transient log must already be
        # a valid empty log for the lifecycle rules.
        kwargs.setdefault("temps", [])
        kwargs.setdefault("checklist_done", False)
        kwargs.setdefault("shift_done", False)
        kwargs.setdefault("version", 1)
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return (
            f"<TempLog(id={self.id}, vehicle_id={self.vehicle_id}, "
            f"log_date={self.log_date}, version={self.version})>"
        )


class TempLogEvent(Base, UUIDMixin):
    """Append-only transcript entry for an accepted log transition."""

    __tablename__ = "temp_log_events"

    log_id: Mapped[UUID] = mapped_column(
        ForeignKey("temp_logs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    actor_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    payload: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
