"""Export record model.

A record is the commit point of an export: rendering and delivery pick up
pending records, and the unique period key makes scheduling idempotent.
"""

from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.database.base import Base, TimestampMixin, UUIDMixin, WorkspaceMixin


class ExportKind(StrEnum):
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    MANUAL = "manual"


class ExportStatus(StrEnum):
    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


class ExportRecord(Base, UUIDMixin, TimestampMixin, WorkspaceMixin):
    __tablename__ = "export_records"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id",
            "kind",
            "period_start",
            "period_end",
            name="uq_export_records_workspace_kind_period",
        ),
    )

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=ExportStatus.PENDING, nullable=False
    )
    log_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    recipients: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<ExportRecord(id={self.id}, kind={self.kind}, "
            f"period={self.period_start}..{self.period_end})>"
        )
