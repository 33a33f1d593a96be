"""Vehicle database models."""

from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.constants import MAX_NAME_LENGTH, MAX_REGISTRATION_LENGTH
from thermio.core.database.base import Base, TimestampMixin, UUIDMixin, WorkspaceMixin


class ZoneType(StrEnum):
    """Which refrigerated compartments a vehicle carries."""

    AMBIENT = "ambient"
    CHILLER = "chiller"
    FREEZER = "freezer"
    DUAL = "dual"


class Vehicle(Base, UUIDMixin, TimestampMixin, WorkspaceMixin):
    """A truck or trailer whose temperatures are logged daily.

    Deactivation is reversible; vehicles are never deleted while logs
    reference them.
    """

    __tablename__ = "vehicles"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "registration", name="uq_vehicles_workspace_registration"
        ),
    )

    registration: Mapped[str] = mapped_column(
        String(MAX_REGISTRATION_LENGTH),
        nullable=False,
    )
    vehicle_class: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    zone_type: Mapped[str] = mapped_column(
        String(20),
        default=ZoneType.CHILLER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_temporary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id}, registration={self.registration})>"


class VehicleServiceRecord(Base, UUIDMixin, WorkspaceMixin):
    """Append-only maintenance note: unit serviced, seal replaced, etc."""

    __tablename__ = "vehicle_service_records"

    vehicle_id: Mapped[UUID] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[str] = mapped_column(String(50), default="general", nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    performed_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
