"""Vehicle repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from thermio.api.dependencies import DBSession
from thermio.modules.vehicles.models import Vehicle, VehicleServiceRecord


class VehicleRepository:
    """Repository for Vehicle and service record operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, vehicle: Vehicle) -> Vehicle:
        self.session.add(vehicle)
        await self.session.flush()
        await self.session.refresh(vehicle)
        return vehicle

    async def get_by_id(self, vehicle_id: UUID, workspace_id: UUID) -> Vehicle | None:
        result = await self.session.execute(
            select(Vehicle).where(
                Vehicle.id == vehicle_id, Vehicle.workspace_id == workspace_id
            )
        )
        return result.scalar_one_or_none()

    async def get_by_registration(
        self, registration: str, workspace_id: UUID
    ) -> Vehicle | None:
        result = await self.session.execute(
            select(Vehicle).where(
                Vehicle.workspace_id == workspace_id,
                Vehicle.registration == registration,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_workspace(
        self, workspace_id: UUID, *, active_only: bool = False
    ) -> list[Vehicle]:
        stmt = select(Vehicle).where(Vehicle.workspace_id == workspace_id)
        if active_only:
            stmt = stmt.where(Vehicle.is_active.is_(True))
        result = await self.session.execute(stmt.order_by(Vehicle.registration))
        return list(result.scalars().all())

    async def count_active(self, workspace_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Vehicle)
            .where(Vehicle.workspace_id == workspace_id, Vehicle.is_active.is_(True))
        )
        return result.scalar_one()

    async def list_expired_temporary(
        self, workspace_id: UUID, now: datetime
    ) -> list[Vehicle]:
        result = await self.session.execute(
            select(Vehicle).where(
                Vehicle.workspace_id == workspace_id,
                Vehicle.is_temporary.is_(True),
                Vehicle.is_active.is_(True),
                Vehicle.expires_at.is_not(None),
                Vehicle.expires_at <= now,
            )
        )
        return list(result.scalars().all())

    async def update(self, vehicle: Vehicle) -> Vehicle:
        await self.session.flush()
        await self.session.refresh(vehicle)
        return vehicle

    async def add_service_record(
        self, record: VehicleServiceRecord
    ) -> VehicleServiceRecord:
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        return record

    async def list_service_records(
        self, vehicle_id: UUID, workspace_id: UUID
    ) -> list[VehicleServiceRecord]:
        result = await self.session.execute(
            select(VehicleServiceRecord)
            .where(
                VehicleServiceRecord.vehicle_id == vehicle_id,
                VehicleServiceRecord.workspace_id == workspace_id,
            )
            .order_by(VehicleServiceRecord.created_at.desc())
        )
        return list(result.scalars().all())


VehicleRepo = Annotated[VehicleRepository, Depends(VehicleRepository)]
