"""Fleet management."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from thermio.core.audit import AuditContext, WorkspaceEventService, actions
from thermio.core.errors import (
    ConflictError,
    LimitExceededError,
    NotFoundError,
    VehicleInactiveError,
)
from thermio.core.utils.text import normalize_registration
from thermio.modules.vehicles.models import Vehicle, VehicleServiceRecord
from thermio.modules.vehicles.repos import VehicleRepo
from thermio.modules.vehicles.schemas import ServiceRecordCreate, VehicleCreate
from thermio.modules.workspaces.repos import WorkspaceRepository


log = structlog.get_logger()


class VehicleService:
    """Vehicle registration, activation and service history."""

    def __init__(self, repo: VehicleRepo) -> None:
        self.repo = repo

    async def get_vehicle(self, vehicle_id: UUID, workspace_id: UUID) -> Vehicle:
        vehicle = await self.repo.get_by_id(vehicle_id, workspace_id)
        if not vehicle:
            raise NotFoundError(
                "Vehicle not found",
                resource="vehicle",
                resource_id=str(vehicle_id),
            )
        return vehicle

    async def get_active_vehicle(self, vehicle_id: UUID, workspace_id: UUID) -> Vehicle:
        """Look up a vehicle a driver may log against.

        Raises:
            NotFoundError: If the vehicle does not exist in the workspace
            VehicleInactiveError: If the vehicle has been deactivated
        """
        vehicle = await self.get_vehicle(vehicle_id, workspace_id)
        if not vehicle.is_active:
            raise VehicleInactiveError(
                f"Vehicle {vehicle.registration} is deactivated",
                resource="vehicle",
                resource_id=str(vehicle_id),
            )
        return vehicle

    async def list_vehicles(
        self, workspace_id: UUID, *, active_only: bool = False
    ) -> list[Vehicle]:
        return await self.repo.list_by_workspace(workspace_id, active_only=active_only)

    async def create_vehicle(
        self,
        workspace_id: UUID,
        data: VehicleCreate,
        events: WorkspaceEventService,
    ) -> Vehicle:
        """Register a vehicle.

        Raises:
            ConflictError: If the registration already exists in the workspace
            LimitExceededError: If the workspace is at its vehicle limit
        """
        registration = normalize_registration(data.registration)
        if await self.repo.get_by_registration(registration, workspace_id):
            raise ConflictError(
                "Registration already exists",
                error_code="registration_exists",
                details={"registration": registration},
            )
        await self._check_limit(workspace_id)

        vehicle = await self.repo.create(
            Vehicle(
                workspace_id=workspace_id,
                registration=registration,
                vehicle_class=data.vehicle_class,
                zone_type=data.zone_type,
                is_active=True,
                is_temporary=data.is_temporary,
                expires_at=data.expires_at,
            )
        )
        await events.record(
            actions.ASSET_CREATED,
            f"Vehicle {registration} added",
            metadata={"vehicle_id": str(vehicle.id), "zone_type": vehicle.zone_type},
        )
        return vehicle

    async def deactivate_vehicle(
        self, vehicle_id: UUID, workspace_id: UUID, events: WorkspaceEventService
    ) -> Vehicle:
        vehicle = await self.get_vehicle(vehicle_id, workspace_id)
        vehicle.is_active = False
        await self.repo.update(vehicle)
        await events.record(
            actions.ASSET_SUSPENDED,
            f"Vehicle {vehicle.registration} deactivated",
            metadata={"vehicle_id": str(vehicle.id)},
        )
        return vehicle

    async def reactivate_vehicle(
        self, vehicle_id: UUID, workspace_id: UUID, events: WorkspaceEventService
    ) -> Vehicle:
        vehicle = await self.get_vehicle(vehicle_id, workspace_id)
        if not vehicle.is_active:
            await self._check_limit(workspace_id)
        vehicle.is_active = True
        await self.repo.update(vehicle)
        await events.record(
            actions.ASSET_REACTIVATED,
            f"Vehicle {vehicle.registration} reactivated",
            metadata={"vehicle_id": str(vehicle.id)},
        )
        return vehicle

    async def add_service_record(
        self,
        vehicle_id: UUID,
        workspace_id: UUID,
        data: ServiceRecordCreate,
        created_by: UUID,
        events: WorkspaceEventService,
    ) -> VehicleServiceRecord:
        """Append a service record. Records are never edited or removed."""
        vehicle = await self.get_vehicle(vehicle_id, workspace_id)
        record = await self.repo.add_service_record(
            VehicleServiceRecord(
                workspace_id=workspace_id,
                vehicle_id=vehicle.id,
                kind=data.kind,
                description=data.description,
                performed_on=data.performed_on,
                created_by=created_by,
            )
        )
        await events.record(
            actions.SERVICE_RECORDED,
            f"Service record ({data.kind}) added for {vehicle.registration}",
            metadata={"vehicle_id": str(vehicle.id), "record_id": str(record.id)},
        )
        return record

    async def list_service_records(
        self, vehicle_id: UUID, workspace_id: UUID
    ) -> list[VehicleServiceRecord]:
        await self.get_vehicle(vehicle_id, workspace_id)
        return await self.repo.list_service_records(vehicle_id, workspace_id)

    async def expire_temporary(self, workspace_id: UUID, now: datetime) -> int:
        """Deactivate temporary vehicles past their expiry."""
        expired = await self.repo.list_expired_temporary(workspace_id, now)
        if not expired:
            return 0

        events = WorkspaceEventService(
            self.repo.session, AuditContext(workspace_id=workspace_id)
        )
        for vehicle in expired:
            vehicle.is_active = False
            await self.repo.update(vehicle)
            await events.record(
                actions.ASSET_EXPIRED,
                f"Temporary vehicle {vehicle.registration} expired",
                metadata={"vehicle_id": str(vehicle.id)},
            )
        log.info(
            "temporary_vehicles_expired",
            workspace_id=str(workspace_id),
            count=len(expired),
        )
        return len(expired)

    async def _check_limit(self, workspace_id: UUID) -> None:
        workspace = await WorkspaceRepository(self.repo.session).get_by_id(
            workspace_id
        )
        active = await self.repo.count_active(workspace_id)
        if workspace and active >= workspace.max_vehicles:
            raise LimitExceededError(
                f"Workspace is limited to {workspace.max_vehicles} active vehicles",
                details={"limit": workspace.max_vehicles, "active": active},
            )


VehicleSvc = Annotated[VehicleService, Depends(VehicleService)]
