"""Vehicle management routes.

Daily log endpoints under ``/vehicles/{id}/log`` live in the temp_logs
module.
"""

from uuid import UUID

from fastapi import Query, status

from thermio.core.audit.dependencies import WorkspaceEvents
from thermio.core.auth.dependencies import (
    AdminUser,
    CurrentUser,
    OfficeUser,
    WorkspaceId,
)
from thermio.modules.vehicles import router
from thermio.modules.vehicles.schemas import (
    ServiceRecordCreate,
    ServiceRecordResponse,
    VehicleCreate,
    VehicleResponse,
)
from thermio.modules.vehicles.services import VehicleSvc


@router.get(
    "",
    response_model=list[VehicleResponse],
    summary="List vehicles",
)
async def list_vehicles(
    workspace_id: WorkspaceId,
    service: VehicleSvc,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    active_only: bool = Query(False, description="Only active vehicles"),
) -> list[VehicleResponse]:
    vehicles = await service.list_vehicles(workspace_id, active_only=active_only)
    return [VehicleResponse.model_validate(v) for v in vehicles]


@router.post(
    "",
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a vehicle",
    description="Subject to the workspace vehicle limit.",
)
async def create_vehicle(
    data: VehicleCreate,
    workspace_id: WorkspaceId,
    service: VehicleSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,  # noqa: ARG001 - required for auth
) -> VehicleResponse:
    vehicle = await service.create_vehicle(workspace_id, data, events)
    return VehicleResponse.model_validate(vehicle)


@router.post(
    "/{vehicle_id}/deactivate",
    response_model=VehicleResponse,
    summary="Deactivate a vehicle",
)
async def deactivate_vehicle(
    vehicle_id: UUID,
    workspace_id: WorkspaceId,
    service: VehicleSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,  # noqa: ARG001 - required for auth
) -> VehicleResponse:
    vehicle = await service.deactivate_vehicle(vehicle_id, workspace_id, events)
    return VehicleResponse.model_validate(vehicle)


@router.post(
    "/{vehicle_id}/reactivate",
    response_model=VehicleResponse,
    summary="Reactivate a vehicle",
)
async def reactivate_vehicle(
    vehicle_id: UUID,
    workspace_id: WorkspaceId,
    service: VehicleSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,  # noqa: ARG001 - required for auth
) -> VehicleResponse:
    vehicle = await service.reactivate_vehicle(vehicle_id, workspace_id, events)
    return VehicleResponse.model_validate(vehicle)


@router.get(
    "/{vehicle_id}/service-records",
    response_model=list[ServiceRecordResponse],
    summary="Service history",
)
async def list_service_records(
    vehicle_id: UUID,
    workspace_id: WorkspaceId,
    service: VehicleSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> list[ServiceRecordResponse]:
    records = await service.list_service_records(vehicle_id, workspace_id)
    return [ServiceRecordResponse.model_validate(r) for r in records]


@router.post(
    "/{vehicle_id}/service-records",
    response_model=ServiceRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a service record",
)
async def add_service_record(
    vehicle_id: UUID,
    data: ServiceRecordCreate,
    workspace_id: WorkspaceId,
    service: VehicleSvc,
    events: WorkspaceEvents,
    current_user: OfficeUser,
) -> ServiceRecordResponse:
    record = await service.add_service_record(
        vehicle_id, workspace_id, data, current_user.id, events
    )
    return ServiceRecordResponse.model_validate(record)
