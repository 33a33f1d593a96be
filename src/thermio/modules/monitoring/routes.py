"""Monitoring routes."""

from datetime import date
from uuid import UUID

from fastapi import Query

from thermio.core.auth.dependencies import OfficeUser, WorkspaceId
from thermio.core.calendar import utc_now
from thermio.modules.monitoring import router
from thermio.modules.monitoring.activity import StaffStats, VehicleStats
from thermio.modules.monitoring.detector import ComplianceException
from thermio.modules.monitoring.live import LiveBoard
from thermio.modules.monitoring.services import MonitoringSvc
from thermio.modules.monitoring.stats import DashboardSummary
from thermio.modules.workspaces.dependencies import WorkspaceSettings


@router.get(
    "/live",
    response_model=LiveBoard,
    summary="Live status board",
    description="Latest status per vehicle and per driver from recently "
    "updated logs.",
)
async def live_board(
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: MonitoringSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> LiveBoard:
    return await service.live_board(workspace_id, settings, utc_now())


@router.get(
    "/exceptions",
    response_model=list[ComplianceException],
    summary="Exception report",
    description="Defaults to the last 30 days.",
)
async def exception_report(
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: MonitoringSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
    start: date | None = Query(None, alias="from"),
    end: date | None = Query(None, alias="to"),
    vehicle_id: UUID | None = Query(None, alias="vehicle"),
    driver_id: UUID | None = Query(None, alias="driver"),
) -> list[ComplianceException]:
    return await service.exceptions(
        workspace_id,
        settings,
        utc_now(),
        start=start,
        end=end,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
    )


@router.get(
    "/dashboard",
    response_model=DashboardSummary,
    summary="Today's summary",
)
async def dashboard(
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: MonitoringSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> DashboardSummary:
    return await service.dashboard(workspace_id, settings, utc_now())


@router.get(
    "/staff/{user_id}",
    response_model=StaffStats,
    summary="Driver history",
    description="Totals over every log the user has driven.",
)
async def staff_stats(
    user_id: UUID,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: MonitoringSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> StaffStats:
    return await service.staff_stats(user_id, workspace_id, settings)


@router.get(
    "/vehicles/{vehicle_id}",
    response_model=VehicleStats,
    summary="Vehicle history",
    description="Totals over every log of the vehicle, with a per-driver "
    "breakdown.",
)
async def vehicle_stats(
    vehicle_id: UUID,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: MonitoringSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> VehicleStats:
    return await service.vehicle_stats(vehicle_id, workspace_id, settings)
