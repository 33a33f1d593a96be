"""Daily log routes."""

from datetime import date
from uuid import UUID

from fastapi import Query, Request, status

from thermio.core.audit.dependencies import WorkspaceEvents
from thermio.core.auth.dependencies import (
    AdminUser,
    CurrentUser,
    OfficeUser,
    WorkspaceId,
)
from thermio.core.calendar import utc_now
from thermio.core.logging import get_client_ip
from thermio.modules.temp_logs import router
from thermio.modules.temp_logs.lifecycle import requires_admin_sign_off
from thermio.modules.temp_logs.schemas import (
    ChecklistSubmit,
    CommentsUpdate,
    EndShiftRequest,
    ReadingCreate,
    ReadingUpdate,
    SheetDay,
    SignOffRequest,
    TempLogResponse,
    WeeklySheetResponse,
    log_response,
)
from thermio.modules.temp_logs.services import WEEKDAY_LABELS, TempLogSvc
from thermio.modules.users.repos import UserRepo
from thermio.modules.vehicles.services import VehicleSvc
from thermio.modules.workspaces.dependencies import WorkspaceSettings


@router.post(
    "/vehicles/{vehicle_id}/log",
    response_model=TempLogResponse,
    summary="Open today's log",
    description="Returns the vehicle's log for the workspace-local date, "
    "creating it on first visit.",
)
async def open_log(
    vehicle_id: UUID,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    service: TempLogSvc,
    current_user: CurrentUser,
) -> TempLogResponse:
    vehicle = await vehicles.get_active_vehicle(vehicle_id, workspace_id)
    temp_log = await service.open_log(vehicle, current_user.id, settings, utc_now())
    return log_response(temp_log, settings)


@router.post(
    "/vehicles/{vehicle_id}/log/checklist",
    response_model=TempLogResponse,
    summary="Submit the pre-trip checklist",
)
async def submit_checklist(
    vehicle_id: UUID,
    data: ChecklistSubmit,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    service: TempLogSvc,
    events: WorkspaceEvents,
    current_user: CurrentUser,
) -> TempLogResponse:
    vehicle = await vehicles.get_active_vehicle(vehicle_id, workspace_id)
    temp_log = await service.submit_checklist(
        vehicle, current_user, data.answers, settings, events, utc_now()
    )
    return log_response(temp_log, settings)


@router.post(
    "/vehicles/{vehicle_id}/log/readings",
    response_model=TempLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a temperature reading",
    description="The first reading of the day is the start reading and must "
    "cover the vehicle's zones; later readings need a cabin value.",
)
async def add_reading(
    vehicle_id: UUID,
    data: ReadingCreate,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    service: TempLogSvc,
    events: WorkspaceEvents,
    current_user: CurrentUser,
) -> TempLogResponse:
    vehicle = await vehicles.get_active_vehicle(vehicle_id, workspace_id)
    temp_log = await service.add_reading(
        vehicle, current_user, data.values, settings, events, utc_now()
    )
    return log_response(temp_log, settings)


@router.patch(
    "/vehicles/{vehicle_id}/log/readings/{reading_id}",
    response_model=TempLogResponse,
    summary="Correct a reading",
)
async def edit_reading(
    vehicle_id: UUID,
    reading_id: str,
    data: ReadingUpdate,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    service: TempLogSvc,
    events: WorkspaceEvents,
    current_user: CurrentUser,
) -> TempLogResponse:
    vehicle = await vehicles.get_active_vehicle(vehicle_id, workspace_id)
    temp_log = await service.edit_reading(
        vehicle, current_user, reading_id, data.values, settings, events, utc_now()
    )
    return log_response(temp_log, settings)


@router.post(
    "/vehicles/{vehicle_id}/log/end-shift",
    response_model=TempLogResponse,
    summary="End the shift",
    description="Odometer and signature are required on the sign-off day.",
)
async def end_shift(
    vehicle_id: UUID,
    data: EndShiftRequest,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    service: TempLogSvc,
    events: WorkspaceEvents,
    current_user: CurrentUser,
) -> TempLogResponse:
    vehicle = await vehicles.get_active_vehicle(vehicle_id, workspace_id)
    temp_log = await service.end_shift(
        vehicle,
        current_user,
        odometer=data.odometer,
        signature=data.signature,
        final_cabin=data.final_cabin,
        settings=settings,
        events=events,
        now=utc_now(),
    )
    return log_response(temp_log, settings)


@router.get(
    "/vehicles/{vehicle_id}/sheet",
    response_model=WeeklySheetResponse,
    summary="Weekly temperature sheet",
    description="Logs from Monday through the sign-off date of the week "
    "containing `date`.",
)
async def weekly_sheet(
    vehicle_id: UUID,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    users: UserRepo,
    service: TempLogSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
    day: date = Query(..., alias="date"),
) -> WeeklySheetResponse:
    vehicle = await vehicles.get_vehicle(vehicle_id, workspace_id)
    sheet = await service.weekly_sheet(vehicle, day, settings)
    names = {u.id: u.name for u in await users.list_by_workspace(workspace_id)}

    sign_off_log = sheet.sign_off_log
    return WeeklySheetResponse(
        vehicle_id=vehicle.id,
        registration=vehicle.registration,
        week_start=sheet.monday,
        sign_off_date=sheet.sign_off_date,
        days=[
            SheetDay(
                date=d,
                weekday=WEEKDAY_LABELS[d.weekday()],
                driver_name=names.get(temp_log.driver_id) if temp_log else None,
                log=log_response(temp_log, settings) if temp_log else None,
            )
            for d, temp_log in sheet.days
        ],
        sign_off_log=log_response(sign_off_log, settings) if sign_off_log else None,
        requires_admin_sign_off=requires_admin_sign_off(sign_off_log, settings),
        checklist_questions=list(settings.checklist_questions),
    )


@router.post(
    "/vehicles/{vehicle_id}/sign-off",
    response_model=TempLogResponse,
    summary="Admin sign-off for a week",
)
async def sign_off(
    vehicle_id: UUID,
    data: SignOffRequest,
    request: Request,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    vehicles: VehicleSvc,
    service: TempLogSvc,
    events: WorkspaceEvents,
    current_user: AdminUser,
) -> TempLogResponse:
    vehicle = await vehicles.get_vehicle(vehicle_id, workspace_id)
    temp_log = await service.sign_off(
        vehicle,
        current_user,
        monday=data.monday,
        signature=data.signature,
        ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        settings=settings,
        events=events,
        now=utc_now(),
    )
    return log_response(temp_log, settings)


@router.patch(
    "/logs/{log_id}/comments",
    response_model=TempLogResponse,
    summary="Update log comments",
)
async def update_comments(
    log_id: UUID,
    data: CommentsUpdate,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: TempLogSvc,
    events: WorkspaceEvents,
    current_user: OfficeUser,
) -> TempLogResponse:
    temp_log = await service.update_comments(
        log_id, workspace_id, current_user, data.comments, events
    )
    return log_response(temp_log, settings)
