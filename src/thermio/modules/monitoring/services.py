"""Read models for office staff: live board, exceptions, dashboard and history."""

from datetime import date, datetime, timedelta
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from thermio.config import Settings, get_settings
from thermio.core.errors import NotFoundError
from thermio.modules.monitoring.activity import (
    StaffStats,
    VehicleStats,
    build_staff_stats,
    build_vehicle_stats,
)
from thermio.modules.monitoring.detector import ComplianceException, detect_exceptions
from thermio.modules.monitoring.live import (
    LiveBoard,
    build_live_board,
    live_window_start,
)
from thermio.modules.monitoring.stats import (
    DashboardSummary,
    build_dashboard,
    overdue_logs,
)
from thermio.modules.notifications.services import NotificationSvc
from thermio.modules.temp_logs.repos import TempLogRepo
from thermio.modules.users.repos import UserRepo
from thermio.modules.vehicles.repos import VehicleRepo
from thermio.modules.workspaces.settings import ComplianceSettings


log = structlog.get_logger()


class MonitoringService:
    """Snapshot reads over a workspace's logs.

    Each method fetches once and hands the rows to the pure builders in
    ``live``, ``detector`` and ``stats``.
    """

    def __init__(
        self,
        temp_logs: TempLogRepo,
        vehicles: VehicleRepo,
        users: UserRepo,
        notifications: NotificationSvc,
    ) -> None:
        self.temp_logs = temp_logs
        self.vehicles = vehicles
        self.users = users
        self.notifications = notifications

    async def live_board(
        self, workspace_id: UUID, settings: ComplianceSettings, now: datetime
    ) -> LiveBoard:
        logs = await self.temp_logs.list_recent(
            workspace_id, live_window_start(settings, now)
        )
        return build_live_board(
            logs,
            await self.vehicles.list_by_workspace(workspace_id),
            await self.users.list_by_workspace(workspace_id),
            settings,
            now,
        )

    async def exceptions(
        self,
        workspace_id: UUID,
        settings: ComplianceSettings,
        now: datetime,
        *,
        start: date | None = None,
        end: date | None = None,
        vehicle_id: UUID | None = None,
        driver_id: UUID | None = None,
        app_settings: Settings | None = None,
    ) -> list[ComplianceException]:
        """Exceptions for logs dated in ``[start, end]``.

        Defaults to the last ``exception_report_days`` days up to today.
        """
        app_settings = app_settings or get_settings()
        end = end or settings.clock.today(now)
        start = start or end - timedelta(days=app_settings.exception_report_days)
        logs = await self.temp_logs.list_by_date_range(
            workspace_id, start, end, vehicle_id=vehicle_id, driver_id=driver_id
        )
        return detect_exceptions(
            logs,
            settings,
            now,
            vehicles=await self.vehicles.list_by_workspace(workspace_id),
            users=await self.users.list_by_workspace(workspace_id),
        )

    async def dashboard(
        self,
        workspace_id: UUID,
        settings: ComplianceSettings,
        now: datetime,
        app_settings: Settings | None = None,
    ) -> DashboardSummary:
        """Today's summary; overdue vehicles also raise a notification.

        A vehicle is notified at most once per ``notification_dedup_hours``
        while the previous notification is unread.
        """
        app_settings = app_settings or get_settings()
        today = settings.clock.today(now)
        logs = await self.temp_logs.list_by_date_range(workspace_id, today, today)
        vehicles = await self.vehicles.list_by_workspace(workspace_id)
        users = await self.users.list_by_workspace(workspace_id)

        registrations = {v.id: v.registration for v in vehicles}
        names = {u.id: u.name for u in users}
        overdue = overdue_logs(logs, settings, now)
        if overdue:
            log.info(
                "overdue_vehicles_detected",
                workspace_id=str(workspace_id),
                count=len(overdue),
            )
        for temp_log, minutes in overdue:
            await self.notifications.notify_overdue(
                workspace_id,
                temp_log.vehicle_id,
                registrations.get(temp_log.vehicle_id, "Vehicle"),
                minutes,
                now=now,
                dedup_hours=app_settings.notification_dedup_hours,
                driver_id=temp_log.driver_id,
                driver_name=names.get(temp_log.driver_id),
            )

        return build_dashboard(logs, vehicles, users, settings, now)

    async def staff_stats(
        self, user_id: UUID, workspace_id: UUID, settings: ComplianceSettings
    ) -> StaffStats:
        user = await self.users.get_by_id(user_id, workspace_id)
        if not user:
            raise NotFoundError(
                "User not found", resource="user", resource_id=str(user_id)
            )
        logs = await self.temp_logs.list_history(workspace_id, driver_id=user_id)
        return build_staff_stats(
            user, logs, await self.vehicles.list_by_workspace(workspace_id), settings
        )

    async def vehicle_stats(
        self, vehicle_id: UUID, workspace_id: UUID, settings: ComplianceSettings
    ) -> VehicleStats:
        vehicle = await self.vehicles.get_by_id(vehicle_id, workspace_id)
        if not vehicle:
            raise NotFoundError(
                "Vehicle not found", resource="vehicle", resource_id=str(vehicle_id)
            )
        logs = await self.temp_logs.list_history(workspace_id, vehicle_id=vehicle_id)
        return build_vehicle_stats(
            vehicle, logs, await self.users.list_by_workspace(workspace_id), settings
        )


MonitoringSvc = Annotated[MonitoringService, Depends(MonitoringService)]
