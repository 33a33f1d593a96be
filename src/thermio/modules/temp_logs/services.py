"""Daily log operations.

Each operation loads the log, builds a transition with the pure rules in
:mod:`thermio.modules.temp_logs.lifecycle` and commits it with a
version-checked update. A lost race reloads the log and validates again, so
the loser sees the domain error the winner's change implies (for example a
second checklist submission gets ``AlreadyCompletedError``).
"""

from collections.abc import Callable
from datetime import date, datetime
from typing import Annotated, Any
from uuid import UUID, uuid4

import structlog
from fastapi import Depends

from thermio.core.audit import WorkspaceEventService, actions
from thermio.core.calendar import sign_off_date, week_days, week_start
from thermio.core.constants import MAX_TRANSITION_ATTEMPTS
from thermio.core.errors import ConcurrentUpdateError, NotFoundError
from thermio.modules.notifications.models import NotificationType
from thermio.modules.notifications.services import NotificationSvc
from thermio.modules.temp_logs import lifecycle
from thermio.modules.temp_logs.lifecycle import Transition
from thermio.modules.temp_logs.models import TempLog
from thermio.modules.temp_logs.ranges import VIOLATIONS, evaluate, reading_values
from thermio.modules.temp_logs.repos import TempLogRepo
from thermio.modules.workspaces.settings import ComplianceSettings


log = structlog.get_logger()

WEEKDAY_LABELS = (
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
)


class WeeklySheet:
    """One vehicle's Monday..sign-off-date logs."""

    def __init__(
        self,
        vehicle: Any,
        monday: date,
        signs_off_on: date,
        days: list[tuple[date, TempLog | None]],
    ) -> None:
        self.vehicle = vehicle
        self.monday = monday
        self.sign_off_date = signs_off_on
        self.days = days

    @property
    def sign_off_log(self) -> TempLog | None:
        return next((lg for d, lg in self.days if d == self.sign_off_date), None)


class TempLogService:
    """Driver and office operations on the per-vehicle daily log."""

    def __init__(self, repo: TempLogRepo, notifications: NotificationSvc) -> None:
        self.repo = repo
        self.notifications = notifications

    async def open_log(
        self,
        vehicle: Any,
        driver_id: UUID | None,
        settings: ComplianceSettings,
        now: datetime,
    ) -> TempLog:
        """Get or create the vehicle's log for the workspace-local today.

        Concurrent first visits converge on one log.
        """
        log_date = settings.clock.today(now)
        temp_log, created = await self.repo.get_or_create(
            vehicle.workspace_id, vehicle.id, log_date, driver_id
        )
        if created:
            log.info(
                "log_opened",
                log_id=str(temp_log.id),
                vehicle_id=str(vehicle.id),
                log_date=log_date.isoformat(),
            )
        return temp_log

    async def get_log(self, log_id: UUID, workspace_id: UUID) -> TempLog:
        temp_log = await self.repo.get_by_id(log_id, workspace_id)
        if not temp_log:
            raise NotFoundError(
                "Log not found",
                resource="temp_log",
                resource_id=str(log_id),
            )
        return temp_log

    async def submit_checklist(
        self,
        vehicle: Any,
        user: Any,
        answers: dict[str, Any],
        settings: ComplianceSettings,
        events: WorkspaceEventService,
        now: datetime,
    ) -> TempLog:
        temp_log = await self.open_log(vehicle, user.id, settings, now)
        questions = settings.checklist_questions
        temp_log = await self._transition(
            temp_log,
            lambda current: lifecycle.submit_checklist(
                current, answers, questions, now
            ),
            user.id,
        )
        await events.record(
            actions.CHECKLIST_COMPLETED,
            f"Checklist completed for {vehicle.registration}",
            metadata=_log_metadata(temp_log, vehicle),
        )
        return temp_log

    async def add_reading(
        self,
        vehicle: Any,
        user: Any,
        values: dict[str, Any],
        settings: ComplianceSettings,
        events: WorkspaceEventService,
        now: datetime,
    ) -> TempLog:
        """Append a reading to today's log.

        Out-of-range values are flagged in the audit log and raise an
        exception notification; they are never rejected.
        """
        temp_log = await self.open_log(vehicle, user.id, settings, now)
        reading_id = uuid4()
        temp_log = await self._transition(
            temp_log,
            lambda current: lifecycle.add_reading(
                current, values, vehicle.zone_type, now, reading_id
            ),
            user.id,
        )
        reading = temp_log.temps[-1]
        await events.record(
            actions.TEMP_RECORDED,
            f"{str(reading['type']).capitalize()} temperature recorded "
            f"for {vehicle.registration}",
            metadata={**_log_metadata(temp_log, vehicle), "reading_id": reading["id"]},
        )
        await self._flag_violations(temp_log, vehicle, user, reading, settings, events)
        return temp_log

    async def edit_reading(
        self,
        vehicle: Any,
        user: Any,
        reading_id: str,
        values: dict[str, Any],
        settings: ComplianceSettings,
        events: WorkspaceEventService,
        now: datetime,
    ) -> TempLog:
        temp_log = await self.open_log(vehicle, user.id, settings, now)
        temp_log = await self._transition(
            temp_log,
            lambda current: lifecycle.edit_reading(
                current, reading_id, values, vehicle.zone_type
            ),
            user.id,
        )
        await events.record(
            actions.TEMP_EDITED,
            f"Temperature edited for {vehicle.registration}",
            metadata={**_log_metadata(temp_log, vehicle), "reading_id": reading_id},
        )
        return temp_log

    async def end_shift(
        self,
        vehicle: Any,
        user: Any,
        *,
        odometer: str | None,
        signature: str | None,
        final_cabin: Any | None,
        settings: ComplianceSettings,
        events: WorkspaceEventService,
        now: datetime,
    ) -> TempLog:
        temp_log = await self.open_log(vehicle, user.id, settings, now)
        reading_id = uuid4()
        temp_log = await self._transition(
            temp_log,
            lambda current: lifecycle.end_shift(
                current,
                odometer=odometer,
                signature=signature,
                final_cabin=final_cabin,
                settings=settings,
                at=now,
                reading_id=reading_id,
            ),
            user.id,
        )
        log.info(
            "shift_ended",
            log_id=str(temp_log.id),
            vehicle_id=str(vehicle.id),
            log_date=temp_log.log_date.isoformat(),
        )
        await events.record(
            actions.SHIFT_ENDED,
            f"Shift ended for {vehicle.registration}",
            metadata={
                **_log_metadata(temp_log, vehicle),
                "odometer": temp_log.odometer,
            },
        )

        if lifecycle.requires_admin_sign_off(temp_log, settings):
            await self.notifications.notify(
                vehicle.workspace_id,
                NotificationType.SIGNOFF_REQUIRED,
                f"{vehicle.registration} ready for sign-off",
                f"Week of {week_start(temp_log.log_date).isoformat()} "
                "needs an admin signature",
                vehicle_id=vehicle.id,
                driver_id=user.id,
            )
        return temp_log

    async def sign_off(
        self,
        vehicle: Any,
        user: Any,
        *,
        monday: date,
        signature: str | None,
        ip: str | None,
        user_agent: str | None,
        settings: ComplianceSettings,
        events: WorkspaceEventService,
        now: datetime,
    ) -> TempLog:
        """Countersign the sign-off day log of the week containing ``monday``.

        Raises:
            NotFoundError: If no log exists for the sign-off date
        """
        target = sign_off_date(monday, settings.sign_off_weekday)
        temp_log = await self.repo.get_by_key(vehicle.workspace_id, vehicle.id, target)
        if not temp_log:
            raise NotFoundError(
                f"No log found for sign-off date {target.isoformat()}",
                resource="temp_log",
                details={"sign_off_date": target.isoformat()},
            )

        temp_log = await self._transition(
            temp_log,
            lambda current: lifecycle.admin_sign_off(
                current,
                signature=signature.strip() if signature else signature,
                signed_by=user.id,
                ip=ip,
                user_agent=user_agent,
                at=now,
            ),
            user.id,
        )
        log.info(
            "admin_signed_off",
            log_id=str(temp_log.id),
            vehicle_id=str(vehicle.id),
            sign_off_date=target.isoformat(),
            signed_by=str(user.id),
        )
        await events.record(
            actions.SIGNOFF_COMPLETED,
            f"Admin sign-off completed for {vehicle.registration} "
            f"(week of {week_start(monday).isoformat()})",
            metadata={
                **_log_metadata(temp_log, vehicle),
                "monday": week_start(monday).isoformat(),
            },
        )
        return temp_log

    async def update_comments(
        self,
        log_id: UUID,
        workspace_id: UUID,
        user: Any,
        text: str | None,
        events: WorkspaceEventService,
    ) -> TempLog:
        temp_log = await self.get_log(log_id, workspace_id)
        temp_log = await self._transition(
            temp_log,
            lambda current: lifecycle.update_comments(current, text),
            user.id,
        )
        await events.record(
            actions.COMMENTS_UPDATED,
            f"Comments updated for log of {temp_log.log_date.isoformat()}",
            metadata={"log_id": str(temp_log.id)},
        )
        return temp_log

    async def weekly_sheet(
        self,
        vehicle: Any,
        day: date,
        settings: ComplianceSettings,
    ) -> WeeklySheet:
        """Logs from Monday through the sign-off date of ``day``'s week."""
        monday = week_start(day)
        last = sign_off_date(monday, settings.sign_off_weekday)
        logs = await self.repo.list_by_date_range(
            vehicle.workspace_id, monday, last, vehicle_id=vehicle.id
        )
        by_date = {temp_log.log_date: temp_log for temp_log in logs}
        days = [(d, by_date.get(d)) for d in week_days(monday) if d <= last]
        return WeeklySheet(vehicle, monday, last, days)

    async def _transition(
        self,
        temp_log: TempLog,
        build: Callable[[TempLog], Transition],
        actor_id: UUID | None,
    ) -> TempLog:
        """Validate and commit a transition, retrying on a lost update.

        Raises:
            ConcurrentUpdateError: If every attempt lost the version check
        """
        current = temp_log
        for attempt in range(1, MAX_TRANSITION_ATTEMPTS + 1):
            transition = build(current)
            updated = await self.repo.apply_transition(current, transition, actor_id)
            if updated is not None:
                return updated

            log.warning(
                "transition_conflict",
                log_id=str(current.id),
                transition_event=str(transition.event),
                expected_version=current.version,
                attempt=attempt,
            )
            reloaded = await self.repo.get_by_id(current.id, current.workspace_id)
            if reloaded is None:
                raise NotFoundError(
                    "Log not found",
                    resource="temp_log",
                    resource_id=str(current.id),
                )
            current = reloaded

        raise ConcurrentUpdateError(details={"log_id": str(temp_log.id)})

    async def _flag_violations(
        self,
        temp_log: TempLog,
        vehicle: Any,
        user: Any,
        reading: dict[str, Any],
        settings: ComplianceSettings,
        events: WorkspaceEventService,
    ) -> None:
        values = reading_values(reading)
        statuses = evaluate(values, settings.temp_ranges)
        out_of_range = sorted(
            zone for zone, status in statuses.items() if status in VIOLATIONS
        )
        if not out_of_range:
            return

        detail = ", ".join(f"{zone} {values[zone]}" for zone in out_of_range)
        await events.record(
            actions.EXCEPTION_FLAGGED,
            f"Out-of-range temperature on {vehicle.registration}: {detail}",
            metadata={
                **_log_metadata(temp_log, vehicle),
                "reading_id": reading["id"],
                "zones": out_of_range,
            },
        )
        await self.notifications.notify(
            vehicle.workspace_id,
            NotificationType.EXCEPTION,
            f"{vehicle.registration} temperature out of range",
            detail,
            vehicle_id=vehicle.id,
            driver_id=user.id,
        )


def _log_metadata(temp_log: TempLog, vehicle: Any) -> dict[str, Any]:
    return {
        "log_id": str(temp_log.id),
        "vehicle_id": str(vehicle.id),
        "registration": vehicle.registration,
        "log_date": temp_log.log_date.isoformat(),
    }


TempLogSvc = Annotated[TempLogService, Depends(TempLogService)]
