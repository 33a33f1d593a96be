"""Today's summary for the office dashboard."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from thermio.core.calendar import parse_instant
from thermio.modules.monitoring.live import minutes_since_last_reading
from thermio.modules.temp_logs.ranges import (
    VIOLATIONS,
    average,
    evaluate,
    numeric_values,
    reading_values,
    to_number,
)
from thermio.modules.workspaces.settings import ComplianceSettings


# Per reading, the first of these zones present feeds the daily average
AMBIENT_ZONES = ("cabin", "ambient")


class DashboardSummary(BaseModel):
    vehicle_count: int
    staff_count: int
    active_vehicles: int
    overdue_vehicles: int
    readings_today: int
    highest_temp_today: float | None
    highest_temp_registration: str | None
    average_temp_today: float | None
    exceptions_today: int
    last_reading_time: str | None
    overdue_minutes: int


def ambient_value(reading: Any) -> float | None:
    """Cabin temperature of a reading, else ambient, else None.

    A present but non-numeric cabin value does not fall through to ambient.
    """
    values = reading_values(reading)
    for zone in AMBIENT_ZONES:
        if values.get(zone) is not None:
            return to_number(values[zone])
    return None


def overdue_logs(
    logs: Iterable[Any], settings: ComplianceSettings, now: datetime
) -> list[tuple[Any, int]]:
    """Open logs with no reading for longer than the threshold, with the gap."""
    overdue = []
    for log in logs:
        if log.shift_done:
            continue
        minutes = minutes_since_last_reading(log, now)
        if minutes is not None and minutes > settings.overdue_threshold_minutes:
            overdue.append((log, minutes))
    return overdue


def build_dashboard(
    today_logs: Iterable[Any],
    vehicles: Iterable[Any],
    users: Iterable[Any],
    settings: ComplianceSettings,
    now: datetime,
) -> DashboardSummary:
    """Summarise the logs dated workspace-local today.

    The highest figure covers logs still open. Non-numeric readings are left
    out of the highest and average figures.
    """
    logs = list(today_logs)
    registrations: dict[UUID, str] = {v.id: v.registration for v in vehicles}
    overdue_ids = {log.id for log, _ in overdue_logs(logs, settings, now)}

    active = overdue = readings = exceptions = 0
    highest: float | None = None
    highest_vehicle: UUID | None = None
    last_time: datetime | None = None
    ambient_values: list[float] = []

    for log in logs:
        temps = log.temps or []
        readings += len(temps)
        if not log.shift_done and temps:
            if log.id in overdue_ids:
                overdue += 1
            else:
                active += 1
            for value in numeric_values(temps):
                if highest is None or value > highest:
                    highest, highest_vehicle = value, log.vehicle_id

        ambient_values.extend(
            v for v in (ambient_value(r) for r in temps) if v is not None
        )

        for reading in temps:
            statuses = evaluate(reading_values(reading), settings.temp_ranges)
            exceptions += sum(1 for s in statuses.values() if s in VIOLATIONS)
            try:
                at = parse_instant(reading["time"])
            except (KeyError, TypeError, ValueError):
                continue
            if last_time is None or at > last_time:
                last_time = at

    return DashboardSummary(
        vehicle_count=len(registrations),
        staff_count=sum(1 for u in users if u.role != "superadmin"),
        active_vehicles=active,
        overdue_vehicles=overdue,
        readings_today=readings,
        highest_temp_today=highest,
        highest_temp_registration=registrations.get(highest_vehicle)
        if highest_vehicle
        else None,
        average_temp_today=average(ambient_values),
        exceptions_today=exceptions,
        last_reading_time=settings.clock.time_label(last_time) if last_time else None,
        overdue_minutes=settings.overdue_threshold_minutes,
    )
