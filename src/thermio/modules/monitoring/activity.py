"""Lifetime activity figures for one driver or one vehicle."""

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from thermio.core.calendar import parse_instant
from thermio.modules.temp_logs.ranges import average, has_any_violation, numeric_values
from thermio.modules.workspaces.settings import ComplianceSettings


class ActivityStats(BaseModel):
    shifts: int
    temp_checks: int
    avg_minutes_between_checks: float | None
    avg_shift_minutes: float | None
    highest_temp: float | None
    lowest_temp: float | None
    logs_with_exceptions: int
    last_log_date: date | None


class DriverActivity(ActivityStats):
    driver_id: UUID | None
    driver_name: str | None


class StaffStats(ActivityStats):
    user_id: UUID
    name: str
    role: str
    vehicles_driven: int
    most_driven_registration: str | None
    completed_pct: int | None
    longest_streak_days: int


class VehicleStats(ActivityStats):
    vehicle_id: UUID
    registration: str
    drivers: list[DriverActivity]


def reading_times(log: Any) -> list[datetime]:
    """Timestamps of a log's readings in recorded order, skipping bad ones."""
    times = []
    for reading in log.temps or []:
        try:
            times.append(parse_instant(reading["time"]))
        except (KeyError, TypeError, ValueError):
            continue
    return times


def _minutes(delta: timedelta) -> float:
    return delta.total_seconds() / 60


def activity_stats(logs: Iterable[Any], settings: ComplianceSettings) -> ActivityStats:
    """Aggregate a set of logs.

    Gaps between checks are measured within each log, so the overnight gap
    between two shifts never counts. Shift length is first to last reading
    of a finished log with at least two readings.
    """
    logs = list(logs)
    readings = [r for log in logs for r in log.temps or []]
    values = numeric_values(readings)
    gaps: list[float] = []
    shift_lengths: list[float] = []

    for log in logs:
        times = reading_times(log)
        gaps.extend(_minutes(b - a) for a, b in zip(times, times[1:], strict=False))
        if log.shift_done and len(times) > 1:
            shift_lengths.append(_minutes(times[-1] - times[0]))

    return ActivityStats(
        shifts=len(logs),
        temp_checks=len(readings),
        avg_minutes_between_checks=average(gaps),
        avg_shift_minutes=average(shift_lengths),
        highest_temp=max(values, default=None),
        lowest_temp=min(values, default=None),
        logs_with_exceptions=sum(
            1 for log in logs if has_any_violation(log, settings.temp_ranges)
        ),
        last_log_date=max((log.log_date for log in logs), default=None),
    )


def longest_streak(days: Iterable[date]) -> int:
    """Longest run of consecutive calendar days.

    >>> longest_streak([date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 7)])
    2
    """
    longest = current = 0
    previous: date | None = None
    for day in sorted(set(days)):
        current = current + 1 if previous and day - previous == timedelta(days=1) else 1
        longest = max(longest, current)
        previous = day
    return longest


def build_staff_stats(
    user: Any,
    logs: Iterable[Any],
    vehicles: Iterable[Any],
    settings: ComplianceSettings,
) -> StaffStats:
    logs = list(logs)
    registrations: dict[UUID, str] = {v.id: v.registration for v in vehicles}
    driven = Counter(log.vehicle_id for log in logs)

    most_driven = None
    if driven:
        top_id, _ = driven.most_common(1)[0]
        most_driven = registrations.get(top_id, str(top_id))

    completed = sum(1 for log in logs if log.shift_done)
    return StaffStats(
        **activity_stats(logs, settings).model_dump(),
        user_id=user.id,
        name=user.name,
        role=user.role,
        vehicles_driven=len(driven),
        most_driven_registration=most_driven,
        completed_pct=round(100 * completed / len(logs)) if logs else None,
        longest_streak_days=longest_streak(log.log_date for log in logs),
    )


def build_vehicle_stats(
    vehicle: Any,
    logs: Iterable[Any],
    users: Iterable[Any],
    settings: ComplianceSettings,
) -> VehicleStats:
    """Vehicle totals plus the same figures per driver, first driver first."""
    logs = list(logs)
    names: dict[UUID, str] = {u.id: u.name for u in users}

    by_driver: dict[UUID | None, list[Any]] = {}
    for log in logs:
        by_driver.setdefault(log.driver_id, []).append(log)

    return VehicleStats(
        **activity_stats(logs, settings).model_dump(),
        vehicle_id=vehicle.id,
        registration=vehicle.registration,
        drivers=[
            DriverActivity(
                **activity_stats(driver_logs, settings).model_dump(),
                driver_id=driver_id,
                driver_name=names.get(driver_id) if driver_id else None,
            )
            for driver_id, driver_logs in by_driver.items()
        ],
    )
