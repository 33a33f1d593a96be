"""Live status board.

A pure projection of recently-touched logs into "who and what is on the
road right now". Nothing here reads the clock or the database; callers pass
``now`` and the workspace's vehicles and users.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from thermio.core.calendar import minutes_between, parse_instant
from thermio.modules.temp_logs.ranges import VIOLATIONS, evaluate, reading_values
from thermio.modules.workspaces.settings import ComplianceSettings


# Zones shown as "the" temperature of a reading, in order of preference
DISPLAY_ZONES = ("cabin", "ambient", "chiller", "freezer")


class LiveStatus(StrEnum):
    ACTIVE = "active"
    OVERDUE = "overdue"
    IDLE = "idle"


class LiveEntry(BaseModel):
    log_id: UUID
    log_date: date
    vehicle_id: UUID
    registration: str | None
    vehicle_class: str | None
    driver_id: UUID | None
    driver_name: str | None
    status: LiveStatus
    last_temp: Any = None
    last_reading_time: str
    minutes_ago: int
    is_overdue: bool
    has_alert: bool
    temp_alerts: dict[str, str | None]
    checklist_done: bool
    shift_done: bool
    reading_count: int


class LiveBoard(BaseModel):
    by_vehicle: list[LiveEntry]
    by_driver: list[LiveEntry]
    total_live: int
    overdue_minutes: int
    generated_at: str


def live_window_minutes(settings: ComplianceSettings) -> int:
    return max(settings.overdue_threshold_minutes, settings.live_window_minutes)


def live_window_start(settings: ComplianceSettings, now: datetime) -> datetime:
    """Oldest ``updated_at`` a log may have to appear on the board."""
    return now - timedelta(minutes=live_window_minutes(settings))


def display_temp(values: Mapping[str, Any]) -> Any:
    for zone in DISPLAY_ZONES:
        if values.get(zone) not in (None, ""):
            return values[zone]
    return None


def minutes_since_last_reading(log: Any, now: datetime) -> int | None:
    temps = log.temps or []
    if not temps:
        return None
    try:
        return minutes_between(parse_instant(temps[-1]["time"]), now)
    except (KeyError, TypeError, ValueError):
        return None


def live_status(log: Any, minutes_ago: int, settings: ComplianceSettings) -> LiveStatus:
    if log.shift_done:
        return LiveStatus.IDLE
    if minutes_ago > settings.overdue_threshold_minutes:
        return LiveStatus.OVERDUE
    return LiveStatus.ACTIVE


def _entry(
    log: Any,
    vehicle: Any | None,
    driver: Any | None,
    settings: ComplianceSettings,
    now: datetime,
) -> LiveEntry | None:
    temps = log.temps or []
    if not temps:
        return None
    last = temps[-1]
    try:
        last_time = parse_instant(last["time"])
    except (KeyError, TypeError, ValueError):
        return None

    minutes_ago = minutes_between(last_time, now)
    status = live_status(log, minutes_ago, settings)
    values = reading_values(last)
    alerts = evaluate(values, settings.temp_ranges) if settings.temp_ranges else {}

    return LiveEntry(
        log_id=log.id,
        log_date=log.log_date,
        vehicle_id=log.vehicle_id,
        registration=vehicle.registration if vehicle else None,
        vehicle_class=vehicle.vehicle_class if vehicle else None,
        driver_id=log.driver_id,
        driver_name=driver.name if driver else None,
        status=status,
        last_temp=display_temp(values),
        last_reading_time=settings.clock.time_label(last_time),
        minutes_ago=minutes_ago,
        is_overdue=status is LiveStatus.OVERDUE,
        has_alert=any(s in VIOLATIONS for s in alerts.values()),
        temp_alerts={zone: str(s) if s else None for zone, s in alerts.items()},
        checklist_done=bool(log.checklist_done),
        shift_done=bool(log.shift_done),
        reading_count=len(temps),
    )


def _keep_freshest(
    board: dict[UUID, LiveEntry], key: UUID, entry: LiveEntry
) -> None:
    current = board.get(key)
    if current is None or entry.minutes_ago < current.minutes_ago:
        board[key] = entry


def build_live_board(
    logs: Iterable[Any],
    vehicles: Iterable[Any],
    users: Iterable[Any],
    settings: ComplianceSettings,
    now: datetime,
) -> LiveBoard:
    """Latest status per vehicle and per driver.

    Logs without readings are skipped. When several logs map to the same
    vehicle or driver the one with the most recent reading wins. Entries
    whose vehicle (vehicle view) or driver (driver view) is unknown are
    omitted.
    """
    vehicles_by_id = {v.id: v for v in vehicles}
    users_by_id = {u.id: u for u in users}

    by_vehicle: dict[UUID, LiveEntry] = {}
    by_driver: dict[UUID, LiveEntry] = {}
    for log in logs:
        vehicle = vehicles_by_id.get(log.vehicle_id)
        driver = users_by_id.get(log.driver_id) if log.driver_id else None
        entry = _entry(log, vehicle, driver, settings, now)
        if entry is None:
            continue
        if vehicle is not None:
            _keep_freshest(by_vehicle, vehicle.id, entry)
        if driver is not None:
            _keep_freshest(by_driver, driver.id, entry)

    drivers = sorted(by_driver.values(), key=lambda e: e.minutes_ago)
    return LiveBoard(
        by_vehicle=sorted(by_vehicle.values(), key=lambda e: e.minutes_ago),
        by_driver=drivers,
        total_live=sum(1 for e in drivers if e.status is not LiveStatus.IDLE),
        overdue_minutes=settings.overdue_threshold_minutes,
        generated_at=settings.clock.time_label(now),
    )
