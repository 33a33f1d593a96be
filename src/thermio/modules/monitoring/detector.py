"""Compliance exception detection.

Scans a set of logs for rule violations. Output is a flat list ordered by
severity (critical, warning, info) and then by log date, newest first;
records that tie on both keep the order they were found in.
"""

from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from thermio.core.calendar import is_sign_off_day
from thermio.modules.monitoring.live import minutes_since_last_reading
from thermio.modules.temp_logs.lifecycle import is_present
from thermio.modules.temp_logs.ranges import VIOLATIONS, evaluate, reading_values
from thermio.modules.workspaces.settings import ComplianceSettings


class Severity(StrEnum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ExceptionType(StrEnum):
    OUT_OF_RANGE = "out_of_range"
    MISSED_CHECKLIST = "missed_checklist"
    OVERDUE = "overdue"
    MISSED_SIGNOFF = "missed_signoff"


SEVERITY_RANK = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}


class ComplianceException(BaseModel):
    type: ExceptionType
    severity: Severity
    log_id: UUID
    log_date: date
    vehicle_id: UUID
    registration: str | None = None
    driver_id: UUID | None = None
    driver_name: str | None = None
    description: str
    time: str | None = None
    zone: str | None = None


def _out_of_range(
    log: Any, settings: ComplianceSettings
) -> Iterable[tuple[ExceptionType, Severity, str, str | None, str | None]]:
    if not settings.temp_ranges:
        return
    for reading in log.temps or []:
        values = reading_values(reading)
        for zone, status in evaluate(values, settings.temp_ranges).items():
            if status not in VIOLATIONS:
                continue
            time = None
            if reading.get("time"):
                time = settings.clock.time_label(reading["time"])
            yield (
                ExceptionType.OUT_OF_RANGE,
                Severity.WARNING,
                f"{zone.capitalize()} temp {status}: {values[zone]}°C",
                time,
                zone,
            )


def _is_missed_sign_off(log: Any, settings: ComplianceSettings, today: date) -> bool:
    return (
        is_sign_off_day(log.log_date, settings.sign_off_weekday)
        and bool(log.shift_done)
        and is_present(log.odometer)
        and is_present(log.signature)
        and not log.admin_signature
        and log.log_date < today
    )


def _exception(
    log: Any,
    vehicle: Any | None,
    driver: Any | None,
    type_: ExceptionType,
    severity: Severity,
    description: str,
    time: str | None = None,
    zone: str | None = None,
) -> ComplianceException:
    return ComplianceException(
        type=type_,
        severity=severity,
        log_id=log.id,
        log_date=log.log_date,
        vehicle_id=log.vehicle_id,
        registration=vehicle.registration if vehicle else None,
        driver_id=log.driver_id,
        driver_name=driver.name if driver else None,
        description=description,
        time=time,
        zone=zone,
    )


def detect_exceptions(
    logs: Iterable[Any],
    settings: ComplianceSettings,
    now: datetime,
    vehicles: Iterable[Any] = (),
    users: Iterable[Any] = (),
) -> list[ComplianceException]:
    """Every exception found in ``logs``, most severe first.

    - ``out_of_range`` (warning): one per reading and zone outside its band
    - ``missed_checklist`` (info): checklist not submitted
    - ``overdue`` (critical): today's open log with no reading for longer
      than the overdue threshold
    - ``missed_signoff`` (critical): a completed sign-off day log still
      without an admin signature after its date has passed
    """
    today = settings.clock.today(now)
    vehicles_by_id = {v.id: v for v in vehicles}
    users_by_id = {u.id: u for u in users}

    found: list[ComplianceException] = []
    for log in logs:
        vehicle = vehicles_by_id.get(log.vehicle_id)
        driver = users_by_id.get(log.driver_id) if log.driver_id else None
        records = list(_out_of_range(log, settings))

        if not log.checklist_done:
            records.append(
                (
                    ExceptionType.MISSED_CHECKLIST,
                    Severity.INFO,
                    "Checklist not completed",
                    None,
                    None,
                )
            )

        minutes = minutes_since_last_reading(log, now)
        if (
            not log.shift_done
            and minutes is not None
            and log.log_date == today
            and minutes > settings.overdue_threshold_minutes
        ):
            records.append(
                (
                    ExceptionType.OVERDUE,
                    Severity.CRITICAL,
                    f"No reading for {minutes} min "
                    f"(overdue: >{settings.overdue_threshold_minutes} min)",
                    settings.clock.time_label(log.temps[-1]["time"]),
                    None,
                )
            )

        if _is_missed_sign_off(log, settings, today):
            records.append(
                (
                    ExceptionType.MISSED_SIGNOFF,
                    Severity.CRITICAL,
                    "Admin sign-off not completed",
                    None,
                    None,
                )
            )

        found.extend(_exception(log, vehicle, driver, *record) for record in records)

    return sort_exceptions(found)


def sort_exceptions(
    exceptions: Iterable[ComplianceException],
) -> list[ComplianceException]:
    """Order by severity rank, then date descending.

    ``sorted`` is stable, so equal keys keep their input order.
    """
    return sorted(
        exceptions,
        key=lambda e: (SEVERITY_RANK[e.severity], -e.log_date.toordinal()),
    )
