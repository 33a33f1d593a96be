"""Pydantic schemas for daily temperature logs."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from thermio.modules.temp_logs.lifecycle import (
    LogState,
    requires_admin_sign_off,
    state_of,
)
from thermio.modules.temp_logs.ranges import evaluate, reading_values
from thermio.modules.workspaces.settings import ComplianceSettings


# Drivers type values in; they are stored as given and coerced when evaluated.
ReadingValue = float | str | None


# ============================================================
# Requests
# ============================================================


class ChecklistSubmit(BaseModel):
    """Answers keyed ``q1``, ``q2``... in current question order."""

    answers: dict[str, Any] = Field(..., examples=[{"q1": "yes", "q2": "yes"}])


class ReadingCreate(BaseModel):
    values: dict[str, ReadingValue] = Field(
        ...,
        description="Zone to temperature, e.g. cabin, chiller, freezer, dispatch",
        examples=[{"chiller": 3.2, "dispatch": 2.8}],
    )


class ReadingUpdate(ReadingCreate):
    pass


class EndShiftRequest(BaseModel):
    odometer: str | None = Field(None, max_length=32)
    signature: str | None = None
    final_cabin: ReadingValue = None


class SignOffRequest(BaseModel):
    monday: date = Field(..., description="Any date in the week being signed off")
    signature: str | None = None


class CommentsUpdate(BaseModel):
    comments: str | None = Field(None, max_length=5000)


# ============================================================
# Responses
# ============================================================


class ReadingResponse(BaseModel):
    id: str
    time: datetime
    type: str
    values: dict[str, Any]
    status: dict[str, str | None] = {}


class TempLogResponse(BaseModel):
    id: UUID
    vehicle_id: UUID
    driver_id: UUID | None
    log_date: date
    state: LogState
    temps: list[ReadingResponse]
    checklist_done: bool
    checklist_snapshot: list[dict[str, Any]] | None
    checklist_at: datetime | None
    shift_done: bool
    odometer: str | None
    signature: str | None
    shift_ended_at: datetime | None
    admin_signature: str | None
    admin_signed_by: UUID | None
    admin_signed_at: datetime | None
    comments: str | None
    requires_admin_sign_off: bool
    version: int


class SheetDay(BaseModel):
    date: date
    weekday: str
    driver_name: str | None = None
    log: TempLogResponse | None = None


class WeeklySheetResponse(BaseModel):
    vehicle_id: UUID
    registration: str
    week_start: date
    sign_off_date: date
    days: list[SheetDay]
    sign_off_log: TempLogResponse | None
    requires_admin_sign_off: bool
    checklist_questions: list[str]


def reading_response(
    reading: dict[str, Any], ranges: dict[str, Any]
) -> ReadingResponse:
    values = reading_values(reading)
    return ReadingResponse(
        id=reading["id"],
        time=reading["time"],
        type=reading["type"],
        values=dict(values),
        status={
            zone: str(status) if status else None
            for zone, status in evaluate(values, ranges).items()
        },
    )


def log_response(log: Any, settings: ComplianceSettings) -> TempLogResponse:
    """Serialize a log with its derived state and per-reading range status."""
    return TempLogResponse(
        id=log.id,
        vehicle_id=log.vehicle_id,
        driver_id=log.driver_id,
        log_date=log.log_date,
        state=state_of(log),
        temps=[
            reading_response(reading, settings.temp_ranges)
            for reading in log.temps or []
        ],
        checklist_done=log.checklist_done,
        checklist_snapshot=log.checklist_snapshot,
        checklist_at=log.checklist_at,
        shift_done=log.shift_done,
        odometer=log.odometer,
        signature=log.signature,
        shift_ended_at=log.shift_ended_at,
        admin_signature=log.admin_signature,
        admin_signed_by=log.admin_signed_by,
        admin_signed_at=log.admin_signed_at,
        comments=log.comments,
        requires_admin_sign_off=requires_admin_sign_off(log, settings),
        version=log.version,
    )
