"""The daily log state machine.

A log moves NOT_STARTED -> AWAITING_FIRST_READING -> IN_PROGRESS ->
SHIFT_ENDED -> SIGNED_OFF. Checklist completion is orthogonal: a shift may
end without it, which is reported as an exception rather than prevented.

Transition builders are pure: they validate against the log as loaded and
return a :class:`Transition` describing the new field values, or raise a
domain error before anything is written. Persisting a transition is the
repository's job (a version-checked update); :func:`apply` replays one onto
an in-memory log.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from thermio.core.calendar import is_sign_off_day
from thermio.core.constants import MAX_USER_AGENT_LENGTH
from thermio.core.errors import (
    AlreadyCompletedError,
    AlreadyEndedError,
    AlreadySignedError,
    CabinRequiredError,
    MissingZoneReadingError,
    OdometerRequiredError,
    ReadingNotFoundError,
    ShiftAlreadyEndedError,
    ShiftNotCompletedError,
    SignatureRequiredError,
)
from thermio.modules.temp_logs.models import TempLogEventType
from thermio.modules.vehicles.models import ZoneType
from thermio.modules.workspaces.settings import ComplianceSettings


class LogState(StrEnum):
    NOT_STARTED = "not_started"
    AWAITING_FIRST_READING = "awaiting_first_reading"
    IN_PROGRESS = "in_progress"
    SHIFT_ENDED = "shift_ended"
    SIGNED_OFF = "signed_off"


class ReadingType(StrEnum):
    START = "start"
    CABIN = "cabin"
    END = "end"


# Zones the first reading of the day must carry, by vehicle zone type.
# Ambient vehicles have no fixed compartment: any one value will do.
START_ZONES: dict[str, frozenset[str]] = {
    ZoneType.AMBIENT: frozenset(),
    ZoneType.CHILLER: frozenset({"chiller"}),
    ZoneType.FREEZER: frozenset({"freezer"}),
    ZoneType.DUAL: frozenset({"chiller", "freezer"}),
}


@dataclass(frozen=True)
class Transition:
    """An accepted change: the transcript event, new field values and payload."""

    event: TempLogEventType
    changes: dict[str, Any]
    payload: dict[str, Any] = field(default_factory=dict)


def is_present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def state_of(log: Any | None) -> LogState:
    if log is None:
        return LogState.NOT_STARTED
    if log.admin_signature:
        return LogState.SIGNED_OFF
    if log.shift_done:
        return LogState.SHIFT_ENDED
    if not log.temps:
        return LogState.AWAITING_FIRST_READING
    return LogState.IN_PROGRESS


def is_sign_off_log(log: Any, settings: ComplianceSettings) -> bool:
    """The log falls on the sign-off weekday (or sign-off is forced).

    Only the log's own date counts; a late entry made on another day of the
    sign-off week does not.
    """
    return settings.force_sign_off_day or is_sign_off_day(
        log.log_date, settings.sign_off_weekday
    )


def requires_admin_sign_off(log: Any | None, settings: ComplianceSettings) -> bool:
    if log is None:
        return False
    return (
        is_sign_off_log(log, settings)
        and bool(log.shift_done)
        and is_present(log.odometer)
        and is_present(log.signature)
        and not log.admin_signature
    )


def apply(log: Any, transition: Transition) -> Any:
    for name, value in transition.changes.items():
        setattr(log, name, value)
    return log


# ============================================================
# Readings
# ============================================================


def _clean_values(values: Mapping[str, Any]) -> dict[str, Any]:
    return {str(zone): value for zone, value in values.items() if value is not None}


def _check_start_values(values: Mapping[str, Any], zone_type: str) -> None:
    required = START_ZONES.get(zone_type, frozenset())
    missing = sorted(zone for zone in required if not is_present(values.get(zone)))
    if missing or not any(is_present(v) for v in values.values()):
        raise MissingZoneReadingError(
            details={
                "zone_type": zone_type,
                "missing_zones": missing or sorted(required),
            }
        )


def _check_cabin_values(values: Mapping[str, Any]) -> None:
    if not is_present(values.get("cabin")):
        raise CabinRequiredError()


def _reading(
    reading_id: UUID | str, at: datetime, kind: ReadingType, values: dict[str, Any]
) -> dict[str, Any]:
    return {
        "id": str(reading_id),
        "time": at.isoformat(),
        "type": str(kind),
        "values": values,
    }


# ============================================================
# Transitions
# ============================================================


def submit_checklist(
    log: Any,
    answers: Mapping[str, Any],
    questions: Sequence[str],
    at: datetime,
) -> Transition:
    """Freeze the answers against the workspace's current questions.

    Answers are keyed ``q1``, ``q2``... in question order.

    Raises:
        AlreadyCompletedError: If the checklist was already submitted
    """
    if log.checklist_done:
        raise AlreadyCompletedError()

    snapshot = [
        {"question": question, "answer": answers.get(f"q{index}")}
        for index, question in enumerate(questions, start=1)
    ]
    return Transition(
        event=TempLogEventType.CHECKLIST_SUBMITTED,
        changes={
            "checklist_done": True,
            "checklist": dict(answers),
            "checklist_snapshot": snapshot,
            "checklist_at": at,
        },
        payload={"question_count": len(snapshot)},
    )


def add_reading(
    log: Any,
    values: Mapping[str, Any],
    zone_type: str,
    at: datetime,
    reading_id: UUID | str,
) -> Transition:
    """Append a reading: the first of the day is ``start``, later ones ``cabin``.

    Raises:
        ShiftAlreadyEndedError: If the shift is closed
        MissingZoneReadingError: If a start reading lacks a configured zone
        CabinRequiredError: If a later reading has no cabin value
    """
    if log.shift_done:
        raise ShiftAlreadyEndedError()

    cleaned = _clean_values(values)
    if not log.temps:
        kind = ReadingType.START
        _check_start_values(cleaned, zone_type)
    else:
        kind = ReadingType.CABIN
        _check_cabin_values(cleaned)

    reading = _reading(reading_id, at, kind, cleaned)
    return Transition(
        event=TempLogEventType.READING_ADDED,
        changes={"temps": [*log.temps, reading]},
        payload={"reading": reading},
    )


def edit_reading(
    log: Any,
    reading_id: UUID | str,
    values: Mapping[str, Any],
    zone_type: str,
) -> Transition:
    """Replace a reading's values in place, keeping its id, type and time.

    Raises:
        AlreadySignedError: Once the log has been countersigned
        ReadingNotFoundError: If no reading has ``reading_id``
    """
    if log.admin_signature:
        raise AlreadySignedError()

    temps = list(log.temps or [])
    index = next(
        (i for i, reading in enumerate(temps) if reading.get("id") == str(reading_id)),
        None,
    )
    if index is None:
        raise ReadingNotFoundError(resource="reading", resource_id=str(reading_id))

    original = temps[index]
    cleaned = _clean_values(values)
    if original.get("type") == ReadingType.START:
        _check_start_values(cleaned, zone_type)
    else:
        _check_cabin_values(cleaned)

    temps[index] = {**original, "values": cleaned}
    return Transition(
        event=TempLogEventType.READING_EDITED,
        changes={"temps": temps},
        payload={
            "reading_id": str(reading_id),
            "previous": original.get("values"),
            "values": cleaned,
        },
    )


def end_shift(
    log: Any,
    *,
    odometer: str | None,
    signature: str | None,
    final_cabin: Any | None,
    settings: ComplianceSettings,
    at: datetime,
    reading_id: UUID | str,
) -> Transition:
    """Close the shift, optionally recording a final cabin reading.

    On the sign-off day odometer and signature are mandatory when the
    workspace requires them.

    Raises:
        AlreadyEndedError: If the shift was already ended
        OdometerRequiredError: Odometer missing on the sign-off day
        SignatureRequiredError: Signature missing on the sign-off day
    """
    if log.shift_done:
        raise AlreadyEndedError()

    if is_sign_off_log(log, settings):
        if settings.require_odometer and not is_present(odometer):
            raise OdometerRequiredError()
        if settings.require_signature and not is_present(signature):
            raise SignatureRequiredError()

    changes: dict[str, Any] = {
        "shift_done": True,
        "shift_ended_at": at,
        "odometer": str(odometer).strip() if is_present(odometer) else None,
        "signature": signature if is_present(signature) else None,
    }
    payload: dict[str, Any] = {"odometer": changes["odometer"]}
    if is_present(final_cabin):
        reading = _reading(reading_id, at, ReadingType.END, {"cabin": final_cabin})
        changes["temps"] = [*(log.temps or []), reading]
        payload["reading"] = reading

    return Transition(
        event=TempLogEventType.SHIFT_ENDED,
        changes=changes,
        payload=payload,
    )


def admin_sign_off(
    log: Any,
    *,
    signature: str | None,
    signed_by: UUID,
    ip: str | None,
    user_agent: str | None,
    at: datetime,
) -> Transition:
    """Countersign a completed log. Terminal for readings and checklist.

    Raises:
        ShiftNotCompletedError: If the driver has not ended the shift
        AlreadySignedError: If the log is already countersigned
        SignatureRequiredError: If the signature is blank
    """
    if not log.shift_done:
        raise ShiftNotCompletedError()
    if log.admin_signature:
        raise AlreadySignedError()
    if not is_present(signature):
        raise SignatureRequiredError()

    return Transition(
        event=TempLogEventType.ADMIN_SIGNED_OFF,
        changes={
            "admin_signature": signature,
            "admin_signed_by": signed_by,
            "admin_signed_at": at,
            "admin_ip": ip,
            "admin_user_agent": (
                user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None
            ),
        },
        payload={"signed_by": str(signed_by), "ip": ip},
    )


def update_comments(log: Any, text: str | None) -> Transition:  # noqa: ARG001
    """Comments may be edited in any state."""
    comments = text.strip() if text else ""
    return Transition(
        event=TempLogEventType.COMMENTS_UPDATED,
        changes={"comments": comments or None},
        payload={"length": len(comments)},
    )
