"""Resolution of a workspace's compliance configuration.

Workspace settings are stored as loosely-typed JSON edited over years of
releases. :func:`resolve_settings` turns them into one fully-defaulted,
immutable :class:`ComplianceSettings` snapshot per request or job; the
compliance rules never read raw settings.

Stored shape::

    {
        "timezone": "Australia/Perth",
        "overdue_minutes": 120,
        "temp_ranges": {"chiller": {"min": 0, "max": 5}, ...},
        "sign_off": {"weekday": 5, "require_odometer": true, "require_signature": true},
        "retention": {"enabled": false, "days": 365},
        "export": {"frequency": "weekly", "schedule_day": "monday", "recipients": []}
    }
"""

from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, ConfigDict

from thermio.config import Settings, get_settings
from thermio.core.calendar import TimeZoneClock
from thermio.core.constants import DEFAULT_CHECKLIST_QUESTIONS, DEFAULT_RETENTION_DAYS


log = structlog.get_logger()

DAY_NAMES = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

TEMP_ZONES = ("cabin", "ambient", "chiller", "freezer")

_MISSING = object()


class ExportFrequency(StrEnum):
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"


class TempRange(BaseModel):
    """Inclusive acceptable band for one zone; either bound may be open."""

    model_config = ConfigDict(frozen=True)

    min: float | None = None
    max: float | None = None


class ComplianceSettings(BaseModel):
    """Fully-defaulted compliance configuration of one workspace."""

    model_config = ConfigDict(frozen=True)

    timezone: str
    sign_off_weekday: int
    overdue_threshold_minutes: int
    live_window_minutes: int
    temp_ranges: dict[str, TempRange] = {}
    require_odometer: bool = True
    require_signature: bool = True
    force_sign_off_day: bool = False
    retention_enabled: bool = False
    retention_days: int = DEFAULT_RETENTION_DAYS
    export_frequency: ExportFrequency | None = None
    export_schedule_weekday: int = 0
    export_recipients: tuple[str, ...] = ()
    checklist_questions: tuple[str, ...] = tuple(DEFAULT_CHECKLIST_QUESTIONS)

    @property
    def clock(self) -> TimeZoneClock:
        return TimeZoneClock.for_zone(self.timezone)


# ============================================================
# Field parsers: raise ValueError/TypeError on malformed input
# ============================================================


def _parse_timezone(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError("timezone must be a non-empty string")
    try:
        ZoneInfo(value)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"unknown timezone {value!r}") from exc
    return value


def _parse_weekday(value: Any) -> int:
    if isinstance(value, str) and value.strip().lower() in DAY_NAMES:
        return DAY_NAMES[value.strip().lower()]
    if isinstance(value, bool):
        raise TypeError("weekday must be a number or day name")
    weekday = int(value)
    if not 0 <= weekday <= 6:
        raise ValueError(f"weekday out of range: {weekday}")
    return weekday


def _parse_positive_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected an integer")
    number = int(value)
    if number <= 0:
        raise ValueError(f"expected a positive integer, got {number}")
    return number


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes", "on"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0", "no", "off"}:
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(f"not a boolean: {value!r}")


def _parse_bound(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise TypeError("range bound must be numeric")
    return float(value)


def _parse_temp_ranges(value: Any) -> dict[str, TempRange]:
    if not isinstance(value, Mapping):
        raise TypeError("temp_ranges must be an object")
    ranges: dict[str, TempRange] = {}
    for zone, bounds in value.items():
        try:
            if not isinstance(bounds, Mapping):
                raise TypeError("range must be an object")
            ranges[str(zone)] = TempRange(
                min=_parse_bound(bounds.get("min")),
                max=_parse_bound(bounds.get("max")),
            )
        except (TypeError, ValueError):
            log.warning("invalid_workspace_setting", field=f"temp_ranges.{zone}")
    return ranges


def _parse_frequency(value: Any) -> ExportFrequency | None:
    if value in (None, "", "none", "off"):
        return None
    return ExportFrequency(str(value).lower())


def _parse_strings(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        raise TypeError("expected a list of strings")
    return tuple(str(item).strip() for item in value if str(item).strip())


def _parse_questions(value: Any) -> tuple[str, ...]:
    questions = _parse_strings(value)
    if not questions:
        raise ValueError("no checklist questions configured")
    return questions


# ============================================================
# Resolution
# ============================================================


def _lookup(raw: Mapping[str, Any], *path: str) -> Any:
    node: Any = raw
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            return _MISSING
        node = node[key]
    return node


def _resolve(
    raw: Mapping[str, Any],
    path: tuple[str, ...],
    parse: Callable[[Any], Any],
    default: Any,
    workspace_id: Any,
) -> Any:
    value = _lookup(raw, *path)
    if value is _MISSING or value is None:
        return default
    try:
        return parse(value)
    except (TypeError, ValueError):
        log.warning(
            "invalid_workspace_setting",
            field=".".join(path),
            value=repr(value)[:100],
            workspace_id=str(workspace_id) if workspace_id else None,
        )
        return default


def resolve_settings(
    workspace: Any,
    app_settings: Settings | None = None,
) -> ComplianceSettings:
    """Build the compliance snapshot for ``workspace``.

    Malformed stored values fall back to the default for that field and are
    logged; resolution never raises.

    Args:
        workspace: Object with ``id``, ``settings`` and ``checklist_questions``
        app_settings: Application config providing defaults (cached
            settings when omitted)
    """
    app_settings = app_settings or get_settings()
    workspace_id = getattr(workspace, "id", None)
    raw = workspace.settings if isinstance(workspace.settings, Mapping) else {}

    default_timezone = app_settings.default_timezone
    try:
        default_timezone = _parse_timezone(default_timezone)
    except ValueError:
        log.warning("invalid_timezone", timezone=default_timezone)
        default_timezone = TimeZoneClock.for_zone(None).name

    def field(path: tuple[str, ...], parse: Callable[[Any], Any], default: Any) -> Any:
        return _resolve(raw, path, parse, default, workspace_id)

    return ComplianceSettings(
        timezone=field(("timezone",), _parse_timezone, default_timezone),
        sign_off_weekday=field(
            ("sign_off", "weekday"),
            _parse_weekday,
            app_settings.default_sign_off_weekday,
        ),
        overdue_threshold_minutes=field(
            ("overdue_minutes",),
            _parse_positive_int,
            app_settings.default_overdue_minutes,
        ),
        live_window_minutes=app_settings.live_window_minutes,
        temp_ranges=field(("temp_ranges",), _parse_temp_ranges, {}),
        require_odometer=field(("sign_off", "require_odometer"), _parse_bool, True),
        require_signature=field(("sign_off", "require_signature"), _parse_bool, True),
        force_sign_off_day=app_settings.force_sign_off_day,
        retention_enabled=field(("retention", "enabled"), _parse_bool, False),
        retention_days=field(
            ("retention", "days"), _parse_positive_int, DEFAULT_RETENTION_DAYS
        ),
        export_frequency=field(("export", "frequency"), _parse_frequency, None),
        export_schedule_weekday=field(("export", "schedule_day"), _parse_weekday, 0),
        export_recipients=field(("export", "recipients"), _parse_strings, ()),
        checklist_questions=_resolve(
            {"questions": workspace.checklist_questions or None},
            ("questions",),
            _parse_questions,
            tuple(DEFAULT_CHECKLIST_QUESTIONS),
            workspace_id,
        ),
    )
