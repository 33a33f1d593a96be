"""When scheduled work is due for a workspace.

Both decisions are made on the workspace's local clock, never the server's:
the hourly job asks every workspace and only those at the right local hour
act.
"""

from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict

from thermio.core.calendar import week_start
from thermio.core.constants import EXPORT_LOCAL_HOUR, RETENTION_LOCAL_HOUR
from thermio.modules.workspaces.settings import ComplianceSettings, ExportFrequency


class ExportPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ExportFrequency
    start: date
    end: date


def previous_period(frequency: ExportFrequency, today: date) -> ExportPeriod:
    """The full period that ended just before ``today``'s week or month.

    Weekly and fortnightly periods end on the Sunday before ``today``'s
    week; monthly is the previous calendar month.
    """
    if frequency is ExportFrequency.MONTHLY:
        end = today.replace(day=1) - timedelta(days=1)
        return ExportPeriod(kind=frequency, start=end.replace(day=1), end=end)

    monday = week_start(today)
    weeks = 2 if frequency is ExportFrequency.FORTNIGHTLY else 1
    return ExportPeriod(
        kind=frequency,
        start=monday - timedelta(days=7 * weeks),
        end=monday - timedelta(days=1),
    )


def export_period_due(
    settings: ComplianceSettings, now: datetime
) -> ExportPeriod | None:
    """The period to export if the scheduled export fires at ``now``.

    Fires at local midnight on the configured weekday when a frequency is
    set.
    """
    if settings.export_frequency is None:
        return None
    clock = settings.clock
    if clock.hour(now) != EXPORT_LOCAL_HOUR:
        return None
    if clock.weekday(now) != settings.export_schedule_weekday:
        return None
    return previous_period(settings.export_frequency, clock.today(now))


def retention_cutoff(settings: ComplianceSettings, now: datetime) -> date | None:
    """Logs dated before the returned date are due for purging.

    Only at 02:00 local time and only when retention is enabled.
    """
    if not settings.retention_enabled:
        return None
    clock = settings.clock
    if clock.hour(now) != RETENTION_LOCAL_HOUR:
        return None
    return clock.today(now) - timedelta(days=settings.retention_days)
