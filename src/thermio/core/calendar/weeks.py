"""Monday-based compliance weeks and the sign-off date within them."""

from datetime import date, timedelta


def week_start(d: date) -> date:
    """Monday of the week containing ``d``."""
    return d - timedelta(days=d.weekday())


def sign_off_date(d: date, weekday: int) -> date:
    """Date of the sign-off day in the Monday-based week containing ``d``.

    ``weekday`` uses 0=Sunday..6=Saturday. Sunday closes the week (Monday + 6),
    any other day lands at Monday + (weekday - 1).

    Raises:
        ValueError: If ``weekday`` is outside 0-6
    """
    if not 0 <= weekday <= 6:
        raise ValueError(f"weekday must be between 0 and 6, got {weekday}")
    offset = 6 if weekday == 0 else weekday - 1
    return week_start(d) + timedelta(days=offset)


def is_sign_off_day(d: date, weekday: int) -> bool:
    return sign_off_date(d, weekday) == d


def week_days(monday: date) -> list[date]:
    """The seven dates Monday..Sunday starting at ``monday``."""
    return [monday + timedelta(days=i) for i in range(7)]
