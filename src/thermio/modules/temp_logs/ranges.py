"""Temperature range evaluation and numeric helpers.

Reading values are stored as drivers typed them, so everything here is
tolerant: a missing, empty or non-numeric value is "not evaluated" and is
left out of aggregates, never treated as zero.
"""

import math
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

from thermio.modules.workspaces.settings import TempRange


class RangeStatus(StrEnum):
    OK = "ok"
    LOW = "low"
    HIGH = "high"


VIOLATIONS = frozenset({RangeStatus.LOW, RangeStatus.HIGH})

# Zones judged against another zone's band. Dispatch is the pre-load chiller
# temperature; ambient trucks use the cabin band unless one is configured.
_RANGE_FALLBACKS: dict[str, tuple[str, ...]] = {
    "dispatch": ("chiller",),
    "ambient": ("ambient", "cabin"),
}


def to_number(value: Any) -> float | None:
    """Coerce a stored reading value to a float, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) or math.isinf(number) else number


def range_for(zone: str, ranges: Mapping[str, TempRange]) -> TempRange | None:
    for candidate in _RANGE_FALLBACKS.get(zone, (zone,)):
        if candidate in ranges:
            return ranges[candidate]
    return None


def evaluate_value(
    zone: str, value: Any, ranges: Mapping[str, TempRange]
) -> RangeStatus | None:
    band = range_for(zone, ranges)
    number = to_number(value)
    if band is None or number is None:
        return None
    if band.min is not None and number < band.min:
        return RangeStatus.LOW
    if band.max is not None and number > band.max:
        return RangeStatus.HIGH
    return RangeStatus.OK


def evaluate(
    values: Mapping[str, Any], ranges: Mapping[str, TempRange]
) -> dict[str, RangeStatus | None]:
    """Status of every zone present in ``values``.

    >>> evaluate({"cabin": 5}, {"cabin": TempRange(min=0, max=4)})
    {'cabin': <RangeStatus.HIGH: 'high'>}
    >>> evaluate({"cabin": 5}, {})
    {'cabin': None}
    """
    return {zone: evaluate_value(zone, value, ranges) for zone, value in values.items()}


def reading_values(reading: Mapping[str, Any]) -> Mapping[str, Any]:
    values = reading.get("values")
    return values if isinstance(values, Mapping) else {}


def has_any_violation(log: Any, ranges: Mapping[str, TempRange]) -> bool:
    """True if any reading of ``log`` is low or high in any zone."""
    if not ranges:
        return False
    return any(
        status in VIOLATIONS
        for reading in log.temps or []
        for status in evaluate(reading_values(reading), ranges).values()
    )


def numeric_values(
    readings: Iterable[Mapping[str, Any]], zones: Iterable[str] | None = None
) -> list[float]:
    """All numeric values of ``readings``, optionally limited to ``zones``."""
    wanted = set(zones) if zones is not None else None
    numbers: list[float] = []
    for reading in readings:
        for zone, value in reading_values(reading).items():
            if wanted is not None and zone not in wanted:
                continue
            number = to_number(value)
            if number is not None:
                numbers.append(number)
    return numbers


def average(numbers: Iterable[float]) -> float | None:
    """Mean rounded half-up to one decimal, None for no values."""
    values = list(numbers)
    if not values:
        return None
    return math.floor(sum(values) / len(values) * 10 + 0.5) / 10
