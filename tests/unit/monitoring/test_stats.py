"""Unit tests for the dashboard summary."""

from datetime import timedelta

import pytest

from thermio.core.auth.roles import Role
from thermio.modules.monitoring.stats import (
    ambient_value,
    build_dashboard,
    overdue_logs,
)
from tests.factories import TempLogFactory, UserFactory, VehicleFactory


pytestmark = pytest.mark.unit


def reading(at, **values):
    return {"id": "r", "time": at.isoformat(), "type": "cabin", "values": values}


@pytest.fixture
def van(workspace_id):
    return VehicleFactory.build(workspace_id=workspace_id, registration="2XYZ999")


def test_empty_day(vehicle, driver, settings, now):
    summary = build_dashboard([], [vehicle], [driver], settings, now)

    assert summary.vehicle_count == 1
    assert summary.staff_count == 1
    assert summary.readings_today == 0
    assert summary.highest_temp_today is None
    assert summary.average_temp_today is None
    assert summary.last_reading_time is None
    assert summary.overdue_minutes == 120


def test_summary_of_todays_logs(vehicle, van, driver, admin, settings, now):
    on_time = TempLogFactory.build(
        vehicle_id=vehicle.id,
        temps=[
            reading(now - timedelta(minutes=40), chiller=3, cabin=18),
            reading(now - timedelta(minutes=10), cabin="21"),
        ],
    )
    late = TempLogFactory.build(
        vehicle_id=van.id,
        temps=[reading(now - timedelta(minutes=150), chiller=8, cabin="n/a")],
    )
    finished = TempLogFactory.build(
        vehicle_id=van.id,
        shift_done=True,
        temps=[reading(now - timedelta(minutes=300), ambient=16)],
    )
    superadmin = UserFactory.build(role=Role.SUPERADMIN)

    summary = build_dashboard(
        [on_time, late, finished],
        [vehicle, van],
        [driver, admin, superadmin],
        settings,
        now,
    )

    assert summary.staff_count == 2
    assert summary.active_vehicles == 1
    assert summary.overdue_vehicles == 1
    assert summary.readings_today == 4
    assert summary.highest_temp_today == 21.0
    assert summary.highest_temp_registration == "1ABC123"
    assert summary.average_temp_today == 18.3
    assert summary.exceptions_today == 1
    assert summary.last_reading_time == "08:50"


def test_closed_logs_do_not_set_the_high(vehicle, van, driver, settings, now):
    open_log = TempLogFactory.build(
        vehicle_id=vehicle.id,
        temps=[reading(now - timedelta(minutes=5), cabin=19, ambient=30)],
    )
    closed = TempLogFactory.build(
        vehicle_id=van.id,
        shift_done=True,
        temps=[reading(now - timedelta(hours=3), cabin=26)],
    )

    summary = build_dashboard(
        [open_log, closed], [vehicle, van], [driver], settings, now
    )

    assert summary.highest_temp_today == 30.0
    assert summary.highest_temp_registration == "1ABC123"
    # cabin wins over ambient in a reading; closed logs still count
    assert summary.average_temp_today == 22.5


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ({"cabin": "4.5", "ambient": 20}, 4.5),
        ({"ambient": 20, "chiller": 3}, 20.0),
        ({"cabin": "n/a", "ambient": 20}, None),
        ({"chiller": 3}, None),
    ],
)
def test_ambient_value(values, expected, now):
    assert ambient_value(reading(now, **values)) == expected


def test_overdue_logs_reports_gap(vehicle, settings, now):
    late = TempLogFactory.build(
        vehicle_id=vehicle.id,
        temps=[reading(now - timedelta(minutes=121), cabin=18)],
    )
    fresh = TempLogFactory.build(
        vehicle_id=vehicle.id, temps=[reading(now, cabin=18)]
    )
    empty = TempLogFactory.build(vehicle_id=vehicle.id)

    assert overdue_logs([late, fresh, empty], settings, now) == [(late, 121)]
