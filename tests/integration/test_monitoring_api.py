"""API tests for the live board, exception report and dashboard."""

from datetime import date, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from httpx import AsyncClient

from thermio.modules.monitoring import routes
from thermio.modules.monitoring.services import MonitoringService
from tests.factories import TempLogFactory
from tests.fakes import FakeListRepository


pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch, now):
    monkeypatch.setattr(routes, "utc_now", lambda: now)


@pytest.fixture
def monitoring_notifications():
    return AsyncMock()


@pytest.fixture(autouse=True)
def monitoring(
    app, temp_log_repo, vehicle, driver, admin, office, monitoring_notifications
):
    service = MonitoringService(
        temp_log_repo,
        FakeListRepository([vehicle]),
        FakeListRepository([driver, admin, office]),
        monitoring_notifications,
    )
    app.dependency_overrides[MonitoringService] = lambda: service
    return service


@pytest.fixture(autouse=True)
def as_office(auth_as, office):
    auth_as(office)


def seed(repo, vehicle, driver, log_date, temps, **kwargs):
    temp_log = TempLogFactory.build(
        workspace_id=vehicle.workspace_id,
        vehicle_id=vehicle.id,
        driver_id=driver.id,
        log_date=log_date,
        temps=temps,
        **kwargs,
    )
    repo.add(temp_log)
    return temp_log


def reading(at, **values):
    return {
        "id": str(uuid4()),
        "time": at.isoformat(),
        "type": "cabin",
        "values": values,
    }


async def test_driver_is_refused(client: AsyncClient, auth_as, driver):
    auth_as(driver)

    response = await client.get("/api/v1/monitoring/live")

    assert response.status_code == 403


async def test_live_board(client: AsyncClient, temp_log_repo, vehicle, driver, now):
    seed(
        temp_log_repo,
        vehicle,
        driver,
        date(2024, 3, 8),
        [reading(now - timedelta(minutes=130), cabin=18)],
    )

    response = await client.get("/api/v1/monitoring/live")

    assert response.status_code == 200
    data = response.json()
    [entry] = data["by_vehicle"]
    assert entry["registration"] == "1ABC123"
    assert entry["status"] == "overdue"
    assert entry["minutes_ago"] == 130
    assert data["by_driver"][0]["driver_name"] == "Sam Driver"
    assert data["total_live"] == 1
    assert data["overdue_minutes"] == 120


async def test_exception_report_filters(
    client: AsyncClient, temp_log_repo, vehicle, driver, now
):
    seed(
        temp_log_repo,
        vehicle,
        driver,
        date(2024, 3, 6),
        [reading(now, chiller=9)],
        checklist_done=True,
    )
    seed(temp_log_repo, vehicle, driver, date(2024, 1, 2), [], checklist_done=False)

    response = await client.get(
        "/api/v1/monitoring/exceptions",
        params={"from": "2024-03-01", "to": "2024-03-08", "vehicle": str(vehicle.id)},
    )

    assert response.status_code == 200
    [found] = response.json()
    assert found["type"] == "out_of_range"
    assert found["severity"] == "warning"
    assert found["zone"] == "chiller"
    assert found["registration"] == "1ABC123"


async def test_exception_report_defaults_to_recent_days(
    client: AsyncClient, temp_log_repo, vehicle, driver
):
    seed(temp_log_repo, vehicle, driver, date(2024, 3, 1), [], checklist_done=False)
    seed(temp_log_repo, vehicle, driver, date(2023, 12, 1), [], checklist_done=False)

    response = await client.get("/api/v1/monitoring/exceptions")

    assert [e["log_date"] for e in response.json()] == ["2024-03-01"]


async def test_dashboard_notifies_overdue_vehicles(
    client: AsyncClient,
    temp_log_repo,
    vehicle,
    driver,
    now,
    monitoring_notifications,
):
    seed(
        temp_log_repo,
        vehicle,
        driver,
        date(2024, 3, 8),
        [reading(now - timedelta(minutes=150), cabin=19, chiller=4)],
        checklist_done=True,
    )

    response = await client.get("/api/v1/monitoring/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["overdue_vehicles"] == 1
    assert data["readings_today"] == 1
    assert data["highest_temp_today"] == 19.0
    assert data["average_temp_today"] == 19.0

    monitoring_notifications.notify_overdue.assert_awaited_once()
    call = monitoring_notifications.notify_overdue.await_args
    assert call.args[1:4] == (vehicle.id, "1ABC123", 150)
    assert call.kwargs["driver_name"] == "Sam Driver"
    assert call.kwargs["dedup_hours"] == 6


async def test_staff_history(client: AsyncClient, temp_log_repo, vehicle, driver, now):
    seed(
        temp_log_repo,
        vehicle,
        driver,
        date(2024, 3, 7),
        [
            reading(now - timedelta(days=1, minutes=45), cabin=17),
            reading(now - timedelta(days=1), cabin=19, chiller=6),
        ],
        shift_done=True,
    )
    seed(temp_log_repo, vehicle, driver, date(2024, 3, 8), [reading(now, cabin=16)])

    response = await client.get(f"/api/v1/monitoring/staff/{driver.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["shifts"] == 2
    assert data["temp_checks"] == 3
    assert data["avg_minutes_between_checks"] == 45.0
    assert data["avg_shift_minutes"] == 45.0
    assert (data["lowest_temp"], data["highest_temp"]) == (6.0, 19.0)
    assert data["logs_with_exceptions"] == 1
    assert data["most_driven_registration"] == "1ABC123"
    assert data["longest_streak_days"] == 2


async def test_vehicle_history(client: AsyncClient, temp_log_repo, vehicle, driver):
    seed(temp_log_repo, vehicle, driver, date(2024, 3, 8), [])

    response = await client.get(f"/api/v1/monitoring/vehicles/{vehicle.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["registration"] == "1ABC123"
    assert data["drivers"][0]["driver_name"] == "Sam Driver"


@pytest.mark.parametrize("kind", ["staff", "vehicles"])
async def test_history_of_unknown_record(client: AsyncClient, kind):
    response = await client.get(f"/api/v1/monitoring/{kind}/{uuid4()}")

    assert response.status_code == 404
