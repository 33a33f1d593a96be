"""API tests for export records and notifications."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from httpx import AsyncClient

from thermio.core.calendar import utc_now
from thermio.modules.exports.services import ExportService
from thermio.modules.notifications.models import Notification, NotificationType
from thermio.modules.notifications.services import NotificationService
from tests.fakes import FakeExportRepository


pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def as_office(auth_as, office):
    auth_as(office)


@pytest.fixture
def export_repo(app, temp_log_repo):
    repo = FakeExportRepository()
    service = ExportService(repo, temp_log_repo)
    app.dependency_overrides[ExportService] = lambda: service
    return repo


@pytest.fixture
def notification_repo(app):
    repo = AsyncMock()
    app.dependency_overrides[NotificationService] = lambda: NotificationService(repo)
    return repo


class TestExports:
    """Tests for /exports."""

    async def test_request_is_idempotent(
        self, client: AsyncClient, export_repo, office
    ):
        body = {"period_start": "2024-03-04", "period_end": "2024-03-10"}

        first = await client.post("/api/v1/exports", json=body)
        second = await client.post("/api/v1/exports", json=body)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["id"] == second.json()["id"]
        assert first.json()["kind"] == "manual"
        assert first.json()["status"] == "pending"
        assert first.json()["created_by"] == str(office.id)
        assert len(export_repo.records) == 1

    async def test_period_must_be_ordered(self, client: AsyncClient, export_repo):
        response = await client.post(
            "/api/v1/exports",
            json={"period_start": "2024-03-10", "period_end": "2024-03-04"},
        )

        assert response.status_code == 422

    async def test_list(self, client: AsyncClient, export_repo):
        await client.post(
            "/api/v1/exports",
            json={"period_start": "2024-03-04", "period_end": "2024-03-10"},
        )

        response = await client.get("/api/v1/exports")

        assert response.status_code == 200
        assert [r["period_start"] for r in response.json()] == ["2024-03-04"]


class TestNotifications:
    """Tests for /notifications."""

    async def test_list_with_unread_count(
        self, client: AsyncClient, notification_repo, workspace_id, vehicle
    ):
        notification_repo.list_by_workspace.return_value = [
            Notification(
                id=uuid4(),
                workspace_id=workspace_id,
                type=NotificationType.OVERDUE_VEHICLE,
                title="1ABC123 overdue",
                body="No temperature reading for 2h 10m",
                vehicle_id=vehicle.id,
                read=False,
                created_at=utc_now(),
            )
        ]
        notification_repo.unread_count.return_value = 1

        response = await client.get("/api/v1/notifications")

        assert response.status_code == 200
        data = response.json()
        assert data["unread"] == 1
        assert data["items"][0]["type"] == "overdue_vehicle"
        notification_repo.list_by_workspace.assert_awaited_once_with(workspace_id)

    async def test_mark_unknown_read(self, client: AsyncClient, notification_repo):
        notification_repo.mark_read.return_value = False

        response = await client.post(f"/api/v1/notifications/{uuid4()}/read")

        assert response.status_code == 404

    async def test_mark_all_read(self, client: AsyncClient, notification_repo):
        notification_repo.mark_all_read.return_value = 3

        response = await client.post("/api/v1/notifications/read")

        assert response.json() == {"updated": 3}
