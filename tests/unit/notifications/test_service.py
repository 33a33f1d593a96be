"""Tests for NotificationService."""

from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from thermio.core.errors import NotFoundError
from thermio.modules.notifications.models import Notification, NotificationType
from thermio.modules.notifications.services import NotificationService
from tests.fakes import FakeSession


pytestmark = pytest.mark.unit


@pytest.fixture
def repo():
    repo = AsyncMock()
    repo.session = FakeSession()
    repo.has_recent_unread.return_value = False
    return repo


@pytest.fixture
def service(repo):
    return NotificationService(repo)


class TestNotify:
    """Tests for notify and its de-duplicating variants."""

    async def test_notify_adds_unread_notification(self, service, repo, vehicle):
        notification = await service.notify(
            vehicle.workspace_id,
            NotificationType.EXCEPTION,
            "1ABC123 temperature out of range",
            "chiller 9",
            vehicle_id=vehicle.id,
        )

        assert repo.session.added == [notification]
        assert isinstance(notification, Notification)
        assert notification.read is False
        assert notification.type == "exception"
        assert notification.vehicle_id == vehicle.id

    async def test_title_is_capped(self, service, workspace_id):
        notification = await service.notify(
            workspace_id, NotificationType.SYSTEM, "t" * 300
        )

        assert len(notification.title) == 255

    async def test_failed_insert_returns_none(self, repo, workspace_id):
        repo.session = FakeSession(fail_savepoint=True)

        result = await NotificationService(repo).notify(
            workspace_id, NotificationType.SYSTEM, "Hello"
        )

        assert result is None
        assert repo.session.added == []

    async def test_notify_once_skips_recent_duplicate(
        self, service, repo, vehicle, now
    ):
        repo.has_recent_unread.return_value = True

        result = await service.notify_once(
            vehicle.workspace_id,
            NotificationType.OVERDUE_VEHICLE,
            "1ABC123 overdue",
            None,
            since=now,
            vehicle_id=vehicle.id,
        )

        assert result is None
        assert repo.session.added == []

    async def test_overdue_message(self, service, repo, vehicle, driver, now):
        notification = await service.notify_overdue(
            vehicle.workspace_id,
            vehicle.id,
            "1ABC123",
            130,
            now=now,
            dedup_hours=6,
            driver_id=driver.id,
            driver_name="Sam Driver",
        )

        assert notification.title == "1ABC123 overdue"
        assert notification.body == "No temperature reading for 2h 10m (Sam Driver)"
        repo.has_recent_unread.assert_awaited_once_with(
            vehicle.workspace_id,
            NotificationType.OVERDUE_VEHICLE,
            now - timedelta(hours=6),
            vehicle_id=vehicle.id,
        )


class TestReading:
    """Tests for listing and marking notifications read."""

    async def test_list_returns_unread_count(self, service, repo, workspace_id):
        repo.list_by_workspace.return_value = ["n1", "n2"]
        repo.unread_count.return_value = 1

        items, unread = await service.list_notifications(workspace_id)

        assert items == ["n1", "n2"]
        assert unread == 1

    async def test_mark_read_unknown(self, service, repo, workspace_id):
        repo.mark_read.return_value = False

        with pytest.raises(NotFoundError):
            await service.mark_read(uuid4(), workspace_id)

    async def test_mark_all_read(self, service, repo, workspace_id):
        repo.mark_all_read.return_value = 4

        assert await service.mark_all_read(workspace_id) == 4
