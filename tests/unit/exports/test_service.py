"""Unit tests for ExportService."""

from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from thermio.core.audit import WorkspaceEvent, actions
from thermio.modules.exports.models import ExportKind
from thermio.modules.exports.services import ExportService
from thermio.modules.workspaces.settings import ExportFrequency
from tests.factories import TempLogFactory, WorkspaceFactory
from tests.fakes import FakeExportRepository


pytestmark = pytest.mark.unit

MONDAY_MIDNIGHT = datetime(2024, 3, 10, 16, 0, tzinfo=UTC)
MONDAY_TWO_AM = datetime(2024, 3, 10, 18, 0, tzinfo=UTC)


@pytest.fixture
def workspace(workspace_id):
    return WorkspaceFactory.build(id=workspace_id)


@pytest.fixture
def export_repo():
    return FakeExportRepository()


@pytest.fixture
def export_service(export_repo, temp_log_repo):
    return ExportService(export_repo, temp_log_repo)


@pytest.fixture
def weekly(settings):
    return settings.model_copy(
        update={
            "export_frequency": ExportFrequency.WEEKLY,
            "export_schedule_weekday": 1,
            "export_recipients": ("ops@example.com",),
        }
    )


def seed_logs(repo, workspace_id, *days):
    for day in days:
        repo.add(TempLogFactory.build(workspace_id=workspace_id, log_date=day))


def audit_entries(session):
    return [obj for obj in session.added if isinstance(obj, WorkspaceEvent)]


class TestScheduledExport:
    """Tests for ExportService.schedule_due_export."""

    async def test_creates_record_for_previous_week(
        self, export_service, export_repo, temp_log_repo, workspace, weekly
    ):
        seed_logs(
            temp_log_repo,
            workspace.id,
            date(2024, 3, 3),
            date(2024, 3, 4),
            date(2024, 3, 10),
            date(2024, 3, 11),
        )

        record = await export_service.schedule_due_export(
            workspace, weekly, MONDAY_MIDNIGHT
        )

        assert record.kind == ExportKind.WEEKLY
        assert (record.period_start, record.period_end) == (
            date(2024, 3, 4),
            date(2024, 3, 10),
        )
        assert record.log_count == 2
        assert record.recipients == ["ops@example.com"]
        [entry] = audit_entries(export_repo.session)
        assert entry.action_type == actions.EXPORT_GENERATED
        assert entry.user_id is None

    async def test_running_twice_creates_one_record(
        self, export_service, export_repo, workspace, weekly
    ):
        first = await export_service.schedule_due_export(
            workspace, weekly, MONDAY_MIDNIGHT
        )
        second = await export_service.schedule_due_export(
            workspace, weekly, MONDAY_MIDNIGHT
        )

        assert first is not None
        assert second is None
        assert len(export_repo.records) == 1
        assert len(audit_entries(export_repo.session)) == 1

    async def test_nothing_due(self, export_service, export_repo, workspace, weekly):
        assert (
            await export_service.schedule_due_export(workspace, weekly, MONDAY_TWO_AM)
            is None
        )
        assert export_repo.records == {}


class TestManualExport:
    """Tests for ExportService.request_export."""

    async def test_reuses_existing_record(
        self, export_service, workspace, admin, settings, events
    ):
        start, end = date(2024, 3, 4), date(2024, 3, 10)

        record, created = await export_service.request_export(
            workspace.id, start, end, admin.id, settings, events
        )
        again, created_again = await export_service.request_export(
            workspace.id, start, end, admin.id, settings, events
        )

        assert created is True
        assert created_again is False
        assert again.id == record.id
        assert record.kind == ExportKind.MANUAL
        assert record.created_by == admin.id
        events.record.assert_awaited_once()


class TestRetention:
    """Tests for ExportService.purge_expired_logs."""

    async def test_purges_logs_older_than_retention(
        self, export_service, export_repo, temp_log_repo, workspace, settings
    ):
        enabled = settings.model_copy(
            update={"retention_enabled": True, "retention_days": 365}
        )
        seed_logs(
            temp_log_repo,
            workspace.id,
            date(2023, 3, 11),
            date(2023, 3, 12),
            date(2024, 3, 8),
        )
        seed_logs(temp_log_repo, uuid4(), date(2020, 1, 1))

        removed = await export_service.purge_expired_logs(
            workspace, enabled, MONDAY_TWO_AM
        )

        assert removed == 1
        assert sorted(r.log_date for r in temp_log_repo.rows.values()) == [
            date(2020, 1, 1),
            date(2023, 3, 12),
            date(2024, 3, 8),
        ]
        [entry] = audit_entries(export_repo.session)
        assert entry.action_type == actions.RETENTION_PURGED

    async def test_disabled_retention_keeps_everything(
        self, export_service, temp_log_repo, workspace, settings
    ):
        seed_logs(temp_log_repo, workspace.id, date(2000, 1, 1))

        assert (
            await export_service.purge_expired_logs(workspace, settings, MONDAY_TWO_AM)
            == 0
        )
        assert len(temp_log_repo.rows) == 1
