"""Tests for the workspace audit log service."""

from uuid import uuid4

import pytest

from thermio.core.audit import (
    AuditContext,
    WorkspaceEvent,
    WorkspaceEventService,
    actions,
)
from tests.fakes import FakeSession


pytestmark = pytest.mark.unit


class TestAuditContext:
    """Tests for AuditContext."""

    def test_create_context(self):
        workspace_id = uuid4()
        user_id = uuid4()

        context = AuditContext(
            workspace_id=workspace_id,
            user_id=user_id,
            ip_address="192.168.1.1",
            user_agent="Mozilla/5.0",
            request_id="req-123",
        )

        assert context.workspace_id == workspace_id
        assert context.user_id == user_id
        assert context.ip_address == "192.168.1.1"
        assert context.request_id == "req-123"

    def test_job_context_has_no_user(self):
        context = AuditContext(workspace_id=uuid4())

        assert context.user_id is None
        assert context.ip_address is None


class TestWorkspaceEventService:
    """Tests for WorkspaceEventService."""

    @pytest.fixture
    def audit_context(self):
        return AuditContext(
            workspace_id=uuid4(),
            user_id=uuid4(),
            ip_address="10.0.0.1",
            user_agent="Test Agent",
            request_id="test-req-123",
        )

    async def test_record(self, audit_context):
        session = FakeSession()
        service = WorkspaceEventService(session, audit_context)

        entry = await service.record(
            actions.SHIFT_ENDED,
            "Shift ended for 1ABC123",
            metadata={"log_date": "2024-03-08"},
        )

        assert session.added == [entry]
        assert isinstance(entry, WorkspaceEvent)
        assert entry.action_type == "shift_ended"
        assert entry.workspace_id == audit_context.workspace_id
        assert entry.user_id == audit_context.user_id
        assert entry.ip_address == "10.0.0.1"
        assert entry.request_id == "test-req-123"
        assert entry.metadata_ == {"log_date": "2024-03-08"}
        session.flush.assert_awaited_once()

    async def test_long_description_is_truncated(self, audit_context):
        service = WorkspaceEventService(FakeSession(), audit_context)

        entry = await service.record(actions.TEMP_RECORDED, "x" * 600)

        assert len(entry.description) == 500

    async def test_failed_insert_is_swallowed(self, audit_context):
        session = FakeSession(fail_savepoint=True)
        service = WorkspaceEventService(session, audit_context)

        entry = await service.record(actions.TEMP_RECORDED, "Start reading")

        assert entry is None
        assert session.added == []

    def test_action_vocabulary(self):
        assert actions.EXCEPTION_FLAGGED in actions.ALL_ACTIONS
        assert all(len(action) <= 50 for action in actions.ALL_ACTIONS)
