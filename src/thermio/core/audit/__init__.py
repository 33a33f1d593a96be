"""Workspace audit log."""

from thermio.core.audit.models import WorkspaceEvent
from thermio.core.audit.service import AuditContext, WorkspaceEventService


__all__ = [
    "AuditContext",
    "WorkspaceEvent",
    "WorkspaceEventService",
]
