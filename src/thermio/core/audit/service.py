"""Recording workspace events.

Events are a side effect of the action they describe: each is written in
its own SAVEPOINT so a failed insert is logged and discarded without undoing
the surrounding transaction.
"""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from thermio.core.audit.models import WorkspaceEvent
from thermio.core.constants import MAX_DESCRIPTION_LENGTH


log = structlog.get_logger()


class AuditContext:
    """Request-level information attached to every event of a request.

    Scheduled jobs build one with only ``workspace_id`` set.
    """

    def __init__(
        self,
        workspace_id: UUID,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.workspace_id = workspace_id
        self.user_id = user_id
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.request_id = request_id


class WorkspaceEventService:
    """Writes entries to the workspace audit log."""

    def __init__(
        self,
        session: AsyncSession,
        context: AuditContext,
    ) -> None:
        self.session = session
        self.context = context

    async def record(
        self,
        action_type: str,
        description: str,
        metadata: dict[str, Any] | None = None,
    ) -> WorkspaceEvent | None:
        """Append an event to the workspace audit log.

        Args:
            action_type: One of the names in ``thermio.core.audit.actions``
            description: Human-readable summary
            metadata: Additional context data

        Returns:
            The created event, or None if it could not be written

        Example:
            await events.record(
                actions.SHIFT_ENDED,
                "Shift ended for 1ABC234",
                metadata={"vehicle_id": str(vehicle.id), "log_date": "2024-03-15"},
            )
        """
        entry = WorkspaceEvent(
            workspace_id=self.context.workspace_id,
            user_id=self.context.user_id,
            action_type=action_type,
            description=description[:MAX_DESCRIPTION_LENGTH],
            metadata_=metadata,
            ip_address=self.context.ip_address,
            user_agent=self.context.user_agent,
            request_id=self.context.request_id,
        )

        # Pending work of the caller must not be swallowed by the savepoint
        await self.session.flush()
        try:
            async with self.session.begin_nested():
                self.session.add(entry)
        except SQLAlchemyError:
            log.exception(
                "workspace_event_failed",
                action_type=action_type,
                workspace_id=str(self.context.workspace_id),
            )
            return None

        log.info(
            "workspace_event_recorded",
            action_type=action_type,
            workspace_id=str(self.context.workspace_id),
            user_id=str(self.context.user_id) if self.context.user_id else None,
        )
        return entry
