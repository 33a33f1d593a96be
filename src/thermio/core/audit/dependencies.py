"""Request-scoped audit dependencies."""

from typing import Annotated, Any

from fastapi import Depends, Request

from thermio.api.dependencies import DBSession
from thermio.core.audit.service import AuditContext, WorkspaceEventService
from thermio.core.auth.dependencies import get_current_user
from thermio.core.errors import ForbiddenError
from thermio.core.logging import get_client_ip


async def get_audit_context(
    request: Request,
    user: Annotated[Any, Depends(get_current_user)],
) -> AuditContext:
    if user.workspace_id is None:
        raise ForbiddenError("No workspace context", error_code="no_workspace")
    return AuditContext(
        workspace_id=user.workspace_id,
        user_id=user.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        request_id=getattr(request.state, "request_id", None),
    )


async def get_workspace_events(
    db: DBSession,
    context: Annotated[AuditContext, Depends(get_audit_context)],
) -> WorkspaceEventService:
    return WorkspaceEventService(db, context)


AuditCtx = Annotated[AuditContext, Depends(get_audit_context)]
WorkspaceEvents = Annotated[WorkspaceEventService, Depends(get_workspace_events)]
