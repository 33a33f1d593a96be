"""Export record routes."""

from fastapi import Response, status

from thermio.core.audit.dependencies import WorkspaceEvents
from thermio.core.auth.dependencies import OfficeUser, WorkspaceId
from thermio.modules.exports import router
from thermio.modules.exports.schemas import ExportCreate, ExportResponse
from thermio.modules.exports.services import ExportSvc
from thermio.modules.workspaces.dependencies import WorkspaceSettings


@router.get(
    "",
    response_model=list[ExportResponse],
    summary="List export records",
)
async def list_exports(
    workspace_id: WorkspaceId,
    service: ExportSvc,
    current_user: OfficeUser,  # noqa: ARG001 - required for auth
) -> list[ExportResponse]:
    records = await service.list_exports(workspace_id)
    return [ExportResponse.model_validate(r) for r in records]


@router.post(
    "",
    response_model=ExportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request an export",
    description="Returns the existing record with 200 if the period was "
    "already requested.",
)
async def request_export(
    data: ExportCreate,
    response: Response,
    workspace_id: WorkspaceId,
    settings: WorkspaceSettings,
    service: ExportSvc,
    events: WorkspaceEvents,
    current_user: OfficeUser,
) -> ExportResponse:
    record, created = await service.request_export(
        workspace_id,
        data.period_start,
        data.period_end,
        current_user.id,
        settings,
        events,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return ExportResponse.model_validate(record)
