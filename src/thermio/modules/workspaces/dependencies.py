"""Per-request compliance settings."""

from typing import Annotated

from fastapi import Depends

from thermio.core.auth.dependencies import WorkspaceId
from thermio.modules.workspaces.services import WorkspaceSvc
from thermio.modules.workspaces.settings import ComplianceSettings


async def get_compliance_settings(
    workspace_id: WorkspaceId,
    service: WorkspaceSvc,
) -> ComplianceSettings:
    return await service.compliance_settings(workspace_id)


WorkspaceSettings = Annotated[ComplianceSettings, Depends(get_compliance_settings)]
