"""Workspace configuration: compliance settings, checklist and audit log."""

from fastapi import APIRouter


router = APIRouter(prefix="/workspace", tags=["workspace"])

# Import routes to register them (must be after router is defined)
from thermio.modules.workspaces import routes  # noqa: F401, E402
