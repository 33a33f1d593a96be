"""Platform portal: workspace provisioning for superadmins."""

from fastapi import APIRouter


router = APIRouter(prefix="/portal", tags=["portal"])

# Import routes to register them (must be after router is defined)
from thermio.modules.portal import routes  # noqa: F401, E402
