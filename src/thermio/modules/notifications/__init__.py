"""Notifications module: in-app alerts for office staff."""

from fastapi import APIRouter


router = APIRouter(prefix="/notifications", tags=["notifications"])

# Import routes to register them (must be after router is defined)
from thermio.modules.notifications import routes  # noqa: F401, E402
