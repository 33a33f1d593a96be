"""Monitoring module: live board, exceptions, dashboard and history stats."""

from fastapi import APIRouter


router = APIRouter(prefix="/monitoring", tags=["monitoring"])

# Import routes to register them (must be after router is defined)
from thermio.modules.monitoring import routes  # noqa: F401, E402
