"""Temp logs module: the per-vehicle daily log and its weekly sign-off.

Routes hang off ``/vehicles/{id}`` and ``/logs`` so the router carries no
prefix of its own.
"""

from fastapi import APIRouter


router = APIRouter(tags=["temp-logs"])

# Import routes to register them (must be after router is defined)
from thermio.modules.temp_logs import routes  # noqa: F401, E402
