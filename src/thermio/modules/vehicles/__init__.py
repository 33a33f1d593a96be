"""Vehicles module: fleet registration and service history."""

from fastapi import APIRouter


router = APIRouter(prefix="/vehicles", tags=["vehicles"])

# Import routes to register them (must be after router is defined)
from thermio.modules.vehicles import routes  # noqa: F401, E402
