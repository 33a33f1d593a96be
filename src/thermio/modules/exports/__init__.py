"""Exports module: scheduled and on-demand compliance export records."""

from fastapi import APIRouter


router = APIRouter(prefix="/exports", tags=["exports"])

# Import routes to register them (must be after router is defined)
from thermio.modules.exports import routes  # noqa: F401, E402
