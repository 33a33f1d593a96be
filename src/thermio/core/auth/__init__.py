"""Bearer-token authentication and role guards."""

from thermio.core.auth.backend import create_access_token, decode_token
from thermio.core.auth.roles import ADMIN_ROLES, OFFICE_ROLES, Role
from thermio.core.auth.schemas import TokenData


__all__ = [
    "ADMIN_ROLES",
    "OFFICE_ROLES",
    "Role",
    "TokenData",
    "create_access_token",
    "decode_token",
]
