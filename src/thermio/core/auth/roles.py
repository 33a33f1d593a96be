"""User roles and the role groups routes are guarded by."""

from enum import StrEnum


class Role(StrEnum):
    DRIVER = "driver"
    OFFICE = "office"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


# Roles that may review fleet data: sheets, live board, exceptions
OFFICE_ROLES = frozenset({Role.OFFICE, Role.ADMIN})
ADMIN_ROLES = frozenset({Role.ADMIN})

# Workspace seniority; the owner ranks above every role
ROLE_RANK = {Role.DRIVER: 0, Role.OFFICE: 1, Role.ADMIN: 2}
OWNER_RANK = 3


def role_rank(role: str, *, is_owner: bool = False) -> int:
    if is_owner:
        return OWNER_RANK
    return ROLE_RANK.get(role, 0)
