"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Extracting and validating bearer JWTs
- Loading the current user and checking their workspace is active
- Role guards used by the routes
"""

from collections.abc import Awaitable, Callable
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from thermio.api.dependencies import DBSession
from thermio.core.auth.backend import decode_token
from thermio.core.auth.roles import ADMIN_ROLES, OFFICE_ROLES, Role
from thermio.core.auth.schemas import TokenData
from thermio.core.calendar import utc_now
from thermio.core.errors import ForbiddenError, UnauthorizedError


log = structlog.get_logger()

# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Raises:
        UnauthorizedError: If token is missing or invalid
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    token_data = decode_token(credentials.credentials)
    if not token_data:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    if token_data.type != "access":
        raise UnauthorizedError(
            "Invalid token type",
            error_code="invalid_token_type",
        )

    return token_data


async def get_current_user(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    db: DBSession,
    request: Request,
) -> Any:  # Returns User, but use Any to avoid circular import
    """Get the currently authenticated user.

    A user is rejected when deactivated, when a temporary account has
    expired, or when their workspace is suspended. Disabling a user and
    suspending a workspace are independent switches.

    Raises:
        UnauthorizedError: If the user no longer exists
        ForbiddenError: If the user or their workspace is not active
    """
    from thermio.modules.users.repos import UserRepository  # noqa: PLC0415
    from thermio.modules.workspaces.models import WorkspaceStatus  # noqa: PLC0415
    from thermio.modules.workspaces.repos import WorkspaceRepository  # noqa: PLC0415

    user = await UserRepository(db).get_by_id(token_data.user_id)
    if not user:
        raise UnauthorizedError(
            "User not found",
            error_code="user_not_found",
        )

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    if user.is_temporary and user.expires_at and user.expires_at <= utc_now():
        raise ForbiddenError(
            "Temporary account has expired",
            error_code="user_expired",
        )

    if user.role != Role.SUPERADMIN:
        workspace = (
            await WorkspaceRepository(db).get_by_id(user.workspace_id)
            if user.workspace_id
            else None
        )
        if not workspace or workspace.status != WorkspaceStatus.ACTIVE:
            raise ForbiddenError(
                "Workspace is suspended",
                error_code="workspace_suspended",
            )

    request.state.user_id = user.id
    request.state.workspace_id = user.workspace_id
    return user


def require_roles(
    roles: frozenset[Role], error_code: str
) -> Callable[..., Awaitable[Any]]:
    """Build a dependency that admits only users holding one of ``roles``."""

    async def checker(user: Annotated[Any, Depends(get_current_user)]) -> Any:
        if user.role not in roles:
            log.info(
                "role_denied",
                user_id=str(user.id),
                role=user.role,
                required=sorted(roles),
            )
            raise ForbiddenError(
                "Insufficient role for this action",
                error_code=error_code,
                details={"required_roles": sorted(roles)},
            )
        return user

    return checker


async def get_workspace_admin(
    user: Annotated[Any, Depends(get_current_user)],
) -> Any:
    """Admins and the workspace owner may change workspace configuration."""
    if user.role not in ADMIN_ROLES and not user.is_owner:
        raise ForbiddenError(
            "Admin or owner required",
            error_code="admin_required",
        )
    return user


async def get_workspace_id(
    user: Annotated[Any, Depends(get_current_user)],
) -> UUID:
    """Workspace of the current user.

    Raises:
        ForbiddenError: For platform users that belong to no workspace
    """
    if user.workspace_id is None:
        raise ForbiddenError(
            "No workspace context",
            error_code="no_workspace",
        )
    return user.workspace_id


# Type aliases for cleaner dependency injection
# Use Any for User type to avoid circular imports at runtime
CurrentUser = Annotated[Any, Depends(get_current_user)]
OfficeUser = Annotated[Any, Depends(require_roles(OFFICE_ROLES, "office_required"))]
AdminUser = Annotated[Any, Depends(require_roles(ADMIN_ROLES, "admin_required"))]
WorkspaceAdmin = Annotated[Any, Depends(get_workspace_admin)]
Superadmin = Annotated[
    Any, Depends(require_roles(frozenset({Role.SUPERADMIN}), "superadmin_required"))
]
WorkspaceId = Annotated[UUID, Depends(get_workspace_id)]
