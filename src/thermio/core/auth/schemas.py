"""Authentication schemas for token handling."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class TokenData(BaseModel):
    """Claims extracted from a bearer JWT.

    Attributes:
        user_id: The user's UUID
        workspace_id: The user's workspace (None for platform superadmins)
        role: driver, office, admin or superadmin
        exp: Token expiration time
        type: Token type, only "access" is accepted by the API
    """

    user_id: UUID
    workspace_id: UUID | None = None
    role: str
    exp: datetime
    type: str = "access"
    jti: str | None = None
