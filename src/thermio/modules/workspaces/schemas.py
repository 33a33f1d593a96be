"""Pydantic schemas for workspace configuration and provisioning."""

from datetime import datetime
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from thermio.core.constants import (
    DEFAULT_MAX_QUESTIONS,
    DEFAULT_MAX_USERS,
    DEFAULT_MAX_VEHICLES,
    DEFAULT_RETENTION_DAYS,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
)
from thermio.modules.workspaces.settings import ExportFrequency, TempRange


# ============================================================
# Compliance settings
# ============================================================


class TempRangeInput(TempRange):
    """A zone band as submitted by an admin."""

    @model_validator(mode="after")
    def check_order(self) -> "TempRangeInput":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class SignOffSettings(BaseModel):
    weekday: int = Field(..., ge=0, le=6, description="0=Sunday..6=Saturday")
    require_odometer: bool = True
    require_signature: bool = True


class RetentionSettings(BaseModel):
    enabled: bool = False
    days: int = Field(DEFAULT_RETENTION_DAYS, ge=1)


class ExportSettings(BaseModel):
    frequency: ExportFrequency | None = None
    schedule_day: int = Field(0, ge=0, le=6, description="0=Sunday..6=Saturday")
    recipients: list[EmailStr] = []


class SettingsUpdate(BaseModel):
    """Full replacement of a workspace's compliance configuration."""

    timezone: str = Field(..., min_length=1, max_length=64)
    overdue_minutes: int = Field(..., ge=1, le=24 * 60)
    temp_ranges: dict[str, TempRangeInput] = {}
    sign_off: SignOffSettings
    retention: RetentionSettings = RetentionSettings()
    export: ExportSettings = ExportSettings()

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v


class ComplianceSettingsResponse(BaseModel):
    """Effective settings after defaults have been applied."""

    timezone: str
    sign_off_weekday: int
    overdue_threshold_minutes: int
    temp_ranges: dict[str, TempRange]
    require_odometer: bool
    require_signature: bool
    retention_enabled: bool
    retention_days: int
    export_frequency: ExportFrequency | None
    export_schedule_weekday: int
    export_recipients: list[str]
    checklist_questions: list[str]

    model_config = ConfigDict(from_attributes=True)


class ChecklistUpdate(BaseModel):
    questions: list[str] = Field(..., min_length=1)


# ============================================================
# Workspace events
# ============================================================


class WorkspaceEventResponse(BaseModel):
    id: UUID
    user_id: UUID | None
    action_type: str
    description: str
    metadata: dict[str, Any] | None = Field(None, validation_alias="metadata_")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkspaceEventListResponse(BaseModel):
    items: list[WorkspaceEventResponse]
    total: int
    page: int
    page_size: int


# ============================================================
# Provisioning
# ============================================================


class OwnerAccount(BaseModel):
    """First admin of a new workspace, flagged as its owner."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    username: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    email: EmailStr | None = None


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    slug: str | None = Field(
        None, min_length=1, max_length=MAX_SLUG_LENGTH, pattern=r"^[a-z0-9-]+$"
    )
    max_users: int = Field(DEFAULT_MAX_USERS, ge=1)
    max_vehicles: int = Field(DEFAULT_MAX_VEHICLES, ge=1)
    max_questions: int = Field(DEFAULT_MAX_QUESTIONS, ge=1)
    timezone: str | None = None
    owner: OwnerAccount


class LimitsUpdate(BaseModel):
    max_users: int = Field(..., ge=1)
    max_vehicles: int = Field(..., ge=1)
    max_questions: int = Field(..., ge=1)


class WorkspaceResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    status: str
    max_users: int
    max_vehicles: int
    max_questions: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProvisionedWorkspace(BaseModel):
    workspace: WorkspaceResponse
    owner_id: UUID
    owner_username: str
