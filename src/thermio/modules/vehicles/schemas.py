"""Pydantic schemas for vehicles."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from thermio.core.constants import MAX_NAME_LENGTH, MAX_REGISTRATION_LENGTH
from thermio.modules.vehicles.models import ZoneType


class VehicleCreate(BaseModel):
    registration: str = Field(..., min_length=1, max_length=MAX_REGISTRATION_LENGTH)
    vehicle_class: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    zone_type: ZoneType = ZoneType.CHILLER
    is_temporary: bool = False
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def temporary_needs_expiry(self) -> "VehicleCreate":
        if self.is_temporary and self.expires_at is None:
            raise ValueError("Temporary vehicles need an expiry")
        return self


class VehicleResponse(BaseModel):
    id: UUID
    registration: str
    vehicle_class: str | None
    zone_type: ZoneType
    is_active: bool
    is_temporary: bool
    expires_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ServiceRecordCreate(BaseModel):
    kind: str = Field("general", min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=5000)
    performed_on: date | None = None


class ServiceRecordResponse(BaseModel):
    id: UUID
    vehicle_id: UUID
    kind: str
    description: str
    performed_on: date | None
    created_by: UUID | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
