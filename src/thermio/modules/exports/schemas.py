"""Pydantic schemas for export records."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator


class ExportCreate(BaseModel):
    period_start: date
    period_end: date

    @model_validator(mode="after")
    def check_period(self) -> "ExportCreate":
        if self.period_start > self.period_end:
            raise ValueError("period_start must not be after period_end")
        return self


class ExportResponse(BaseModel):
    id: UUID
    kind: str
    period_start: date
    period_end: date
    status: str
    log_count: int
    recipients: list[str]
    created_by: UUID | None
    completed_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
