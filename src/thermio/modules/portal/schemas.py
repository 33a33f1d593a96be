"""Pydantic schemas for portal operations."""

from pydantic import BaseModel


class JobTriggerResponse(BaseModel):
    job: str
    job_id: str
    queued: bool
