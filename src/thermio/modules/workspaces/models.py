"""Workspace database models."""

from enum import StrEnum
from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from thermio.core.constants import (
    DEFAULT_MAX_QUESTIONS,
    DEFAULT_MAX_USERS,
    DEFAULT_MAX_VEHICLES,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
)
from thermio.core.database.base import Base, TimestampMixin, UUIDMixin


class WorkspaceStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Workspace(Base, UUIDMixin, TimestampMixin):
    """A tenant: one operator's fleet, people and compliance configuration.

    Workspaces are never deleted, only suspended. ``settings`` holds the raw
    compliance configuration as edited by admins; read it through
    ``resolve_settings`` rather than directly.
    """

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=WorkspaceStatus.ACTIVE,
        nullable=False,
    )

    max_users: Mapped[int] = mapped_column(default=DEFAULT_MAX_USERS, nullable=False)
    max_vehicles: Mapped[int] = mapped_column(
        default=DEFAULT_MAX_VEHICLES, nullable=False
    )
    max_questions: Mapped[int] = mapped_column(
        default=DEFAULT_MAX_QUESTIONS, nullable=False
    )

    settings: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        default=dict,
        nullable=False,
    )
    checklist_questions: Mapped[list[str]] = mapped_column(
        JSONB,
        default=list,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, slug={self.slug}, status={self.status})>"
