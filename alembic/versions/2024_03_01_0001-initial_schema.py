"""initial_schema

Revision ID: 3f1c9a2e7b40
Revises:
Create Date: 2024-03-01 00:01:00.000000

Creates workspaces, users, vehicles, daily temperature logs with their
transcript, the workspace audit log, notifications and export records.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f1c9a2e7b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _workspace_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ["workspace_id"],
        ["workspaces.id"],
        ondelete="CASCADE",
    )


def upgrade() -> None:
    """Upgrade database schema."""
    # Workspaces
    op.create_table(
        "workspaces",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=63), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("max_users", sa.Integer(), nullable=False),
        sa.Column("max_vehicles", sa.Integer(), nullable=False),
        sa.Column("max_questions", sa.Integer(), nullable=False),
        sa.Column("settings", postgresql.JSONB(), nullable=False),
        sa.Column("checklist_questions", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workspaces_id"), "workspaces", ["id"])
    op.create_index(op.f("ix_workspaces_name"), "workspaces", ["name"])
    op.create_index(op.f("ix_workspaces_slug"), "workspaces", ["slug"], unique=True)

    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_owner", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("must_change_password", sa.Boolean(), nullable=False),
        sa.Column("consent_accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("password_history", postgresql.JSONB(), nullable=False),
        sa.Column("is_temporary", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "workspace_id", "username", name="uq_users_workspace_username"
        ),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"])
    op.create_index(op.f("ix_users_workspace_id"), "users", ["workspace_id"])
    op.create_index(op.f("ix_users_email"), "users", ["email"])
    op.create_index(
        "uq_users_one_owner_per_workspace",
        "users",
        ["workspace_id"],
        unique=True,
        postgresql_where=sa.text("is_owner"),
    )

    # Vehicles
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("registration", sa.String(length=32), nullable=False),
        sa.Column("vehicle_class", sa.String(length=255), nullable=True),
        sa.Column("zone_type", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_temporary", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _workspace_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "workspace_id", "registration", name="uq_vehicles_workspace_registration"
        ),
    )
    op.create_index(op.f("ix_vehicles_id"), "vehicles", ["id"])
    op.create_index(op.f("ix_vehicles_workspace_id"), "vehicles", ["workspace_id"])

    op.create_table(
        "vehicle_service_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("vehicle_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("performed_on", sa.Date(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        _created_at(),
        _workspace_fk(),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_vehicle_service_records_id"), "vehicle_service_records", ["id"]
    )
    op.create_index(
        op.f("ix_vehicle_service_records_workspace_id"),
        "vehicle_service_records",
        ["workspace_id"],
    )
    op.create_index(
        op.f("ix_vehicle_service_records_vehicle_id"),
        "vehicle_service_records",
        ["vehicle_id"],
    )

    # Daily temperature logs
    op.create_table(
        "temp_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("vehicle_id", sa.Uuid(), nullable=False),
        sa.Column("driver_id", sa.Uuid(), nullable=True),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("temps", postgresql.JSONB(), nullable=False),
        sa.Column("checklist_done", sa.Boolean(), nullable=False),
        sa.Column("checklist", postgresql.JSONB(), nullable=True),
        sa.Column("checklist_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("checklist_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shift_done", sa.Boolean(), nullable=False),
        sa.Column("odometer", sa.String(length=32), nullable=True),
        sa.Column("signature", sa.Text(), nullable=True),
        sa.Column("shift_ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_signature", sa.Text(), nullable=True),
        sa.Column("admin_signed_by", sa.Uuid(), nullable=True),
        sa.Column("admin_signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_ip", sa.String(length=45), nullable=True),
        sa.Column("admin_user_agent", sa.String(length=512), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        _workspace_fk(),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["driver_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["admin_signed_by"], ["users.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "workspace_id",
            "vehicle_id",
            "log_date",
            name="uq_temp_logs_workspace_vehicle_date",
        ),
    )
    op.create_index(op.f("ix_temp_logs_id"), "temp_logs", ["id"])
    op.create_index(op.f("ix_temp_logs_workspace_id"), "temp_logs", ["workspace_id"])
    op.create_index(op.f("ix_temp_logs_vehicle_id"), "temp_logs", ["vehicle_id"])
    op.create_index(op.f("ix_temp_logs_driver_id"), "temp_logs", ["driver_id"])
    op.create_index(op.f("ix_temp_logs_log_date"), "temp_logs", ["log_date"])

    op.create_table(
        "temp_log_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("log_id", sa.Uuid(), nullable=False),
        sa.Column("event_type", sa.String(length=32), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["log_id"], ["temp_logs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_temp_log_events_id"), "temp_log_events", ["id"])
    op.create_index(op.f("ix_temp_log_events_log_id"), "temp_log_events", ["log_id"])

    # Audit log
    op.create_table(
        "workspace_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("request_id", sa.String(length=64), nullable=True),
        _created_at(),
        _workspace_fk(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workspace_events_id"), "workspace_events", ["id"])
    op.create_index(
        op.f("ix_workspace_events_workspace_id"), "workspace_events", ["workspace_id"]
    )
    op.create_index(
        op.f("ix_workspace_events_user_id"), "workspace_events", ["user_id"]
    )
    op.create_index(
        op.f("ix_workspace_events_action_type"), "workspace_events", ["action_type"]
    )
    op.create_index(
        op.f("ix_workspace_events_created_at"), "workspace_events", ["created_at"]
    )

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("vehicle_id", sa.Uuid(), nullable=True),
        sa.Column("driver_id", sa.Uuid(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _workspace_fk(),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["driver_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_id"), "notifications", ["id"])
    op.create_index(
        op.f("ix_notifications_workspace_id"), "notifications", ["workspace_id"]
    )
    op.create_index(
        "ix_notifications_workspace_unread",
        "notifications",
        ["workspace_id", "read", "created_at"],
    )

    # Export records
    op.create_table(
        "export_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("log_count", sa.Integer(), nullable=False),
        sa.Column("recipients", postgresql.JSONB(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _workspace_fk(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "workspace_id",
            "kind",
            "period_start",
            "period_end",
            name="uq_export_records_workspace_kind_period",
        ),
    )
    op.create_index(op.f("ix_export_records_id"), "export_records", ["id"])
    op.create_index(
        op.f("ix_export_records_workspace_id"), "export_records", ["workspace_id"]
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("export_records")
    op.drop_table("notifications")
    op.drop_table("workspace_events")
    op.drop_table("temp_log_events")
    op.drop_table("temp_logs")
    op.drop_table("vehicle_service_records")
    op.drop_table("vehicles")
    op.drop_index("uq_users_one_owner_per_workspace", table_name="users")
    op.drop_table("users")
    op.drop_table("workspaces")
