"""Model factories for tests.

Factories only build transient instances; nothing here touches a database.
Fields the compliance rules read are pinned so a built object starts as a
valid, empty record.
"""

from datetime import date
from uuid import uuid4

from polyfactory import Use
from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from thermio.core.auth.roles import Role
from thermio.core.calendar import utc_now
from thermio.modules.temp_logs.models import TempLog
from thermio.modules.users.models import User
from thermio.modules.vehicles.models import Vehicle, ZoneType
from thermio.modules.workspaces.models import Workspace, WorkspaceStatus


class WorkspaceFactory(SQLAlchemyFactory[Workspace]):
    """Factory for creating test Workspace instances."""

    __model__ = Workspace

    status = WorkspaceStatus.ACTIVE
    max_users = 20
    max_vehicles = 20
    max_questions = 10
    settings = Use(dict)
    checklist_questions = Use(list)

    @classmethod
    def slug(cls) -> str:
        """Generate a unique slug."""
        return f"ws-{uuid4().hex[:8]}"


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances."""

    __model__ = User

    role = Role.DRIVER
    is_owner = False
    is_active = True
    is_temporary = False
    expires_at = None
    must_change_password = False
    password_history = Use(list)

    @classmethod
    def name(cls) -> str:
        """Generate a display name."""
        return f"Test Driver {uuid4().hex[:4]}"

    @classmethod
    def username(cls) -> str:
        """Generate a unique username."""
        return f"user-{uuid4().hex[:8]}"


class VehicleFactory(SQLAlchemyFactory[Vehicle]):
    """Factory for creating test Vehicle instances."""

    __model__ = Vehicle

    zone_type = ZoneType.CHILLER
    vehicle_class = "Rigid"
    is_active = True
    is_temporary = False
    expires_at = None

    @classmethod
    def registration(cls) -> str:
        """Generate a registration plate."""
        return f"1{uuid4().hex[:5].upper()}"


class TempLogFactory(SQLAlchemyFactory[TempLog]):
    """Factory for creating empty test TempLog instances."""

    __model__ = TempLog

    log_date = date(2024, 3, 8)
    driver_id = None
    temps = Use(list)
    checklist_done = False
    checklist = None
    checklist_snapshot = None
    checklist_at = None
    shift_done = False
    odometer = None
    signature = None
    shift_ended_at = None
    admin_signature = None
    admin_signed_by = None
    admin_signed_at = None
    admin_ip = None
    admin_user_agent = None
    comments = None
    version = 1
    created_at = Use(utc_now)
    updated_at = Use(utc_now)
