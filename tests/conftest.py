"""Pytest configuration and shared fixtures.

Nothing here needs Postgres or Redis: API tests run the real application
with the database session, the current user and the repositories replaced
through ``dependency_overrides``.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from thermio.core.audit.dependencies import get_workspace_events
from thermio.core.auth.dependencies import get_current_user
from thermio.core.auth.roles import Role
from thermio.core.database import get_db
from thermio.main import create_app
from thermio.modules.temp_logs.services import TempLogService
from thermio.modules.users.repos import UserRepository
from thermio.modules.vehicles.models import ZoneType
from thermio.modules.vehicles.services import VehicleService
from thermio.modules.workspaces.dependencies import get_compliance_settings
from thermio.modules.workspaces.settings import ComplianceSettings, TempRange
from tests.factories import UserFactory, VehicleFactory
from tests.fakes import FakeListRepository, FakeSession, FakeTempLogRepository


# Friday 2024-03-08, 09:00 in Perth (UTC+8, no daylight saving)
FRIDAY_MORNING = datetime(2024, 3, 8, 1, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return FRIDAY_MORNING


@pytest.fixture
def workspace_id():
    return uuid4()


@pytest.fixture
def settings() -> ComplianceSettings:
    """Perth workspace signing off on Fridays with chiller/freezer bands."""
    return ComplianceSettings(
        timezone="Australia/Perth",
        sign_off_weekday=5,
        overdue_threshold_minutes=120,
        live_window_minutes=180,
        temp_ranges={
            "cabin": TempRange(min=0, max=30),
            "chiller": TempRange(min=0, max=5),
            "freezer": TempRange(min=-25, max=-15),
        },
        checklist_questions=("Unit clean?", "Seals intact?"),
    )


@pytest.fixture
def vehicle(workspace_id):
    return VehicleFactory.build(
        workspace_id=workspace_id,
        registration="1ABC123",
        zone_type=ZoneType.CHILLER,
    )


@pytest.fixture
def driver(workspace_id):
    return UserFactory.build(workspace_id=workspace_id, name="Sam Driver")


@pytest.fixture
def admin(workspace_id):
    return UserFactory.build(
        workspace_id=workspace_id, name="Dana Admin", role=Role.ADMIN, is_owner=True
    )


@pytest.fixture
def office(workspace_id):
    return UserFactory.build(
        workspace_id=workspace_id, name="Office Desk", role=Role.OFFICE
    )


@pytest.fixture
def temp_log_repo() -> FakeTempLogRepository:
    return FakeTempLogRepository()


@pytest.fixture
def notifications() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def events() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def temp_log_service(temp_log_repo, notifications) -> TempLogService:
    return TempLogService(temp_log_repo, notifications)


# ============================================================
# Application fixtures
# ============================================================


class AuthAs:
    """Switches the user the overridden ``get_current_user`` returns."""

    def __init__(self, user: Any) -> None:
        self.user = user

    def __call__(self, user: Any) -> None:
        self.user = user


@pytest.fixture
def db_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def auth_as(driver) -> AuthAs:
    return AuthAs(driver)


@pytest.fixture
async def app(
    db_session,
    auth_as,
    settings,
    vehicle,
    driver,
    admin,
    office,
    temp_log_service,
    events,
) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[FakeSession, None]:
        yield db_session

    async def override_current_user() -> Any:
        return auth_as.user

    vehicles = SimpleNamespace(
        get_vehicle=AsyncMock(return_value=vehicle),
        get_active_vehicle=AsyncMock(return_value=vehicle),
    )

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_current_user] = override_current_user
    application.dependency_overrides[get_compliance_settings] = lambda: settings
    application.dependency_overrides[get_workspace_events] = lambda: events
    application.dependency_overrides[VehicleService] = lambda: vehicles
    application.dependency_overrides[TempLogService] = lambda: temp_log_service
    application.dependency_overrides[UserRepository] = lambda: FakeListRepository(
        [driver, admin, office]
    )

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
