"""API tests for role changes and ownership transfer."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from thermio.core.audit import actions
from thermio.core.auth.roles import Role
from thermio.modules.users.repos import UserRepository
from tests.factories import UserFactory


pytestmark = pytest.mark.integration


@pytest.fixture
def deputy(workspace_id):
    return UserFactory.build(
        workspace_id=workspace_id, name="Deputy Admin", role=Role.ADMIN
    )


@pytest.fixture(autouse=True)
def user_repo(app, driver, admin, office, deputy):
    members = {u.id: u for u in (driver, admin, office, deputy)}
    repo = SimpleNamespace(
        get_by_id=AsyncMock(side_effect=lambda user_id, _: members.get(user_id)),
        update=AsyncMock(side_effect=lambda u: u),
    )
    app.dependency_overrides[UserRepository] = lambda: repo
    return repo


@pytest.fixture(autouse=True)
def as_owner(auth_as, admin):
    auth_as(admin)


class TestRoleChange:
    async def test_promote_driver(self, client: AsyncClient, driver, events):
        response = await client.put(
            f"/api/v1/users/{driver.id}/role", json={"role": "office"}
        )

        assert response.status_code == 200
        assert response.json()["role"] == "office"
        assert events.record.await_args.args[0] == actions.ROLE_CHANGED

    async def test_unknown_role(self, client: AsyncClient, driver):
        response = await client.put(
            f"/api/v1/users/{driver.id}/role", json={"role": "superadmin"}
        )

        assert response.status_code == 422

    async def test_admin_cannot_demote_admin(
        self, client: AsyncClient, auth_as, deputy, office
    ):
        auth_as(deputy)
        office.role = Role.ADMIN

        response = await client.put(
            f"/api/v1/users/{office.id}/role", json={"role": "driver"}
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "role_hierarchy"

    async def test_driver_refused(self, client: AsyncClient, auth_as, driver, office):
        auth_as(driver)

        response = await client.put(
            f"/api/v1/users/{office.id}/role", json={"role": "driver"}
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "admin_required"


class TestOwnershipTransfer:
    async def test_transfer_to_admin(
        self, client: AsyncClient, admin, deputy, events
    ):
        response = await client.post(
            "/api/v1/users/transfer-ownership",
            json={"new_owner_id": str(deputy.id)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(deputy.id)
        assert data["is_owner"] is True
        assert (admin.is_owner, admin.role) == (False, Role.DRIVER)
        assert events.record.await_args.args[0] == actions.OWNERSHIP_TRANSFERRED

    async def test_recipient_must_be_admin(self, client: AsyncClient, office):
        response = await client.post(
            "/api/v1/users/transfer-ownership",
            json={"new_owner_id": str(office.id)},
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "invalid_new_owner"

    async def test_non_owner_refused(self, client: AsyncClient, auth_as, deputy, admin):
        auth_as(deputy)

        response = await client.post(
            "/api/v1/users/transfer-ownership",
            json={"new_owner_id": str(admin.id)},
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "owner_required"
