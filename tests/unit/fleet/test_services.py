"""Unit tests for vehicle, member and workspace provisioning services."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from thermio.core.audit import actions
from thermio.core.auth.roles import Role
from thermio.core.errors import (
    ConflictError,
    ForbiddenError,
    LimitExceededError,
    NotFoundError,
    ValidationError,
    VehicleInactiveError,
)
from thermio.modules.users.repos import UserRepository
from thermio.modules.users.schemas import UserCreate
from thermio.modules.users.services import UserService
from thermio.modules.vehicles.repos import VehicleRepository
from thermio.modules.vehicles.schemas import ServiceRecordCreate, VehicleCreate
from thermio.modules.vehicles.services import VehicleService
from thermio.modules.workspaces.models import WorkspaceStatus
from thermio.modules.workspaces.repos import WorkspaceRepository
from thermio.modules.workspaces.schemas import (
    LimitsUpdate,
    OwnerAccount,
    WorkspaceCreate,
)
from thermio.modules.workspaces.services import WorkspaceService
from tests.factories import UserFactory, VehicleFactory, WorkspaceFactory
from tests.fakes import FakeSession


NOW = datetime(2024, 3, 8, 1, 0, tzinfo=UTC)
OWNER = OwnerAccount(name="Pat Owner", username="pat", email="pat@coldco.com.au")


def _assign_id(obj):
    obj.id = uuid4()
    return obj


def make_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.session = FakeSession()
    repo.create.side_effect = _assign_id
    repo.add_service_record.side_effect = _assign_id
    return repo


@pytest.fixture
def workspace():
    return WorkspaceFactory.build(max_users=3, max_vehicles=2)


@pytest.fixture
def workspace_lookup(workspace):
    with patch.object(
        WorkspaceRepository, "get_by_id", AsyncMock(return_value=workspace)
    ) as lookup:
        yield lookup


@pytest.fixture
def owner_create():
    with patch.object(
        UserRepository, "create", AsyncMock(side_effect=_assign_id)
    ) as create:
        yield create


def recorded_actions(events: AsyncMock) -> list[str]:
    return [c.args[0] for c in events.record.await_args_list]


class TestVehicleService:
    """Tests for fleet management."""

    @pytest.mark.asyncio
    async def test_create_normalizes_registration(
        self, workspace, workspace_lookup, events
    ):
        repo = make_repo()
        repo.get_by_registration.return_value = None
        repo.count_active.return_value = 0
        service = VehicleService(repo)

        vehicle = await service.create_vehicle(
            workspace.id, VehicleCreate(registration=" 1abc 234 "), events
        )

        assert vehicle.registration == "1ABC234"
        assert vehicle.is_active is True
        repo.get_by_registration.assert_awaited_once_with("1ABC234", workspace.id)
        assert recorded_actions(events) == [actions.ASSET_CREATED]

    @pytest.mark.asyncio
    async def test_duplicate_registration_rejected(
        self, workspace, workspace_lookup, events
    ):
        repo = make_repo()
        repo.get_by_registration.return_value = VehicleFactory.build()
        service = VehicleService(repo)

        with pytest.raises(ConflictError) as exc_info:
            await service.create_vehicle(
                workspace.id, VehicleCreate(registration="1abc234"), events
            )

        assert exc_info.value.error_code == "registration_exists"
        repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_vehicle_limit(self, workspace, workspace_lookup, events):
        repo = make_repo()
        repo.get_by_registration.return_value = None
        repo.count_active.return_value = 2
        service = VehicleService(repo)

        with pytest.raises(LimitExceededError) as exc_info:
            await service.create_vehicle(
                workspace.id, VehicleCreate(registration="1NEW001"), events
            )

        assert exc_info.value.details == {"limit": 2, "active": 2}
        repo.create.assert_not_awaited()
        events.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deactivation_is_reversible(
        self, workspace, workspace_lookup, events
    ):
        vehicle = VehicleFactory.build(workspace_id=workspace.id)
        repo = make_repo()
        repo.get_by_id.return_value = vehicle
        repo.count_active.return_value = 1
        service = VehicleService(repo)

        await service.deactivate_vehicle(vehicle.id, workspace.id, events)
        assert vehicle.is_active is False

        await service.reactivate_vehicle(vehicle.id, workspace.id, events)
        assert vehicle.is_active is True
        assert recorded_actions(events) == [
            actions.ASSET_SUSPENDED,
            actions.ASSET_REACTIVATED,
        ]

    @pytest.mark.asyncio
    async def test_reactivation_respects_limit(
        self, workspace, workspace_lookup, events
    ):
        vehicle = VehicleFactory.build(workspace_id=workspace.id, is_active=False)
        repo = make_repo()
        repo.get_by_id.return_value = vehicle
        repo.count_active.return_value = 2
        service = VehicleService(repo)

        with pytest.raises(LimitExceededError):
            await service.reactivate_vehicle(vehicle.id, workspace.id, events)

        assert vehicle.is_active is False

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, workspace, events):
        repo = make_repo()
        repo.get_by_id.return_value = None
        service = VehicleService(repo)

        with pytest.raises(NotFoundError):
            await service.deactivate_vehicle(uuid4(), workspace.id, events)

    @pytest.mark.asyncio
    async def test_active_lookup_refuses_deactivated(self, workspace):
        vehicle = VehicleFactory.build(workspace_id=workspace.id, is_active=False)
        repo = make_repo()
        repo.get_by_id.return_value = vehicle

        with pytest.raises(VehicleInactiveError) as exc_info:
            await VehicleService(repo).get_active_vehicle(vehicle.id, workspace.id)

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["resource_id"] == str(vehicle.id)

    @pytest.mark.asyncio
    async def test_active_lookup(self, workspace):
        vehicle = VehicleFactory.build(workspace_id=workspace.id, is_active=True)
        repo = make_repo()
        repo.get_by_id.return_value = vehicle

        found = await VehicleService(repo).get_active_vehicle(vehicle.id, workspace.id)

        assert found is vehicle

    @pytest.mark.asyncio
    async def test_service_record_appended(self, workspace, events):
        vehicle = VehicleFactory.build(workspace_id=workspace.id)
        repo = make_repo()
        repo.get_by_id.return_value = vehicle
        service = VehicleService(repo)
        author = uuid4()

        record = await service.add_service_record(
            vehicle.id,
            workspace.id,
            ServiceRecordCreate(kind="refrigeration", description="Regassed unit"),
            author,
            events,
        )

        assert record.vehicle_id == vehicle.id
        assert record.created_by == author
        assert record.kind == "refrigeration"
        assert recorded_actions(events) == [actions.SERVICE_RECORDED]

    @pytest.mark.asyncio
    async def test_expire_temporary(self, workspace):
        expired = [
            VehicleFactory.build(
                workspace_id=workspace.id,
                is_temporary=True,
                expires_at=NOW - timedelta(days=1),
            )
            for _ in range(2)
        ]
        repo = make_repo()
        repo.list_expired_temporary.return_value = expired
        service = VehicleService(repo)

        count = await service.expire_temporary(workspace.id, NOW)

        assert count == 2
        assert all(not v.is_active for v in expired)
        assert [e.action_type for e in repo.session.added] == [
            actions.ASSET_EXPIRED,
            actions.ASSET_EXPIRED,
        ]

    @pytest.mark.asyncio
    async def test_expire_temporary_nothing_due(self, workspace):
        repo = make_repo()
        repo.list_expired_temporary.return_value = []

        assert await VehicleService(repo).expire_temporary(workspace.id, NOW) == 0
        repo.update.assert_not_awaited()


class TestUserService:
    """Tests for workspace member management."""

    @pytest.mark.asyncio
    async def test_create_user(self, workspace, workspace_lookup, events):
        repo = make_repo()
        repo.get_by_username.return_value = None
        repo.count_active.return_value = 1
        service = UserService(repo)

        user = await service.create_user(
            workspace.id,
            UserCreate(name="Kim Office", username="kim", role="office"),
            events,
        )

        assert user.role == "office"
        assert user.must_change_password is True
        assert recorded_actions(events) == [actions.USER_CREATED]

    @pytest.mark.asyncio
    async def test_user_limit(self, workspace, workspace_lookup, events):
        repo = make_repo()
        repo.get_by_username.return_value = None
        repo.count_active.return_value = 3
        service = UserService(repo)

        with pytest.raises(LimitExceededError) as exc_info:
            await service.create_user(
                workspace.id, UserCreate(name="One More", username="more"), events
            )

        assert exc_info.value.details["limit"] == 3

    @pytest.mark.asyncio
    async def test_username_taken(self, workspace, workspace_lookup, events):
        repo = make_repo()
        repo.get_by_username.return_value = UserFactory.build()
        service = UserService(repo)

        with pytest.raises(ConflictError) as exc_info:
            await service.create_user(
                workspace.id, UserCreate(name="Sam", username="sam"), events
            )

        assert exc_info.value.error_code == "username_exists"

    @pytest.mark.asyncio
    async def test_owner_cannot_be_deactivated(self, workspace, events):
        owner = UserFactory.build(workspace_id=workspace.id, is_owner=True)
        repo = make_repo()
        repo.get_by_id.return_value = owner
        service = UserService(repo)

        with pytest.raises(ForbiddenError) as exc_info:
            await service.deactivate_user(owner.id, workspace.id, events)

        assert exc_info.value.error_code == "owner_protected"
        assert owner.is_active is True

    @pytest.mark.asyncio
    async def test_expire_temporary(self, workspace):
        temp = UserFactory.build(
            workspace_id=workspace.id,
            is_temporary=True,
            expires_at=NOW - timedelta(hours=1),
        )
        repo = make_repo()
        repo.list_expired_temporary.return_value = [temp]
        service = UserService(repo)

        assert await service.expire_temporary(workspace.id, NOW) == 1
        assert temp.is_active is False
        assert repo.session.added[0].action_type == actions.USER_EXPIRED

    @pytest.mark.asyncio
    async def test_admin_promotes_driver_to_office(self, workspace, events):
        actor = UserFactory.build(workspace_id=workspace.id, role=Role.ADMIN)
        driver = UserFactory.build(workspace_id=workspace.id)
        repo = make_repo()
        repo.get_by_id.return_value = driver

        user = await UserService(repo).update_role(
            driver.id, workspace.id, "office", actor, events
        )

        assert user.role == "office"
        assert recorded_actions(events) == [actions.ROLE_CHANGED]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("target_role", "new_role"),
        [("driver", "admin"), ("admin", "driver")],
    )
    async def test_admin_cannot_reach_own_rank(
        self, workspace, events, target_role, new_role
    ):
        actor = UserFactory.build(workspace_id=workspace.id, role=Role.ADMIN)
        target = UserFactory.build(workspace_id=workspace.id, role=target_role)
        repo = make_repo()
        repo.get_by_id.return_value = target

        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(repo).update_role(
                target.id, workspace.id, new_role, actor, events
            )

        assert exc_info.value.error_code == "role_hierarchy"
        assert target.role == target_role

    @pytest.mark.asyncio
    async def test_owner_promotes_to_admin(self, workspace, events):
        owner = UserFactory.build(
            workspace_id=workspace.id, role=Role.ADMIN, is_owner=True
        )
        office = UserFactory.build(workspace_id=workspace.id, role=Role.OFFICE)
        repo = make_repo()
        repo.get_by_id.return_value = office

        user = await UserService(repo).update_role(
            office.id, workspace.id, "admin", owner, events
        )

        assert user.role == "admin"

    @pytest.mark.asyncio
    async def test_role_of_owner_and_self_protected(self, workspace, events):
        owner = UserFactory.build(
            workspace_id=workspace.id, role=Role.ADMIN, is_owner=True
        )
        repo = make_repo()
        repo.get_by_id.return_value = owner
        service = UserService(repo)

        with pytest.raises(ValidationError) as own:
            await service.update_role(owner.id, workspace.id, "driver", owner, events)
        admin = UserFactory.build(workspace_id=workspace.id, role=Role.ADMIN)
        with pytest.raises(ForbiddenError) as other:
            await service.update_role(owner.id, workspace.id, "driver", admin, events)

        assert own.value.error_code == "own_role"
        assert other.value.error_code == "owner_protected"
        events.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transfer_ownership(self, workspace, events):
        owner = UserFactory.build(
            workspace_id=workspace.id, role=Role.ADMIN, is_owner=True
        )
        admin = UserFactory.build(workspace_id=workspace.id, role=Role.ADMIN)
        repo = make_repo()
        repo.get_by_id.side_effect = lambda user_id, _: {
            owner.id: owner,
            admin.id: admin,
        }.get(user_id)
        flushed: list[tuple[str, bool]] = []
        repo.update.side_effect = lambda u: flushed.append((u.username, u.is_owner))

        new_owner = await UserService(repo).transfer_ownership(
            admin.id, workspace.id, owner, events
        )

        assert new_owner is admin
        assert admin.is_owner is True
        assert (owner.is_owner, owner.role) == (False, Role.DRIVER)
        # the old flag is cleared first, so two owners never coexist
        assert flushed == [(owner.username, False), (admin.username, True)]
        assert recorded_actions(events) == [actions.OWNERSHIP_TRANSFERRED]

    @pytest.mark.asyncio
    async def test_only_owner_transfers(self, workspace, events):
        admin = UserFactory.build(workspace_id=workspace.id, role=Role.ADMIN)
        repo = make_repo()
        repo.get_by_id.return_value = admin

        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(repo).transfer_ownership(
                uuid4(), workspace.id, admin, events
            )

        assert exc_info.value.error_code == "owner_required"

    @pytest.mark.asyncio
    async def test_transfer_needs_active_admin(self, workspace, events):
        owner = UserFactory.build(
            workspace_id=workspace.id, role=Role.ADMIN, is_owner=True
        )
        office = UserFactory.build(workspace_id=workspace.id, role=Role.OFFICE)
        repo = make_repo()
        repo.get_by_id.side_effect = lambda user_id, _: {
            owner.id: owner,
            office.id: office,
        }.get(user_id)

        with pytest.raises(ValidationError) as exc_info:
            await UserService(repo).transfer_ownership(
                office.id, workspace.id, owner, events
            )

        assert exc_info.value.error_code == "invalid_new_owner"
        assert owner.is_owner is True
        repo.update.assert_not_awaited()

    def test_temporary_user_needs_expiry(self):
        with pytest.raises(ValueError):
            UserCreate(name="Casual", username="casual", is_temporary=True)


class TestProvisioning:
    """Tests for portal workspace provisioning."""

    @pytest.mark.asyncio
    async def test_provision_generates_slug(self, owner_create):
        repo = make_repo()
        repo.get_by_slug.return_value = None
        service = WorkspaceService(repo)

        workspace, _ = await service.provision(
            WorkspaceCreate(
                name="Fresh & Frozen! Pty Ltd",
                timezone="Australia/Sydney",
                owner=OWNER,
            ),
            uuid4(),
        )

        assert workspace.slug == "fresh-frozen-pty-ltd"
        assert workspace.status == WorkspaceStatus.ACTIVE
        assert workspace.settings == {"timezone": "Australia/Sydney"}
        assert repo.session.added[0].action_type == actions.WORKSPACE_CREATED

    @pytest.mark.asyncio
    async def test_provision_creates_owner(self, owner_create):
        repo = make_repo()
        repo.get_by_slug.return_value = None
        service = WorkspaceService(repo)

        workspace, owner = await service.provision(
            WorkspaceCreate(name="Cold Co", owner=OWNER), uuid4()
        )

        owner_create.assert_awaited_once()
        assert owner.workspace_id == workspace.id
        assert owner.username == "pat"
        assert owner.role == Role.ADMIN
        assert owner.is_owner is True
        assert owner.must_change_password is True
        assert [e.action_type for e in repo.session.added] == [
            actions.WORKSPACE_CREATED,
            actions.USER_CREATED,
        ]

    @pytest.mark.asyncio
    async def test_slug_taken(self):
        repo = make_repo()
        repo.get_by_slug.return_value = WorkspaceFactory.build(slug="coldco")
        service = WorkspaceService(repo)

        with pytest.raises(ConflictError) as exc_info:
            await service.provision(
                WorkspaceCreate(name="Cold Co", slug="coldco", owner=OWNER), uuid4()
            )

        assert exc_info.value.error_code == "slug_taken"
        repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_suspend_and_reactivate(self, workspace):
        repo = make_repo()
        repo.get_by_id.return_value = workspace
        service = WorkspaceService(repo)
        actor = uuid4()

        await service.suspend(workspace.id, actor)
        assert workspace.status == WorkspaceStatus.SUSPENDED

        await service.reactivate(workspace.id, actor)
        assert workspace.status == WorkspaceStatus.ACTIVE
        assert [e.action_type for e in repo.session.added] == [
            actions.WORKSPACE_SUSPENDED,
            actions.WORKSPACE_REACTIVATED,
        ]
        assert all(e.user_id == actor for e in repo.session.added)

    @pytest.mark.asyncio
    async def test_update_limits(self, workspace):
        repo = make_repo()
        repo.get_by_id.return_value = workspace
        with (
            patch.object(UserRepository, "count_active", AsyncMock(return_value=3)),
            patch.object(VehicleRepository, "count_active", AsyncMock(return_value=2)),
        ):
            await WorkspaceService(repo).update_limits(
                workspace.id,
                LimitsUpdate(max_users=3, max_vehicles=8, max_questions=500),
                uuid4(),
            )

        assert (workspace.max_users, workspace.max_vehicles) == (3, 8)
        assert workspace.max_questions == 30
        assert repo.session.added[0].action_type == actions.LIMITS_UPDATED

    @pytest.mark.asyncio
    async def test_limits_not_below_usage(self, workspace):
        repo = make_repo()
        repo.get_by_id.return_value = workspace
        with (
            patch.object(UserRepository, "count_active", AsyncMock(return_value=3)),
            patch.object(VehicleRepository, "count_active", AsyncMock(return_value=2)),
            pytest.raises(ConflictError) as exc_info,
        ):
            await WorkspaceService(repo).update_limits(
                workspace.id,
                LimitsUpdate(max_users=5, max_vehicles=1, max_questions=5),
                uuid4(),
            )

        assert exc_info.value.error_code == "limit_below_usage"
        assert exc_info.value.details == {
            "field": "max_vehicles",
            "limit": 1,
            "active": 2,
        }
        assert workspace.max_users == 3
        repo.update.assert_not_awaited()
