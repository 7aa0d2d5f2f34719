"""
Tests for the local collaborators of the lifecycle service:
roles and permissions, users, namespaces, favorites, audit and the app repository.
"""

import pytest

from portal.core.errors import AppAlreadyExistsError
from portal.core.roles import (
    RoleType,
    build_app_master_role_name,
    build_cluster_role_name,
    build_cluster_target_id,
    build_manage_app_master_role_name,
    build_namespace_role_name,
    build_namespace_target_id,
)
from portal.models import App
from portal.repositories.app_repository import AppRepositoryImpl, escape_like
from portal.schemas.app import AppDTO
from portal.services.audit_service import OpType, audit_service
from portal.services.favorite_service import favorite_service
from portal.services.namespace_service import app_namespace_service
from portal.services.role_initialization_service import role_initialization_service
from portal.services.role_permission_service import role_permission_service
from portal.services.user_service import user_service


def new_app(app_id: str = "pay-core", owner: str = "alice", created_by: str = "alice") -> App:
    return App(app_id=app_id, name=app_id, owner_name=owner, created_by=created_by, last_modified_by=created_by)


class TestRoleNames:
    def test_role_names(self):
        assert build_app_master_role_name("pay-core") == "Master+pay-core"
        assert build_manage_app_master_role_name("pay-core") == "ManageAppMaster+pay-core"
        assert (
            build_namespace_role_name("pay-core", "application", RoleType.MODIFY_NAMESPACE)
            == "ModifyNamespace+pay-core+application"
        )
        assert (
            build_cluster_role_name("pay-core", "DEV", "default", RoleType.RELEASE_NAMESPACES_IN_CLUSTER)
            == "ReleaseNamespacesInCluster+pay-core+DEV+default"
        )

    def test_target_ids(self):
        assert build_namespace_target_id("pay-core", "application") == "pay-core+application"
        assert build_cluster_target_id("pay-core", "DEV", "default") == "pay-core+DEV+default"


class TestRoleInitialization:
    @pytest.mark.asyncio
    async def test_init_app_roles(self, db_session):
        await role_initialization_service.init_app_roles(db_session, new_app(owner="alice", created_by="bob"))

        names = await role_permission_service.find_role_names_by_app_id(db_session, "pay-core")
        assert set(names) == {
            "Master+pay-core",
            "ManageAppMaster+pay-core",
            "ModifyNamespace+pay-core+application",
            "ReleaseNamespace+pay-core+application",
        }
        assert await role_permission_service.query_users_with_role(db_session, "Master+pay-core") == {"alice"}
        assert await role_permission_service.query_users_with_role(
            db_session, "ModifyNamespace+pay-core+application"
        ) == {"bob"}

    @pytest.mark.asyncio
    async def test_init_app_roles_is_idempotent(self, db_session):
        app = new_app()
        await role_initialization_service.init_app_roles(db_session, app)
        first = await role_permission_service.find_role_names_by_app_id(db_session, "pay-core")

        await role_initialization_service.init_app_roles(db_session, app)

        assert await role_permission_service.find_role_names_by_app_id(db_session, "pay-core") == first

    @pytest.mark.asyncio
    async def test_init_cluster_roles_is_idempotent(self, db_session):
        for _ in range(2):
            await role_initialization_service.init_cluster_namespace_roles(
                db_session, "pay-core", "DEV", "default", "alice"
            )

        names = await role_permission_service.find_role_names_by_app_id(db_session, "pay-core")
        assert sorted(names) == [
            "ModifyNamespacesInCluster+pay-core+DEV+default",
            "ReleaseNamespacesInCluster+pay-core+DEV+default",
        ]


class TestRolePermissionService:
    @pytest.mark.asyncio
    async def test_assign_returns_only_new_users(self, db_session):
        await role_initialization_service.init_app_roles(db_session, new_app())

        assigned = await role_permission_service.assign_role_to_users(
            db_session, "Master+pay-core", {"alice", "bob"}, "alice"
        )

        assert assigned == {"bob"}

    @pytest.mark.asyncio
    async def test_assign_unknown_role(self, db_session):
        with pytest.raises(ValueError, match="doesn't exist"):
            await role_permission_service.assign_role_to_users(db_session, "Master+nope", {"bob"}, "alice")

    @pytest.mark.asyncio
    async def test_create_existing_role(self, db_session):
        await role_permission_service.create_role_with_permissions(db_session, "Master+x", [], "alice")

        with pytest.raises(ValueError, match="already exists"):
            await role_permission_service.create_role_with_permissions(db_session, "Master+x", [], "alice")

    @pytest.mark.asyncio
    async def test_delete_scoped_to_app(self, db_session):
        await role_initialization_service.init_app_roles(db_session, new_app("pay"))
        await role_initialization_service.init_app_roles(db_session, new_app("pay-core"))
        await role_initialization_service.init_cluster_namespace_roles(
            db_session, "pay", "DEV", "default", "alice"
        )

        await role_permission_service.delete_role_permissions_by_app_id(db_session, "pay", "alice")

        assert await role_permission_service.find_role_names_by_app_id(db_session, "pay") == []
        assert await role_permission_service.query_users_with_role(db_session, "Master+pay") == set()
        assert len(await role_permission_service.find_role_names_by_app_id(db_session, "pay-core")) == 4
        assert await role_permission_service.query_users_with_role(db_session, "Master+pay-core") == {"alice"}


class TestUserService:
    @pytest.mark.asyncio
    async def test_find_by_user_id(self, db_session):
        await user_service.create_user(db_session, "alice", "alice@example.com", "Alice")

        user = await user_service.find_by_user_id(db_session, "alice")

        assert user.user_id == "alice"
        assert user.email == "alice@example.com"
        assert user.name == "Alice"
        assert await user_service.find_by_user_id(db_session, "nobody") is None

    @pytest.mark.asyncio
    async def test_duplicate_user(self, db_session):
        await user_service.create_user(db_session, "alice", "alice@example.com")

        with pytest.raises(ValueError):
            await user_service.create_user(db_session, "alice", "other@example.com")

    @pytest.mark.asyncio
    async def test_disabled_user_is_not_resolved(self, db_session):
        await user_service.create_user(db_session, "carol", "carol@example.com")
        user = await user_service._get_by_username(db_session, "carol")
        user.is_enabled = False
        await db_session.flush()

        assert await user_service.find_by_user_id(db_session, "carol") is None


class TestNamespaceAndFavorites:
    @pytest.mark.asyncio
    async def test_default_namespace_is_idempotent(self, db_session):
        first = await app_namespace_service.create_default_app_namespace(db_session, "pay-core", "alice")
        second = await app_namespace_service.create_default_app_namespace(db_session, "pay-core", "bob")

        assert first.id == second.id
        assert len(await app_namespace_service.find_by_app_id(db_session, "pay-core")) == 1

    @pytest.mark.asyncio
    async def test_batch_delete_namespaces(self, db_session):
        await app_namespace_service.create_default_app_namespace(db_session, "pay-core", "alice")
        await app_namespace_service.create_default_app_namespace(db_session, "pay", "alice")

        deleted = await app_namespace_service.batch_delete_by_app_id(db_session, "pay-core", "bob")

        assert deleted == 1
        assert await app_namespace_service.find_by_app_id(db_session, "pay-core") == []
        assert len(await app_namespace_service.find_by_app_id(db_session, "pay")) == 1

    @pytest.mark.asyncio
    async def test_favorites(self, db_session):
        await favorite_service.add_favorite(db_session, "bob", "pay-core")
        await favorite_service.add_favorite(db_session, "bob", "pay")

        with pytest.raises(ValueError):
            await favorite_service.add_favorite(db_session, "bob", "pay-core")

        assert await favorite_service.batch_delete_by_app_id(db_session, "pay-core", "alice") == 1
        assert [f.app_id for f in await favorite_service.find_favorites(db_session, "bob")] == ["pay"]


class TestAuditService:
    @pytest.mark.asyncio
    async def test_log_operation(self, db_session):
        log = await audit_service.log_operation(db_session, OpType.DELETE, "App.delete", "alice", target_id="x")

        assert log.op_type == "DELETE"
        assert [entry.id for entry in await audit_service.find_logs_by_op_name(db_session, "App.delete")] == [log.id]

    @pytest.mark.asyncio
    async def test_append_data_influences(self, db_session):
        app = AppDTO(app_id="pay-core", name="Pay Core", owner_name="alice", owner_email="a@example.com")

        influences = await audit_service.append_data_influences(db_session, [app], "App")

        assert {i.field_name for i in influences} == set(AppDTO.AUDITED_FIELDS)
        stored = await audit_service.find_data_influences(db_session, "App", "pay-core")
        assert {i.field_name: i.field_old_value for i in stored}["owner_email"] == "a@example.com"


class TestAppRepository:
    @pytest.fixture
    def repository(self, db_session):
        return AppRepositoryImpl(db_session)

    def test_escape_like(self):
        assert escape_like("pay_core%") == "pay\\_core\\%"

    @pytest.mark.asyncio
    async def test_unique_app_id(self, repository):
        await repository.save(new_app())

        with pytest.raises(AppAlreadyExistsError):
            await repository.save(new_app())

    @pytest.mark.asyncio
    async def test_delete_keeps_tombstone(self, repository):
        await repository.save(new_app())

        assert await repository.delete_app("pay-core", "bob") == 1
        assert await repository.delete_app("pay-core", "bob") == 0

        assert await repository.find_by_app_id("pay-core") is None
        tombstone = await repository.find_by_app_id_including_deleted("pay-core")
        assert tombstone.is_deleted is True
        assert tombstone.deleted_by == "bob"

    @pytest.mark.asyncio
    async def test_revive_only_matches_tombstone(self, repository):
        saved = await repository.save(new_app())

        with pytest.raises(AppAlreadyExistsError):
            await repository.revive_app("pay-core")

        await repository.delete_app("pay-core", "bob")
        revived = await repository.revive_app("pay-core")

        assert revived.id == saved.id
        assert revived.is_deleted is False
        assert revived.deleted_by is None
        with pytest.raises(AppAlreadyExistsError):
            await repository.revive_app("pay-core")

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, repository):
        await repository.save(new_app("pay_core"))
        await repository.save(new_app("payXcore"))

        apps, total = await repository.search("pay_")

        assert total == 1
        assert [a.app_id for a in apps] == ["pay_core"]
