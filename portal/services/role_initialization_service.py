"""Role initialization service"""

from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import logger
from portal.core.roles import (
    APP_MASTER_PERMISSIONS,
    NAMESPACE_APPLICATION,
    PermissionType,
    RoleType,
    build_app_master_role_name,
    build_cluster_role_name,
    build_cluster_target_id,
    build_manage_app_master_role_name,
    build_namespace_role_name,
    build_namespace_target_id,
)
from portal.models.app import App
from portal.services.ports import RoleProvisioner
from portal.services.role_permission_service import RolePermissionService, role_permission_service


class RoleInitializationService(RoleProvisioner):
    """
    Creates the access roles of an app.

    Every method checks for the role before creating it, so calling it
    again with the same arguments is a no-op.
    """

    def __init__(self, role_permission_service: RolePermissionService):
        self._rps = role_permission_service

    async def init_app_roles(self, db: AsyncSession, app: App):
        """
        Initialize app level roles.

        Creates the master role and the ManageAppMaster permission, grants the
        master role to the owner, and creates the default namespace roles
        granted to the creator.
        """
        app_id = app.app_id
        master_role_name = build_app_master_role_name(app_id)

        # Has been created before
        if await self._rps.find_role_by_role_name(db, master_role_name) is not None:
            return

        operator = app.created_by

        await self._create_app_master_role(db, app_id, operator)
        await self._create_manage_app_master_role(db, app_id, operator)

        await self._rps.assign_role_to_users(db, master_role_name, {app.owner_name}, operator)

        await self.init_namespace_roles(db, app_id, NAMESPACE_APPLICATION, operator)

        # Imported apps may carry no creator
        if not operator:
            logger.info(f"App roles initialized for {app_id} without creator grants")
            return

        await self._rps.assign_role_to_users(
            db,
            build_namespace_role_name(app_id, NAMESPACE_APPLICATION, RoleType.MODIFY_NAMESPACE),
            {operator},
            operator,
        )
        await self._rps.assign_role_to_users(
            db,
            build_namespace_role_name(app_id, NAMESPACE_APPLICATION, RoleType.RELEASE_NAMESPACE),
            {operator},
            operator,
        )

        logger.info(f"App roles initialized for {app_id}", extra={"app_id": app_id})

    async def init_namespace_roles(
        self, db: AsyncSession, app_id: str, namespace_name: str, operator: str
    ):
        target_id = build_namespace_target_id(app_id, namespace_name)
        for role_type, permission_type in (
            (RoleType.MODIFY_NAMESPACE, PermissionType.MODIFY_NAMESPACE),
            (RoleType.RELEASE_NAMESPACE, PermissionType.RELEASE_NAMESPACE),
        ):
            role_name = build_namespace_role_name(app_id, namespace_name, role_type)
            if await self._rps.find_role_by_role_name(db, role_name) is None:
                permission = await self._rps.find_or_create_permission(
                    db, permission_type.value, target_id, operator
                )
                await self._rps.create_role_with_permissions(db, role_name, [permission], operator)

    async def init_cluster_namespace_roles(
        self,
        db: AsyncSession,
        app_id: str,
        env: str,
        cluster_name: str,
        operator: str,
    ):
        target_id = build_cluster_target_id(app_id, env, cluster_name)
        for role_type, permission_type in (
            (RoleType.MODIFY_NAMESPACES_IN_CLUSTER, PermissionType.MODIFY_NAMESPACES_IN_CLUSTER),
            (RoleType.RELEASE_NAMESPACES_IN_CLUSTER, PermissionType.RELEASE_NAMESPACES_IN_CLUSTER),
        ):
            role_name = build_cluster_role_name(app_id, env, cluster_name, role_type)
            if await self._rps.find_role_by_role_name(db, role_name) is None:
                permission = await self._rps.find_or_create_permission(
                    db, permission_type.value, target_id, operator
                )
                await self._rps.create_role_with_permissions(db, role_name, [permission], operator)

        logger.debug(f"Cluster roles initialized for {app_id} in {env}/{cluster_name}")

    async def _create_app_master_role(self, db: AsyncSession, app_id: str, operator: str):
        permissions = [
            await self._rps.find_or_create_permission(db, permission_type.value, app_id, operator)
            for permission_type in APP_MASTER_PERMISSIONS
        ]
        await self._rps.create_role_with_permissions(
            db, build_app_master_role_name(app_id), permissions, operator
        )

    async def _create_manage_app_master_role(self, db: AsyncSession, app_id: str, operator: str):
        permission = await self._rps.find_or_create_permission(
            db, PermissionType.MANAGE_APP_MASTER.value, app_id, operator
        )
        await self._rps.create_role_with_permissions(
            db, build_manage_app_master_role_name(app_id), [permission], operator
        )


role_initialization_service = RoleInitializationService(role_permission_service)
