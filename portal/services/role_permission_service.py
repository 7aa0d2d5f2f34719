"""Role and permission service"""

from typing import Iterable

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import logger
from portal.core.roles import PermissionType, RoleType
from portal.models.role import Permission, Role, RolePermission, UserRole
from portal.repositories.app_repository import escape_like
from portal.services.ports import PermissionAssigner

# Every role name prefix that embeds an app id right after it
_APP_ROLE_PREFIXES = tuple(t.value for t in RoleType) + (PermissionType.MANAGE_APP_MASTER.value,)


class RolePermissionService(PermissionAssigner):
    """Service for roles, permissions and their user bindings"""

    async def find_role_by_role_name(self, db: AsyncSession, role_name: str) -> Role | None:
        result = await db.execute(select(Role).where(Role.role_name == role_name))
        return result.scalar_one_or_none()

    async def find_or_create_permission(
        self,
        db: AsyncSession,
        permission_type: str,
        target_id: str,
        operator: str,
    ) -> Permission:
        result = await db.execute(
            select(Permission).where(
                Permission.permission_type == permission_type,
                Permission.target_id == target_id,
            )
        )
        permission = result.scalar_one_or_none()
        if permission is not None:
            return permission

        permission = Permission(
            permission_type=permission_type,
            target_id=target_id,
            created_by=operator,
        )
        db.add(permission)
        await db.flush()
        return permission

    async def create_role_with_permissions(
        self,
        db: AsyncSession,
        role_name: str,
        permissions: Iterable[Permission],
        operator: str,
    ) -> Role:
        """
        Create a role bound to the given permissions.

        Raises:
            ValueError: If the role already exists
        """
        if await self.find_role_by_role_name(db, role_name) is not None:
            raise ValueError(f"Role {role_name} already exists")

        role = Role(role_name=role_name, created_by=operator)
        db.add(role)
        await db.flush()

        for permission in permissions:
            db.add(RolePermission(role_id=role.id, permission_id=permission.id, created_by=operator))
        await db.flush()

        logger.debug(f"Role created: {role_name}")
        return role

    async def assign_role_to_users(
        self,
        db: AsyncSession,
        role_name: str,
        user_ids: Iterable[str],
        operator: str,
    ) -> set[str]:
        """
        Grant a role to users.

        Args:
            db: Database session
            role_name: Existing role name
            user_ids: Users to grant the role to
            operator: User performing the grant

        Returns:
            Users that did not have the role before

        Raises:
            ValueError: If the role does not exist
        """
        role = await self.find_role_by_role_name(db, role_name)
        if role is None:
            raise ValueError(f"Role {role_name} doesn't exist!")

        wanted = set(user_ids)
        result = await db.execute(
            select(UserRole.user_id).where(UserRole.role_id == role.id, UserRole.user_id.in_(wanted))
        )
        already_assigned = set(result.scalars().all())

        to_assign = wanted - already_assigned
        for user_id in sorted(to_assign):
            db.add(UserRole(user_id=user_id, role_id=role.id, created_by=operator))
        await db.flush()

        if to_assign:
            logger.info(
                f"Role {role_name} assigned to {sorted(to_assign)}",
                extra={"role_name": role_name, "operator": operator},
            )
        return to_assign

    async def query_users_with_role(self, db: AsyncSession, role_name: str) -> set[str]:
        role = await self.find_role_by_role_name(db, role_name)
        if role is None:
            return set()
        result = await db.execute(select(UserRole.user_id).where(UserRole.role_id == role.id))
        return set(result.scalars().all())

    async def find_role_names_by_app_id(self, db: AsyncSession, app_id: str) -> list[str]:
        result = await db.execute(
            select(Role.role_name).where(self._app_role_condition(app_id)).order_by(Role.id)
        )
        return list(result.scalars().all())

    async def delete_role_permissions_by_app_id(
        self, db: AsyncSession, app_id: str, operator: str
    ):
        """Remove every role, permission and user binding scoped to the app"""
        role_ids = list(
            (await db.execute(select(Role.id).where(self._app_role_condition(app_id)))).scalars().all()
        )
        permission_ids = list(
            (
                await db.execute(
                    select(Permission.id).where(
                        or_(
                            Permission.target_id == app_id,
                            Permission.target_id.like(f"{escape_like(app_id)}+%", escape="\\"),
                        )
                    )
                )
            ).scalars().all()
        )

        if role_ids:
            await db.execute(delete(UserRole).where(UserRole.role_id.in_(role_ids)))
            await db.execute(delete(RolePermission).where(RolePermission.role_id.in_(role_ids)))
        if permission_ids:
            await db.execute(
                delete(RolePermission).where(RolePermission.permission_id.in_(permission_ids))
            )
            await db.execute(delete(Permission).where(Permission.id.in_(permission_ids)))
        if role_ids:
            await db.execute(delete(Role).where(Role.id.in_(role_ids)))

        logger.info(
            f"Deleted {len(role_ids)} roles and {len(permission_ids)} permissions of app {app_id}",
            extra={"app_id": app_id, "operator": operator},
        )

    @staticmethod
    def _app_role_condition(app_id: str):
        escaped = escape_like(app_id)
        clauses = []
        for prefix in _APP_ROLE_PREFIXES:
            clauses.append(Role.role_name == f"{prefix}+{app_id}")
            clauses.append(Role.role_name.like(f"{prefix}+{escaped}+%", escape="\\"))
        return or_(*clauses)


# Global instance
role_permission_service = RolePermissionService()
