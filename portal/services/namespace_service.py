"""App namespace service"""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import logger
from portal.core.roles import NAMESPACE_APPLICATION
from portal.models.namespace import AppNamespace
from portal.services.ports import NamespaceProvisioner


class AppNamespaceService(NamespaceProvisioner):
    """Creates and removes app namespaces"""

    async def find_by_app_id_and_name(
        self, db: AsyncSession, app_id: str, namespace_name: str
    ) -> AppNamespace | None:
        result = await db.execute(
            select(AppNamespace).where(
                AppNamespace.app_id == app_id,
                AppNamespace.name == namespace_name,
                AppNamespace.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def find_by_app_id(self, db: AsyncSession, app_id: str) -> list[AppNamespace]:
        result = await db.execute(
            select(AppNamespace)
            .where(AppNamespace.app_id == app_id, AppNamespace.is_deleted.is_(False))
            .order_by(AppNamespace.id)
        )
        return list(result.scalars().all())

    async def create_default_app_namespace(
        self, db: AsyncSession, app_id: str, operator: str
    ) -> AppNamespace:
        """
        Create the private ``application`` namespace of an app.

        Returns the existing namespace when it is already there.
        """
        existing = await self.find_by_app_id_and_name(db, app_id, NAMESPACE_APPLICATION)
        if existing is not None:
            return existing

        namespace = AppNamespace(
            app_id=app_id,
            name=NAMESPACE_APPLICATION,
            format="properties",
            is_public=False,
            comment="default app namespace",
            created_by=operator,
            last_modified_by=operator,
        )
        db.add(namespace)
        await db.flush()

        logger.debug(f"Default namespace created for app {app_id}")
        return namespace

    async def batch_delete_by_app_id(self, db: AsyncSession, app_id: str, operator: str) -> int:
        """Soft-delete every namespace of the app"""
        result = await db.execute(
            update(AppNamespace)
            .where(AppNamespace.app_id == app_id, AppNamespace.is_deleted.is_(False))
            .values(
                is_deleted=True,
                deleted_at=datetime.now(timezone.utc),
                last_modified_by=operator,
            )
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Deleted {result.rowcount} namespaces of app {app_id}")
        return result.rowcount


# Global instance
app_namespace_service = AppNamespaceService()
