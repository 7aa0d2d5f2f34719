"""
App repository.

Durable keyed storage for app records. Uniqueness of ``app_id`` is enforced
by the ``apps.app_id`` unique constraint; a conflicting insert surfaces as
``AppAlreadyExistsError``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import AppAlreadyExistsError
from portal.models.app import App

logger = logging.getLogger("portal.repositories.app_repository")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards, using backslash as the escape character"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class AppRepository(ABC):
    """Storage interface for app records"""

    @abstractmethod
    async def find_by_app_id(self, app_id: str) -> Optional[App]:
        """Live record for ``app_id``, or None"""
        pass

    @abstractmethod
    async def find_by_app_id_including_deleted(self, app_id: str) -> Optional[App]:
        """Record for ``app_id`` whether live or tombstoned, or None"""
        pass

    @abstractmethod
    async def save(self, app: App) -> App:
        """Insert or update by primary key"""
        pass

    @abstractmethod
    async def revive_app(self, app_id: str) -> App:
        """
        Bring the tombstoned record back to life.

        Raises:
            AppAlreadyExistsError: If there is no tombstone for ``app_id``
        """
        pass

    @abstractmethod
    async def delete_app(self, app_id: str, operator: str) -> int:
        """Soft-delete the live record, returning the number of rows affected"""
        pass

    @abstractmethod
    async def find_all(self, offset: int = 0, limit: Optional[int] = None) -> List[App]:
        pass

    @abstractmethod
    async def search(self, query: str, offset: int = 0, limit: int = 20) -> tuple[List[App], int]:
        pass

    @abstractmethod
    async def find_by_app_ids(self, app_ids: set[str]) -> List[App]:
        pass

    @abstractmethod
    async def find_by_owner_name(self, owner_name: str, offset: int = 0, limit: int = 20) -> List[App]:
        pass


class AppRepositoryImpl(AppRepository):
    """
    SQLAlchemy implementation of the app repository.

    Example:
        >>> repo = AppRepositoryImpl(db_session)
        >>> app = await repo.find_by_app_id("pay-core")
    """

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_by_app_id(self, app_id: str) -> Optional[App]:
        result = await self._db.execute(
            select(App).where(App.app_id == app_id, App.is_deleted.is_(False))
        )
        return result.scalar_one_or_none()

    async def find_by_app_id_including_deleted(self, app_id: str) -> Optional[App]:
        result = await self._db.execute(select(App).where(App.app_id == app_id))
        return result.scalar_one_or_none()

    async def save(self, app: App) -> App:
        self._db.add(app)
        try:
            await self._db.flush()
        except IntegrityError as e:
            logger.info(
                f"Unique constraint conflict while saving app {app.app_id}",
                extra={"app_id": app.app_id, "error": str(e.orig)},
            )
            raise AppAlreadyExistsError(app.app_id) from e

        logger.debug(f"App saved: {app.app_id} (id={app.id})")
        return app

    async def revive_app(self, app_id: str) -> App:
        # Matches the tombstone only; a concurrent revival updates zero rows
        result = await self._db.execute(
            update(App)
            .where(App.app_id == app_id, App.is_deleted.is_(True))
            .values(
                is_deleted=False,
                deleted_at=None,
                deleted_by=None,
                created_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            logger.info(f"No tombstone to revive for app {app_id}", extra={"app_id": app_id})
            raise AppAlreadyExistsError(app_id)

        logger.debug(f"App {app_id} revived")
        return await self.find_by_app_id(app_id)

    async def delete_app(self, app_id: str, operator: str) -> int:
        result = await self._db.execute(
            update(App)
            .where(App.app_id == app_id, App.is_deleted.is_(False))
            .values(
                is_deleted=True,
                deleted_at=datetime.now(timezone.utc),
                deleted_by=operator,
                last_modified_by=operator,
            )
            .execution_options(synchronize_session="fetch")
        )
        logger.debug(f"App {app_id} soft-deleted by {operator}")
        return result.rowcount

    async def find_all(self, offset: int = 0, limit: Optional[int] = None) -> List[App]:
        stmt = select(App).where(App.is_deleted.is_(False)).order_by(App.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def search(self, query: str, offset: int = 0, limit: int = 20) -> tuple[List[App], int]:
        pattern = f"%{escape_like(query)}%"
        condition = (
            App.is_deleted.is_(False),
            or_(
                App.app_id.like(pattern, escape="\\"),
                App.name.like(pattern, escape="\\"),
            ),
        )
        total = await self._db.scalar(select(func.count()).select_from(App).where(*condition))
        result = await self._db.execute(
            select(App).where(*condition).order_by(App.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def find_by_app_ids(self, app_ids: set[str]) -> List[App]:
        if not app_ids:
            return []
        result = await self._db.execute(
            select(App)
            .where(App.app_id.in_(app_ids), App.is_deleted.is_(False))
            .order_by(App.id)
        )
        return list(result.scalars().all())

    async def find_by_owner_name(self, owner_name: str, offset: int = 0, limit: int = 20) -> List[App]:
        result = await self._db.execute(
            select(App)
            .where(App.owner_name == owner_name, App.is_deleted.is_(False))
            .order_by(App.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
