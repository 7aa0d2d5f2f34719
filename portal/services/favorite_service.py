"""Favorite service"""

from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import logger
from portal.models.favorite import Favorite
from portal.services.ports import FavoriteStore

POSITION_DEFAULT = 10000


class FavoriteService(FavoriteStore):
    """Per-user app bookmarks"""

    async def add_favorite(self, db: AsyncSession, user_id: str, app_id: str) -> Favorite:
        """
        Bookmark an app for a user.

        Raises:
            ValueError: If the user already has this app bookmarked
        """
        existing = await db.scalar(
            select(func.count())
            .select_from(Favorite)
            .where(
                Favorite.user_id == user_id,
                Favorite.app_id == app_id,
                Favorite.is_deleted.is_(False),
            )
        )
        if existing:
            raise ValueError(f"Favorite already exists: user={user_id}, app={app_id}")

        favorite = Favorite(
            user_id=user_id,
            app_id=app_id,
            position=POSITION_DEFAULT,
            last_modified_by=user_id,
        )
        db.add(favorite)
        await db.flush()
        return favorite

    async def find_favorites(self, db: AsyncSession, user_id: str) -> list[Favorite]:
        result = await db.execute(
            select(Favorite)
            .where(Favorite.user_id == user_id, Favorite.is_deleted.is_(False))
            .order_by(Favorite.position, Favorite.id)
        )
        return list(result.scalars().all())

    async def find_by_app_id(self, db: AsyncSession, app_id: str) -> list[Favorite]:
        result = await db.execute(
            select(Favorite).where(Favorite.app_id == app_id, Favorite.is_deleted.is_(False))
        )
        return list(result.scalars().all())

    async def batch_delete_by_app_id(self, db: AsyncSession, app_id: str, operator: str) -> int:
        """Soft-delete every bookmark of the app"""
        result = await db.execute(
            update(Favorite)
            .where(Favorite.app_id == app_id, Favorite.is_deleted.is_(False))
            .values(
                is_deleted=True,
                deleted_at=datetime.now(timezone.utc),
                last_modified_by=operator,
            )
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Deleted {result.rowcount} favorites of app {app_id}")
        return result.rowcount


# Global instance
favorite_service = FavoriteService()
