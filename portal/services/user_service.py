"""User service for identity lookups"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import logger
from portal.models.user import User
from portal.schemas.user import UserInfo
from portal.services.ports import IdentityResolver


class UserService(IdentityResolver):
    """Resolves portal users from the local users table"""

    async def create_user(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        display_name: str = "",
    ) -> UserInfo:
        """
        Create a new user

        Args:
            db: Database session
            username: Login name, also the user id
            email: Email address
            display_name: Human readable name

        Returns:
            Created user

        Raises:
            ValueError: If user already exists
        """
        existing = await self._get_by_username(db, username)
        if existing:
            raise ValueError(f"User with username '{username}' already exists")

        user = User(
            username=username,
            email=email,
            display_name=display_name or username,
        )
        db.add(user)
        await db.flush()

        logger.info(f"User created: {user.id} ({user.username})")

        return UserInfo.model_validate(user)

    async def find_by_user_id(self, db: AsyncSession, user_id: str) -> UserInfo | None:
        """
        Get an enabled user by user id

        Args:
            db: Database session
            user_id: User id (username)

        Returns:
            UserInfo or None if not found or disabled
        """
        user = await self._get_by_username(db, user_id)
        if user is None or not user.is_enabled:
            return None
        return UserInfo.model_validate(user)

    async def _get_by_username(self, db: AsyncSession, username: str) -> User | None:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()


# Global instance
user_service = UserService()
