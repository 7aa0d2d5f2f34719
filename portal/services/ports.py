"""
Collaborator interfaces of the application lifecycle service.

Each port is the capability ``AppService`` depends on. Concrete services
implement them; tests may substitute any of them.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from portal.models.app import App
from portal.schemas.app import AppPayload
from portal.schemas.user import UserInfo


class IdentityResolver(ABC):
    """Resolves user ids to identities carrying an email"""

    @abstractmethod
    async def find_by_user_id(self, db: AsyncSession, user_id: str) -> Optional[UserInfo]:
        pass


class RemoteEnvClient(ABC):
    """Administrative API of a deployment environment"""

    @abstractmethod
    async def create_app(self, env: str, payload: AppPayload) -> AppPayload:
        pass

    @abstractmethod
    async def load_app(self, env: str, app_id: str) -> Optional[AppPayload]:
        pass

    @abstractmethod
    async def health(self, env: str) -> bool:
        pass


class NamespaceProvisioner(ABC):
    """Creates and removes the namespaces of an app"""

    @abstractmethod
    async def create_default_app_namespace(self, db: AsyncSession, app_id: str, operator: str):
        pass

    @abstractmethod
    async def batch_delete_by_app_id(self, db: AsyncSession, app_id: str, operator: str) -> int:
        pass


class RoleProvisioner(ABC):
    """
    Initializes access roles of an app.

    Both operations must be safe to call more than once with the same
    arguments.
    """

    @abstractmethod
    async def init_app_roles(self, db: AsyncSession, app: App):
        pass

    @abstractmethod
    async def init_cluster_namespace_roles(
        self,
        db: AsyncSession,
        app_id: str,
        env: str,
        cluster_name: str,
        operator: str,
    ):
        pass


class PermissionAssigner(ABC):
    """Grants roles and removes an app's role bindings"""

    @abstractmethod
    async def assign_role_to_users(
        self,
        db: AsyncSession,
        role_name: str,
        user_ids: Iterable[str],
        operator: str,
    ) -> set[str]:
        pass

    @abstractmethod
    async def delete_role_permissions_by_app_id(
        self, db: AsyncSession, app_id: str, operator: str
    ):
        pass


class FavoriteStore(ABC):
    """Per-user app bookmarks"""

    @abstractmethod
    async def batch_delete_by_app_id(self, db: AsyncSession, app_id: str, operator: str) -> int:
        pass


class AuditRecorder(ABC):
    """Audit trail sink"""

    @abstractmethod
    async def log_operation(
        self,
        db: AsyncSession,
        op_type: str,
        op_name: str,
        operator: str,
        target_id: Optional[str] = None,
        description: Optional[str] = None,
        event_data: Optional[dict] = None,
    ):
        pass

    @abstractmethod
    async def append_data_influences(
        self, db: AsyncSession, entities: list, entity_name: str
    ):
        pass


class EventPublisher(ABC):
    """In-process publisher of lifecycle events"""

    @abstractmethod
    async def publish(self, event, wait_for_handlers: bool = False):
        pass


class ActiveEnvironmentSource(ABC):
    """Ordered list of environments currently accepting work"""

    @abstractmethod
    def get_active_envs(self) -> list[str]:
        pass
