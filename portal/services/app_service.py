"""
Application lifecycle service.

Keeps the local app record consistent with its dependents and with the
per-environment admin services:

- Local writes of an operation (row, default namespace, roles) run in one
  unit of work and are all-or-nothing.
- Audit entries, lifecycle events and admin grants run after commit and
  never fail the operation.
- Remote environments are provisioned independently of each other and of
  the local transaction; there is no compensation and no retry.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import AppAlreadyExistsError, AppNotExistsError, OwnerNotFoundError
from portal.core.roles import CLUSTER_NAME_DEFAULT, build_app_master_role_name
from portal.events.app_events import AppCreatedEvent
from portal.models.app import App
from portal.repositories.unit_of_work import PortalUnitOfWork
from portal.schemas.app import AppBase, AppDTO, AppPage, AppPayload
from portal.schemas.provisioning import EnvProvisionResult, ProvisioningReport
from portal.services.audit_service import OpType
from portal.services.ports import (
    ActiveEnvironmentSource,
    AuditRecorder,
    EventPublisher,
    FavoriteStore,
    IdentityResolver,
    NamespaceProvisioner,
    PermissionAssigner,
    RemoteEnvClient,
    RoleProvisioner,
)

logger = logging.getLogger("portal.services.app_service")

remote_provisions = Counter(
    "portal_remote_provisions_total",
    "Remote app provisioning attempts per environment",
    ["env", "status"],
)

APP_ENTITY_NAME = "App"


@dataclass
class AppServiceContext:
    """Collaborators of the lifecycle service"""

    session_factory: Callable[[], AsyncSession]
    identity_resolver: IdentityResolver
    admin_api: RemoteEnvClient
    namespace_provisioner: NamespaceProvisioner
    role_provisioner: RoleProvisioner
    permission_assigner: PermissionAssigner
    favorite_store: FavoriteStore
    audit_recorder: AuditRecorder
    event_publisher: EventPublisher
    env_source: ActiveEnvironmentSource
    remote_call_timeout: float = 10.0


class AppService:
    """Orchestrates create, import, update and delete of apps."""

    def __init__(self, ctx: AppServiceContext):
        self._ctx = ctx

    def _unit_of_work(self, operation: str) -> PortalUnitOfWork:
        return PortalUnitOfWork(self._ctx.session_factory, operation)

    # ==================== Reads ====================

    async def load(self, app_id: str) -> Optional[AppDTO]:
        async with self._unit_of_work("App.load") as uow:
            app = await uow.apps.find_by_app_id(app_id)
            return AppDTO.model_validate(app) if app else None

    async def find_all(self) -> list[AppDTO]:
        async with self._unit_of_work("App.findAll") as uow:
            return [AppDTO.model_validate(a) for a in await uow.apps.find_all()]

    async def search_by_app_id_or_name(self, query: str, page: int = 0, size: int = 20) -> AppPage:
        async with self._unit_of_work("App.search") as uow:
            apps, total = await uow.apps.search(query, offset=page * size, limit=size)
            return AppPage(
                content=[AppDTO.model_validate(a) for a in apps],
                page=page,
                size=size,
                total=total,
            )

    async def find_by_app_ids(self, app_ids: set[str]) -> list[AppDTO]:
        async with self._unit_of_work("App.findByAppIds") as uow:
            return [AppDTO.model_validate(a) for a in await uow.apps.find_by_app_ids(app_ids)]

    async def find_by_owner_name(self, owner_name: str, page: int = 0, size: int = 20) -> list[AppDTO]:
        async with self._unit_of_work("App.findByOwnerName") as uow:
            apps = await uow.apps.find_by_owner_name(owner_name, offset=page * size, limit=size)
            return [AppDTO.model_validate(a) for a in apps]

    async def load_from_env(self, env: str, app_id: str) -> Optional[AppDTO]:
        """
        Read the app from an environment admin service.

        Raises:
            RemoteEnvError: If the admin service cannot be reached
        """
        payload = await self._ctx.admin_api.load_app(env, app_id)
        return payload.to_app() if payload else None

    # ==================== Create ====================

    async def create_app_and_add_role_permission(
        self,
        app: AppBase,
        admins: Optional[Iterable[str]],
        operator: str,
    ) -> AppDTO:
        """
        Create an app with its default namespace and roles.

        Args:
            app: App to create; owner email and operator stamps are ignored
            admins: Users to grant the master role to, besides the owner
            operator: User performing the creation

        Returns:
            The persisted app

        Raises:
            AppAlreadyExistsError: If a live app with the same id exists
            OwnerNotFoundError: If the owner does not resolve to a user
        """
        try:
            async with self._unit_of_work("App.create") as uow:
                created = await self._create_app_in_local(uow, app, operator)
                result = AppDTO.model_validate(created)
        except IntegrityError as e:
            # Lost a create race on one of the unique keys (app id, role names)
            logger.info(
                f"Unique constraint conflict while creating app {app.app_id}",
                extra={"app_id": app.app_id, "error": str(e.orig)},
            )
            raise AppAlreadyExistsError(app.app_id) from e

        logger.info(
            f"App {result.app_id} created by {operator}",
            extra={"trace_event": "CREATE_APP", "app_id": result.app_id, "operator": operator},
        )

        await self._best_effort(
            "App.create.audit",
            lambda db: self._ctx.audit_recorder.log_operation(
                db, OpType.CREATE, "App.create", operator, target_id=result.app_id
            ),
        )

        await self._publish(AppCreatedEvent(result, operator))

        admins = set(admins or ())
        if admins:
            await self._best_effort(
                "App.create.assignAdmins",
                lambda db: self._ctx.permission_assigner.assign_role_to_users(
                    db, build_app_master_role_name(result.app_id), admins, operator
                ),
            )

        return result

    async def _create_app_in_local(self, uow: PortalUnitOfWork, app: AppBase, operator: str) -> App:
        app_id = app.app_id
        db = uow.session

        if await uow.apps.find_by_app_id(app_id) is not None:
            raise AppAlreadyExistsError(app_id)

        owner = await self._ctx.identity_resolver.find_by_user_id(db, app.owner_name)
        if owner is None:
            raise OwnerNotFoundError(app.owner_name)

        managed = await self._revive_or_new(uow, app_id)
        managed.name = app.name
        managed.org_id = app.org_id
        managed.org_name = app.org_name
        managed.owner_name = owner.user_id
        managed.owner_email = owner.email
        managed.created_by = operator
        managed.last_modified_by = operator

        created = await uow.apps.save(managed)

        await self._ctx.namespace_provisioner.create_default_app_namespace(db, app_id, operator)
        await self._ctx.role_provisioner.init_app_roles(db, created)
        for env in self._ctx.env_source.get_active_envs():
            await self._ctx.role_provisioner.init_cluster_namespace_roles(
                db, app_id, env, CLUSTER_NAME_DEFAULT, operator
            )

        return created

    async def _revive_or_new(self, uow: PortalUnitOfWork, app_id: str) -> App:
        """
        A tombstoned row for the app id is reused instead of inserting a new one.

        Raises:
            AppAlreadyExistsError: If a concurrent create revived the row first
        """
        existing = await uow.apps.find_by_app_id_including_deleted(app_id)
        if existing is None:
            return App(app_id=app_id)

        logger.info(f"Reusing deleted record of app {app_id} (id={existing.id})")
        return await uow.apps.revive_app(app_id)

    # ==================== Import ====================

    async def import_app_in_local(self, app: AppDTO) -> AppDTO:
        """
        Backfill a locally missing app, typically copied from an environment.

        Returns the existing live record untouched when there is one. Only the
        app level roles are initialized; environments are not provisioned.
        """
        async with self._unit_of_work("App.import") as uow:
            managed = await uow.apps.find_by_app_id(app.app_id)
            if managed is not None:
                return AppDTO.model_validate(managed)

            row = await self._revive_or_new(uow, app.app_id)
            row.name = app.name
            row.org_id = app.org_id
            row.org_name = app.org_name
            row.owner_name = app.owner_name
            row.owner_email = app.owner_email
            row.created_by = app.created_by
            row.last_modified_by = app.last_modified_by or app.created_by

            created = await uow.apps.save(row)
            await self._ctx.role_provisioner.init_app_roles(uow.session, created)
            result = AppDTO.model_validate(created)

        logger.info(
            f"App {result.app_id} imported",
            extra={"trace_event": "CREATE_APP", "app_id": result.app_id},
        )
        return result

    # ==================== Remote ====================

    async def create_app_in_remote(self, env: str, app: AppDTO, operator: str) -> EnvProvisionResult:
        """
        Create the app in one environment and initialize its cluster roles there.

        Both steps are attempted and reported separately. Failures are logged
        and returned, never raised.
        """
        app = self._stamp_creator(app, operator)
        result = EnvProvisionResult(env=env)
        await self._push_to_env(env, app, result)
        await self._init_env_roles(env, app.app_id, operator, result)
        self._count_provision(result)
        return result

    async def create_app_in_remotes(
        self, envs: Iterable[str], app: AppDTO, operator: str
    ) -> ProvisioningReport:
        """
        Create the app in several environments.

        Remote calls run concurrently, each bounded by the remote call
        timeout. Role initialization then runs per environment, each in its
        own transaction. One environment failing never affects another.
        """
        app = self._stamp_creator(app, operator)
        results = [EnvProvisionResult(env=env) for env in envs]

        await asyncio.gather(*(self._push_to_env(r.env, app, r) for r in results))
        for result in results:
            await self._init_env_roles(result.env, app.app_id, operator, result)
            self._count_provision(result)

        return ProvisioningReport(app_id=app.app_id, results=results)

    async def find_missing_envs(self, app_id: str) -> list[str]:
        """
        Active environments whose admin service has no copy of the app.

        Environments that cannot be reached are logged and left out.
        """
        envs = self._ctx.env_source.get_active_envs()

        async def _probe(env: str) -> bool:
            try:
                payload = await asyncio.wait_for(
                    self._ctx.admin_api.load_app(env, app_id),
                    timeout=self._ctx.remote_call_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"Loading app {app_id} from env {env} timed out")
                return False
            except Exception as e:
                logger.warning(f"Could not load app {app_id} from env {env}: {e}")
                return False
            return payload is None

        missing = await asyncio.gather(*(_probe(env) for env in envs))
        return [env for env, is_missing in zip(envs, missing) if is_missing]

    @staticmethod
    def _stamp_creator(app: AppDTO, operator: str) -> AppDTO:
        if app.created_by:
            return app
        return app.model_copy(update={"created_by": operator, "last_modified_by": operator})

    async def _push_to_env(self, env: str, app: AppDTO, result: EnvProvisionResult):
        try:
            await asyncio.wait_for(
                self._ctx.admin_api.create_app(env, AppPayload.from_app(app)),
                timeout=self._ctx.remote_call_timeout,
            )
        except asyncio.TimeoutError:
            result.error = f"create app timed out after {self._ctx.remote_call_timeout}s"
            logger.error(f"Create app {app.app_id} in env {env} timed out")
            return
        except Exception as e:
            result.error = str(e)
            logger.error(f"Create app {app.app_id} in env {env} failed: {e}", exc_info=True)
            return
        result.app_created = True

    async def _init_env_roles(self, env: str, app_id: str, operator: str, result: EnvProvisionResult):
        try:
            async with self._unit_of_work("App.createRemote.roles") as uow:
                await self._ctx.role_provisioner.init_cluster_namespace_roles(
                    uow.session, app_id, env, CLUSTER_NAME_DEFAULT, operator
                )
        except Exception as e:
            result.error = f"{result.error}; {e}" if result.error else str(e)
            logger.error(f"Init cluster roles of app {app_id} in env {env} failed: {e}", exc_info=True)
            return
        result.roles_initialized = True

    @staticmethod
    def _count_provision(result: EnvProvisionResult):
        remote_provisions.labels(env=result.env, status="success" if result.success else "error").inc()

    # ==================== Update ====================

    async def update_app_in_local(self, app: AppBase, operator: str) -> AppDTO:
        """
        Update the descriptive fields and owner of an app.

        The app id, creator and dependents are never touched.

        Raises:
            AppNotExistsError: If there is no live app with this id
            OwnerNotFoundError: If the new owner does not resolve to a user
        """
        app_id = app.app_id
        async with self._unit_of_work("App.update") as uow:
            managed = await uow.apps.find_by_app_id(app_id)
            if managed is None:
                raise AppNotExistsError(app_id)

            owner = await self._ctx.identity_resolver.find_by_user_id(uow.session, app.owner_name)
            if owner is None:
                raise OwnerNotFoundError(app.owner_name)

            managed.name = app.name
            managed.org_id = app.org_id
            managed.org_name = app.org_name
            managed.owner_name = owner.user_id
            managed.owner_email = owner.email
            managed.last_modified_by = operator

            saved = await uow.apps.save(managed)
            result = AppDTO.model_validate(saved)

        await self._best_effort(
            "App.update.audit",
            lambda db: self._ctx.audit_recorder.log_operation(
                db, OpType.UPDATE, "App.update", operator, target_id=app_id
            ),
        )
        return result

    # ==================== Delete ====================

    async def delete_app_in_local(self, app_id: str, operator: str) -> AppDTO:
        """
        Delete an app and cascade to its namespaces, favorites and roles.

        No lifecycle event is published for deletion.

        Returns:
            The app as it was before deletion, stamped with the operator

        Raises:
            AppNotExistsError: If there is no live app with this id
        """
        async with self._unit_of_work("App.delete") as uow:
            db = uow.session
            managed = await uow.apps.find_by_app_id(app_id)
            if managed is None:
                raise AppNotExistsError(app_id)

            managed.last_modified_by = operator
            snapshot = AppDTO.model_validate(managed)

            await uow.apps.delete_app(app_id, operator)
            await self._ctx.namespace_provisioner.batch_delete_by_app_id(db, app_id, operator)
            await self._ctx.favorite_store.batch_delete_by_app_id(db, app_id, operator)
            await self._ctx.permission_assigner.delete_role_permissions_by_app_id(db, app_id, operator)

        logger.info(f"App {app_id} deleted by {operator}", extra={"app_id": app_id, "operator": operator})

        await self._best_effort(
            "App.delete.audit",
            lambda db: self._record_deletion(db, snapshot, operator),
        )
        return snapshot

    async def _record_deletion(self, db: AsyncSession, snapshot: AppDTO, operator: str):
        await self._ctx.audit_recorder.append_data_influences(db, [snapshot], APP_ENTITY_NAME)
        await self._ctx.audit_recorder.log_operation(
            db, OpType.DELETE, "App.delete", operator, target_id=snapshot.app_id
        )

    # ==================== Post-commit hooks ====================

    async def _best_effort(self, operation: str, action: Callable[[AsyncSession], Awaitable]):
        """Run ``action`` in its own transaction; failures are logged only."""
        try:
            async with self._unit_of_work(operation) as uow:
                return await action(uow.session)
        except Exception as e:
            logger.error(f"{operation} failed: {e}", exc_info=True)
            return None

    async def _publish(self, event):
        try:
            await self._ctx.event_publisher.publish(event, wait_for_handlers=True)
        except Exception as e:
            logger.error(f"Publishing {event.event_type} failed: {e}", exc_info=True)
