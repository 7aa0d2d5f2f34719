"""
Unit of Work for local lifecycle transactions.

Makes the transaction boundary of a lifecycle operation explicit: everything
done through ``uow.session`` inside the ``async with`` block commits together
or rolls back together.
"""

import logging
import time
from typing import Callable

from prometheus_client import Counter, Histogram
from sqlalchemy.ext.asyncio import AsyncSession

from .app_repository import AppRepositoryImpl

logger = logging.getLogger("portal.repositories.unit_of_work")

transaction_duration = Histogram(
    "portal_transaction_duration_seconds",
    "Duration of local lifecycle transactions",
    ["operation"],
)

transaction_commits = Counter(
    "portal_transaction_commits_total",
    "Total number of transaction commits",
    ["operation", "status"],
)


class PortalUnitOfWork:
    """
    Unit of Work owning one database session.

    - Creates the session on enter and closes it on exit
    - Exposes the app repository bound to that session
    - Commits on clean exit, rolls back when the block raises

    Usage:
        >>> async with PortalUnitOfWork(async_session_maker, "App.create") as uow:
        ...     app = await uow.apps.find_by_app_id("pay-core")
        ...     await uow.apps.save(app)

    Attributes:
        operation: Operation name used for metrics and logs
        apps: App repository (available inside the context)
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        operation: str = "unknown",
    ):
        self._session_factory = session_factory
        self._session = None
        self.operation = operation
        self.apps = None

    async def __aenter__(self):
        self._session = self._session_factory()
        self.apps = AppRepositoryImpl(self._session)
        logger.debug(f"PortalUnitOfWork: session opened (operation={self.operation})")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._session is None:
            return

        try:
            if exc_type is not None:
                logger.debug(
                    f"PortalUnitOfWork: {exc_type.__name__} raised, rolling back "
                    f"(operation={self.operation})"
                )
                await self._session.rollback()
                transaction_commits.labels(operation=self.operation, status="rollback").inc()
            else:
                await self.commit()
        finally:
            await self._session.close()
            self._session = None
            self.apps = None

    @property
    def session(self) -> AsyncSession:
        """
        Active database session.

        Raises:
            RuntimeError: Outside of the ``async with`` block
        """
        if self._session is None:
            raise RuntimeError(
                "PortalUnitOfWork is not in context. "
                "Use 'async with PortalUnitOfWork(...) as uow:'"
            )
        return self._session

    async def commit(self):
        """
        Commit the current transaction and record its duration.

        Raises:
            RuntimeError: Outside of the ``async with`` block
        """
        session = self.session
        start_time = time.time()
        try:
            await session.commit()
        except Exception as e:
            transaction_commits.labels(operation=self.operation, status="error").inc()
            logger.error(
                f"PortalUnitOfWork: commit failed (operation={self.operation}): {e}",
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        transaction_duration.labels(operation=self.operation).observe(duration)
        transaction_commits.labels(operation=self.operation, status="success").inc()
        logger.debug(
            f"PortalUnitOfWork: committed (operation={self.operation}, duration={duration:.3f}s)"
        )
