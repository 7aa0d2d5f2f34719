"""
Unit tests for PortalUnitOfWork.

Checks:
- Session lifecycle
- Commit on clean exit
- Rollback when the block raises
- Repository binding
"""

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from portal.repositories.app_repository import AppRepositoryImpl
from portal.repositories.unit_of_work import PortalUnitOfWork


@pytest.fixture
def mock_session():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def factory(mock_session):
    return Mock(return_value=mock_session)


class TestPortalUnitOfWorkContextManager:
    """Context manager behaviour"""

    @pytest.mark.asyncio
    async def test_enter_opens_session_and_repository(self, factory, mock_session):
        uow = PortalUnitOfWork(factory, "App.create")

        async with uow as entered:
            assert entered is uow
            assert uow.session is mock_session
            assert isinstance(uow.apps, AppRepositoryImpl)
            factory.assert_called_once()

    @pytest.mark.asyncio
    async def test_clean_exit_commits_and_closes(self, factory, mock_session):
        async with PortalUnitOfWork(factory, "App.create"):
            pass

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_exception_rolls_back_and_propagates(self, factory, mock_session):
        with pytest.raises(ValueError, match="boom"):
            async with PortalUnitOfWork(factory, "App.create"):
                raise ValueError("boom")

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_commit_failure_propagates_and_closes(self, factory, mock_session):
        mock_session.commit.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError, match="disk full"):
            async with PortalUnitOfWork(factory, "App.delete"):
                pass

        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_state_is_reset_after_exit(self, factory):
        uow = PortalUnitOfWork(factory)

        async with uow:
            pass

        assert uow.apps is None
        with pytest.raises(RuntimeError, match="not in context"):
            _ = uow.session


class TestPortalUnitOfWorkOutsideContext:
    def test_session_outside_context_raises(self, factory):
        with pytest.raises(RuntimeError, match="not in context"):
            _ = PortalUnitOfWork(factory).session

    @pytest.mark.asyncio
    async def test_commit_outside_context_raises(self, factory):
        with pytest.raises(RuntimeError):
            await PortalUnitOfWork(factory).commit()
