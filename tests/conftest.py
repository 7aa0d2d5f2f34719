"""
Pytest configuration and fixtures.
"""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portal.core.config import Settings
from portal.core.container import PortalContainer
from portal.events.event_bus import EventBus
from portal.models import Base
from portal.services.ports import RemoteEnvClient
from portal.services.user_service import user_service

ACTIVE_ENVS = ["DEV", "PRO"]


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the portal schema"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def users(session_factory):
    """Seed the users referenced by the lifecycle tests"""
    async with session_factory() as session:
        await user_service.create_user(session, "alice", "alice@example.com", "Alice")
        await user_service.create_user(session, "bob", "bob@example.com", "Bob")
        await session.commit()
    return {"alice", "bob"}


@pytest.fixture
def admin_api():
    """Admin service client where every environment accepts every app"""
    api = AsyncMock(spec=RemoteEnvClient)
    api.create_app.side_effect = lambda env, payload: payload
    api.load_app.return_value = None
    api.health.return_value = True
    return api


@pytest.fixture
def settings():
    return Settings(active_envs=ACTIVE_ENVS, remote_call_timeout=0.5)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest_asyncio.fixture
async def container(settings, session_factory, event_bus, admin_api, users):
    return PortalContainer(settings, session_factory, event_bus=event_bus, admin_api=admin_api)


@pytest.fixture
def app_service(container):
    return container.app_service
