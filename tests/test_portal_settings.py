"""
Tests for PortalSettings, the active environment source.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from portal.services.portal_settings import PortalSettings
from portal.services.ports import RemoteEnvClient


@pytest.fixture
def admin_api():
    api = AsyncMock(spec=RemoteEnvClient)
    api.health.return_value = True
    return api


def test_all_configured_envs_start_active():
    settings = PortalSettings(["dev", "FAT", "DEV", "pro"])

    assert settings.all_envs == ["DEV", "FAT", "PRO"]
    assert settings.get_active_envs() == ["DEV", "FAT", "PRO"]
    assert settings.is_active("fat")
    assert not settings.is_active("UAT")


@pytest.mark.asyncio
async def test_env_goes_down_after_threshold(admin_api):
    admin_api.health.side_effect = lambda env: env != "FAT"
    settings = PortalSettings(["DEV", "FAT", "PRO"], admin_api=admin_api, down_threshold=2)

    await settings.refresh_env_health()
    assert settings.get_active_envs() == ["DEV", "FAT", "PRO"]

    await settings.refresh_env_health()
    assert settings.get_active_envs() == ["DEV", "PRO"]
    assert not settings.is_active("FAT")


@pytest.mark.asyncio
async def test_env_recovers_on_success(admin_api):
    admin_api.health.return_value = False
    settings = PortalSettings(["DEV"], admin_api=admin_api, down_threshold=2)

    await settings.refresh_env_health()
    await settings.refresh_env_health()
    assert settings.get_active_envs() == []

    admin_api.health.return_value = True
    await settings.refresh_env_health()
    assert settings.get_active_envs() == ["DEV"]


@pytest.mark.asyncio
async def test_probe_exception_counts_as_failure(admin_api):
    admin_api.health.side_effect = RuntimeError("boom")
    settings = PortalSettings(["DEV"], admin_api=admin_api, down_threshold=1)

    await settings.refresh_env_health()

    assert settings.get_active_envs() == []


@pytest.mark.asyncio
async def test_without_admin_api_nothing_is_probed():
    settings = PortalSettings(["DEV"])

    await settings.refresh_env_health()

    assert settings.get_active_envs() == ["DEV"]


@pytest.mark.asyncio
async def test_background_health_check(admin_api):
    settings = PortalSettings(["DEV"], admin_api=admin_api)

    settings.start_health_check(interval=0.01)
    await asyncio.sleep(0.05)
    await settings.stop_health_check()

    assert admin_api.health.await_count >= 1
    assert settings.get_active_envs() == ["DEV"]
