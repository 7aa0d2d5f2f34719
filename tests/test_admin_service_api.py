"""
Tests for AdminServiceAPI, the HTTP client of the environment admin services.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from portal.core.errors import RemoteEnvError
from portal.schemas.app import AppPayload
from portal.services.admin_service_api import AdminServiceAPI

BASE_URLS = {"DEV": "http://dev-admin:8090/", "pro": "http://pro-admin:8093"}


def make_response(status_code: int, method: str = "GET", url: str = "http://admin", **kwargs):
    return httpx.Response(status_code, request=httpx.Request(method, url), **kwargs)


@pytest.fixture
def api():
    return AdminServiceAPI(BASE_URLS, internal_api_key="test-key", timeout=3.0)


@pytest.fixture
def payload():
    return AppPayload(
        app_id="pay-core",
        name="Pay Core",
        owner_name="alice",
        owner_email="alice@example.com",
        created_by="alice",
        last_modified_by="alice",
    )


class TestCreateApp:
    @pytest.mark.asyncio
    async def test_posts_camel_case_payload(self, api, payload):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=make_response(200, "POST", json=payload.model_dump(by_alias=True))
            )
            mock_client.return_value.__aenter__.return_value.post = post

            result = await api.create_app("DEV", payload)

        assert result.app_id == "pay-core"
        mock_client.assert_called_once_with(timeout=3.0)
        url = post.await_args.args[0]
        kwargs = post.await_args.kwargs
        assert url == "http://dev-admin:8090/apps"
        assert kwargs["headers"] == {"X-Internal-Auth": "test-key"}
        assert kwargs["json"]["appId"] == "pay-core"
        assert kwargs["json"]["ownerName"] == "alice"
        assert kwargs["json"]["dataChangeCreatedBy"] == "alice"

    @pytest.mark.asyncio
    async def test_env_names_are_case_insensitive(self, api, payload):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=make_response(200, "POST", json=payload.model_dump(by_alias=True))
            )
            mock_client.return_value.__aenter__.return_value.post = post

            await api.create_app("PRO", payload)

        assert post.await_args.args[0] == "http://pro-admin:8093/apps"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, api, payload):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(400, "POST", text="app already exists")
            )

            with pytest.raises(RemoteEnvError) as exc_info:
                await api.create_app("DEV", payload)

        assert exc_info.value.env == "DEV"
        assert exc_info.value.status_code == 400
        assert "app already exists" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, api, payload):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("connection refused")
            )

            with pytest.raises(RemoteEnvError) as exc_info:
                await api.create_app("DEV", payload)

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self, api, payload):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, "POST", text="created")
            )

            with pytest.raises(RemoteEnvError, match="Malformed response") as exc_info:
                await api.create_app("DEV", payload)

        assert exc_info.value.details["operation"] == "create_app"

    @pytest.mark.asyncio
    async def test_unknown_env_raises(self, api, payload):
        with pytest.raises(RemoteEnvError, match="No admin service configured"):
            await api.create_app("UAT", payload)


class TestLoadApp:
    @pytest.mark.asyncio
    async def test_returns_remote_copy(self, api):
        body = {"appId": "pay-core", "name": "Pay Core", "ownerName": "alice", "id": 42}
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(200, json=body)
            )

            result = await api.load_app("DEV", "pay-core")

        assert result.app_id == "pay-core"
        assert result.owner_name == "alice"

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self, api):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(404)
            )

            assert await api.load_app("DEV", "missing") is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self, api):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(503)
            )

            with pytest.raises(RemoteEnvError) as exc_info:
                await api.load_app("DEV", "pay-core")

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self, api):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(200, text="<html>maintenance</html>")
            )

            with pytest.raises(RemoteEnvError, match="Malformed response") as exc_info:
                await api.load_app("DEV", "pay-core")

        assert exc_info.value.env == "DEV"
        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_shape_body_raises(self, api):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(200, json={"status": "ok"})
            )

            with pytest.raises(RemoteEnvError, match="Malformed response"):
                await api.load_app("DEV", "pay-core")


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, api):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(200)
            )

            assert await api.health("DEV") is True

    @pytest.mark.asyncio
    async def test_unreachable_is_unhealthy(self, api):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectTimeout("timed out")
            )

            assert await api.health("DEV") is False

    @pytest.mark.asyncio
    async def test_unknown_env_is_unhealthy(self, api):
        assert await api.health("UAT") is False
