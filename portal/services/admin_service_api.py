"""
Client for the per-environment admin services.

Each deployment environment runs its own admin service; the portal reaches
it over HTTP with the internal API key.
"""

import logging
from typing import Optional

import httpx

from portal.core.errors import RemoteEnvError
from portal.schemas.app import AppPayload
from portal.services.ports import RemoteEnvClient

logger = logging.getLogger("portal.services.admin_service_api")


class AdminServiceAPI(RemoteEnvClient):
    """HTTP client for environment admin services."""

    def __init__(
        self,
        base_urls: dict[str, str],
        internal_api_key: str,
        timeout: float = 10.0
    ):
        """
        Args:
            base_urls: Admin service base URL per environment
            internal_api_key: Key for internal authentication
            timeout: Request timeout in seconds
        """
        self._base_urls = {env.upper(): url.rstrip("/") for env, url in base_urls.items()}
        self._internal_api_key = internal_api_key
        self._timeout = timeout

    def _url(self, env: str, path: str) -> str:
        base_url = self._base_urls.get(env.upper())
        if base_url is None:
            raise RemoteEnvError(env=env, operation=path, reason="No admin service configured")
        return f"{base_url}{path}"

    def _headers(self) -> dict[str, str]:
        return {"X-Internal-Auth": self._internal_api_key}

    @staticmethod
    def _decode(env: str, operation: str, response: httpx.Response) -> AppPayload:
        # JSONDecodeError and pydantic.ValidationError are both ValueError
        try:
            return AppPayload.model_validate(response.json())
        except ValueError as e:
            raise RemoteEnvError(
                env=env,
                operation=operation,
                reason=f"Malformed response: {e}",
                status_code=response.status_code,
            ) from e

    async def create_app(self, env: str, payload: AppPayload) -> AppPayload:
        """
        Create the app in the environment.

        Raises:
            RemoteEnvError: On transport errors or non-2xx responses
        """
        url = self._url(env, "/apps")
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                logger.debug(f"POST {url} (app_id={payload.app_id})")
                response = await client.post(
                    url,
                    json=payload.model_dump(by_alias=True),
                    headers=self._headers(),
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteEnvError(
                    env=env,
                    operation="create_app",
                    reason=e.response.text or str(e),
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise RemoteEnvError(env=env, operation="create_app", reason=str(e)) from e

        return self._decode(env, "create_app", response)

    async def load_app(self, env: str, app_id: str) -> Optional[AppPayload]:
        """
        Read the app from the environment.

        Returns:
            The remote copy, or None when the admin service answers 404

        Raises:
            RemoteEnvError: On transport errors or other non-2xx responses
        """
        url = self._url(env, f"/apps/{app_id}")
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.get(url, headers=self._headers())
                if response.status_code == 404:
                    return None
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteEnvError(
                    env=env,
                    operation="load_app",
                    reason=str(e),
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise RemoteEnvError(env=env, operation="load_app", reason=str(e)) from e

        return self._decode(env, "load_app", response)

    async def health(self, env: str) -> bool:
        """Probe the admin service health endpoint. Never raises."""
        try:
            url = self._url(env, "/health")
        except RemoteEnvError:
            return False

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.get(url, headers=self._headers())
                return response.status_code == 200
            except httpx.HTTPError as e:
                logger.warning(f"Health check of env {env} failed: {e}")
                return False
