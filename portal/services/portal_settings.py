"""
Active environment source.

The configured environments are all active until their admin service fails
``down_threshold`` consecutive health probes; a single successful probe brings
an environment back.
"""

import asyncio
import logging
from typing import Optional

from portal.services.ports import ActiveEnvironmentSource, RemoteEnvClient

logger = logging.getLogger("portal.services.portal_settings")


class PortalSettings(ActiveEnvironmentSource):
    """Tracks which configured environments are currently usable"""

    def __init__(
        self,
        envs: list[str],
        admin_api: Optional[RemoteEnvClient] = None,
        down_threshold: int = 2,
    ):
        # Keep configured order, drop duplicates
        self._envs = list(dict.fromkeys(env.upper() for env in envs))
        self._admin_api = admin_api
        self._down_threshold = down_threshold
        self._failures: dict[str, int] = {env: 0 for env in self._envs}
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def all_envs(self) -> list[str]:
        return list(self._envs)

    def get_active_envs(self) -> list[str]:
        return [env for env in self._envs if self._failures[env] < self._down_threshold]

    def is_active(self, env: str) -> bool:
        env = env.upper()
        return env in self._failures and self._failures[env] < self._down_threshold

    async def refresh_env_health(self):
        """Probe every configured environment once"""
        if self._admin_api is None:
            return

        results = await asyncio.gather(
            *(self._admin_api.health(env) for env in self._envs),
            return_exceptions=True,
        )
        for env, healthy in zip(self._envs, results):
            if healthy is True:
                if self._failures[env] >= self._down_threshold:
                    logger.info(f"Env {env} is back up")
                self._failures[env] = 0
            else:
                self._failures[env] += 1
                if self._failures[env] == self._down_threshold:
                    logger.warning(
                        f"Env {env} marked down after {self._down_threshold} failed health checks"
                    )

    def start_health_check(self, interval: float):
        """Run ``refresh_env_health`` every ``interval`` seconds in the background"""
        if self._refresh_task is not None:
            return

        async def _loop():
            while True:
                try:
                    await self.refresh_env_health()
                except Exception as e:
                    logger.error(f"Env health check failed: {e}", exc_info=True)
                await asyncio.sleep(interval)

        self._refresh_task = asyncio.create_task(_loop())
        logger.info(f"Env health check started (interval={interval}s)")

    async def stop_health_check(self):
        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        try:
            await self._refresh_task
        except asyncio.CancelledError:
            pass
        self._refresh_task = None
