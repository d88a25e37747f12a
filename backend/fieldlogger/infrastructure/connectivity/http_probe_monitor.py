"""Connectivity monitor that probes the remote health endpoint."""

import asyncio
import logging

import httpx

from fieldlogger.application.interfaces import ConnectivityMonitor

logger = logging.getLogger(__name__)


class HttpConnectivityMonitor(ConnectivityMonitor):
    """Polls ``GET <health_url>`` and reports reachable / unreachable.

    Any response below 500 counts as online: the service is reachable even
    if it is unhappy with the probe. Runs as an asyncio.Task between
    ``start()`` and ``stop()``.
    """

    def __init__(
        self,
        health_url: str,
        *,
        interval_seconds: float = 15.0,
        timeout_seconds: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(initially_online=False)
        self._health_url = health_url
        self._interval = interval_seconds
        self._timeout = timeout_seconds
        self._http_client = http_client
        self._owns_client = http_client is None
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        # First probe inline so is_online is meaningful before anyone asks
        await self.probe()
        self._task = asyncio.create_task(self._loop())
        logger.info("HttpConnectivityMonitor started (%s)", self._health_url)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        logger.info("HttpConnectivityMonitor stopped")

    async def probe(self) -> bool:
        """Run a single probe and publish the result."""
        online = await self._check()
        await self._set_online(online)
        return online

    async def _check(self) -> bool:
        if self._http_client is None:
            return False
        try:
            response = await self._http_client.get(self._health_url)
        except httpx.HTTPError as exc:
            logger.debug("Health probe failed: %s", exc)
            return False
        return response.status_code < 500

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.probe()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Connectivity probe error")
