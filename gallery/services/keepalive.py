# gallery/services/keepalive.py
import asyncio
from contextlib import suppress
from typing import Optional

import httpx
from loguru import logger


class KeepAlive:
    """Pings ``url`` every ``interval`` seconds so the host doesn't idle the service.

    Failures are logged and never raised.
    """

    def __init__(self, url: str, interval: float, client_factory=httpx.AsyncClient, timeout: float = 10.0):
        self.url = url
        self.interval = interval
        self.client_factory = client_factory
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    async def ping(self, client: httpx.AsyncClient) -> Optional[int]:
        logger.info("Pinging {} to prevent sleep", self.url)
        try:
            response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.error("Ping failed: {}", e)
            return None
        logger.info("Ping successful, status {}", response.status_code)
        return response.status_code

    async def run(self) -> None:
        async with self.client_factory(timeout=self.timeout) as client:
            while True:
                await asyncio.sleep(self.interval)
                await self.ping(client)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run())
            logger.info("Keep-alive started: every {}s to {}", self.interval, self.url)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
