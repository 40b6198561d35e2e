"""Pool lifespan middleware - grant store pool follows the ASGI lifespan."""

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool, PoolTimeout

logger = logging.getLogger(__name__)


class PoolLifespanMiddleware:
    """Opens the grant store pool on startup and closes it on shutdown.

    An unreachable store does not block startup: checks deny and
    /v1/health/ready reports 503 until connections succeed.
    """

    def __init__(self, pool: AsyncConnectionPool, connect_timeout: float = 5.0) -> None:
        self._pool = pool
        self._connect_timeout = connect_timeout

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.open()
        try:
            await self._pool.wait(timeout=self._connect_timeout)
        except PoolTimeout:
            logger.warning(
                "Grant store not reachable after %.1fs; checks will deny until it is",
                self._connect_timeout,
            )
            return
        logger.info("Grant store pool ready (min=%d, max=%d)", self._pool.min_size, self._pool.max_size)

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.close()
        logger.info("Grant store pool closed")
