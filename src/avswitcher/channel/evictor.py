"""Idle eviction for pooled device connections.

A single background task sweeps the whole pool at a fixed interval and
closes entries unused for the idle window, so the number of background
tasks does not grow with the number of devices.
"""

from __future__ import annotations

import asyncio
import logging

from avswitcher.channel.pool import ConnectionPool

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT = 10.0
DEFAULT_SWEEP_INTERVAL = 1.0


class IdleEvictor:
    """Periodically closes pooled connections that have gone idle."""

    def __init__(
        self,
        pool: ConnectionPool,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
    ) -> None:
        self._pool = pool
        self._idle_timeout = idle_timeout
        self._sweep_interval = sweep_interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="idle-evictor")
        logger.debug(
            "Idle evictor started (idle=%.1fs, interval=%.1fs)",
            self._idle_timeout, self._sweep_interval,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Idle evictor stopped")

    async def sweep(self) -> list[str]:
        """Run one eviction pass and return the evicted addresses."""
        evicted = await self._pool.evict_idle(self._idle_timeout)
        for address in evicted:
            logger.info("Evicted idle connection to %s", address)
        return evicted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.sweep()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Idle sweep failed: %s", e)
