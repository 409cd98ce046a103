"""
scheduler.py — Periodic background refresh of the models document.

Fires ``engine.refresh()`` once per interval whether or not the current entry
is still fresh.  Refresh failures are logged and otherwise ignored: the engine
already falls back on its own.

Once stopped, a scheduler stays stopped; ``start`` becomes a no-op.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from .config import CONFIG_TTL_MS

logger = logging.getLogger(__name__)


class AutoRefreshScheduler:
    """
    Owns one asyncio task that periodically refreshes an engine.

    Usage::

        scheduler = AutoRefreshScheduler(engine)
        scheduler.start()          # from inside a running event loop
        ...
        await scheduler.aclose()   # or scheduler.stop() from sync code
    """

    def __init__(self, engine: Any, interval_ms: int = CONFIG_TTL_MS) -> None:
        if interval_ms <= 0:
            raise ValueError(f"refresh interval must be positive, got {interval_ms} ms")
        self._engine = engine
        self._interval_ms = interval_ms
        self._interval_s = interval_ms / 1000
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> None:
        """Launch the refresh task. Idempotent; ignored after ``stop``."""
        if self._stopped:
            logger.debug("Auto-refresh scheduler already stopped, not restarting")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._refresh_loop(), name="models_config_refresh")
        logger.info("Auto-refresh scheduled every %.0fs", self._interval_s)

    def stop(self) -> None:
        """Cancel the refresh task. Safe to call any number of times."""
        if self._stopped:
            return
        self._stopped = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
        logger.info("Auto-refresh scheduler stopped")

    async def aclose(self) -> None:
        """Stop and wait until the task has actually finished."""
        self.stop()
        task, self._task = self._task, None
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _refresh_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self._interval_s)
                logger.info("Auto-refreshing models config …")
                await self._engine.refresh()
            except asyncio.CancelledError:
                break
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Auto-refresh failed: %s", exc)


__all__ = ["AutoRefreshScheduler"]
