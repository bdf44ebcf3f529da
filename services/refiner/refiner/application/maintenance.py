"""缓存维护任务：在 API 进程内按固定间隔清理过期条目。"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from refiner.infra.cache.result_cache import ResultCache

logger = logging.getLogger(__name__)


class CacheSweeper:
    """周期性调用 cache.cleanup()，随应用生命周期启停。"""

    def __init__(self, cache: ResultCache[Any], interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cache = cache
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> int:
        removed = self._cache.cleanup()
        logger.info(
            "cache sweep finished",
            extra={
                "event": "cache.cleanup.swept",
                "payload_preview": {"removed": removed, "size": len(self._cache)},
            },
        )
        return removed

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-sweeper")
        logger.info(
            "cache sweeper started",
            extra={"event": "cache.sweeper.started", "payload_preview": {"interval_seconds": self._interval_seconds}},
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("cache sweeper stopped", extra={"event": "cache.sweeper.stopped"})

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            try:
                await asyncio.to_thread(self.sweep_once)
            except Exception as exc:
                # 单次清理失败不终止循环，下一轮继续。
                logger.exception(
                    "cache sweep failed",
                    extra={"event": "cache.cleanup.failed", "error_type": type(exc).__name__, "error": str(exc)},
                )
