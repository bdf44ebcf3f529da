"""缓存维护任务测试：验证单次清理与异步周期任务的启停。"""

from __future__ import annotations

import asyncio
import threading

import pytest

from refiner.application.maintenance import CacheSweeper
from refiner.infra.cache.result_cache import ResultCache


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_sweep_once_removes_expired_entries() -> None:
    clock = _FakeClock()
    cache: ResultCache[str] = ResultCache(max_size=10, default_ttl_seconds=5.0, clock=clock)
    cache.set("a", "alpha")
    cache.set("b", "beta", ttl_seconds=60.0)
    clock.now = 10.0
    assert CacheSweeper(cache, interval_seconds=1.0).sweep_once() == 1
    assert cache.keys() == ["b"]


def test_periodic_sweep_runs_until_stopped() -> None:
    """周期任务按间隔清理，stop 后任务结束。"""
    clock = _FakeClock()
    cache: ResultCache[str] = ResultCache(max_size=10, default_ttl_seconds=5.0, clock=clock)
    sweeper = CacheSweeper(cache, interval_seconds=0.01)

    async def scenario() -> None:
        await sweeper.start()
        assert sweeper.running is True
        cache.set("a", "alpha")
        clock.now = 10.0
        for _ in range(100):
            if len(cache) == 0:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()

    asyncio.run(scenario())
    assert len(cache) == 0
    assert sweeper.running is False


def test_stop_without_start_is_noop() -> None:
    sweeper = CacheSweeper(ResultCache(max_size=1, default_ttl_seconds=1.0), interval_seconds=1.0)
    asyncio.run(sweeper.stop())
    assert sweeper.running is False


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        CacheSweeper(ResultCache(max_size=1, default_ttl_seconds=1.0), interval_seconds=0)


def test_periodic_sweep_runs_off_the_event_loop_thread() -> None:
    """周期清理在工作线程中执行，持锁期间不阻塞事件循环。"""
    threads: list[int] = []

    class _RecordingCache(ResultCache[str]):
        def cleanup(self) -> int:
            threads.append(threading.get_ident())
            return super().cleanup()

    sweeper = CacheSweeper(_RecordingCache(max_size=1, default_ttl_seconds=1.0), interval_seconds=0.01)

    async def scenario() -> int:
        await sweeper.start()
        for _ in range(100):
            if threads:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()
        return threading.get_ident()

    loop_thread = asyncio.run(scenario())
    assert threads
    assert loop_thread not in threads
