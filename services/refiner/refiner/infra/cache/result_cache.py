"""结果缓存：带过期时间与 LRU 淘汰的有界内存缓存，单锁串行化全部操作。

- 过期判定：当前时间 - 创建时间 > 条目 TTL；在 get/has 时惰性淘汰，cleanup 时批量淘汰；
- 淘汰策略：容量满且写入新 key 时，先淘汰最久未被成功 get 的条目；
- 并发模型：一把 threading.Lock 保护整个结构，get 的最近使用更新与 set 的
  淘汰加写入均在同一临界区内完成。
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """缓存条目，仅由 ResultCache 内部持有。"""
    key: str
    value: T
    created_at: float
    ttl_seconds: float
    access_count: int
    last_accessed_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    """缓存统计快照。"""
    hits: int
    misses: int
    size: int
    max_size: int
    hit_rate: float
    memory_usage: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_cache_key(prompt: str, domain: str | None, options: dict[str, Any] | None = None) -> str:
    """基于 (prompt, domain, options) 的规范化 JSON 计算 SHA-256 摘要作为缓存键。"""
    payload = json.dumps(
        {"prompt": prompt, "domain": domain, "options": options or {}},
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResultCache(Generic[T]):
    """线程安全的 TTL + LRU 缓存，容量与默认 TTL 在构造时固定。"""

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        if default_ttl_seconds <= 0:
            raise ValueError(f"default_ttl_seconds must be positive, got {default_ttl_seconds}")
        self._max_size = max_size
        self._default_ttl = float(default_ttl_seconds)
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def default_ttl_seconds(self) -> float:
        return self._default_ttl

    def _expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.created_at > entry.ttl_seconds

    def get(self, key: str) -> T | None:
        """命中时移动到最新端并累计命中；缺失或过期时累计未命中并返回 None。"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            now = self._clock()
            if self._expired(entry, now):
                del self._entries[key]
                self._misses += 1
                return None
            entry.access_count += 1
            entry.last_accessed_at = now
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: T, ttl_seconds: float | None = None) -> None:
        """写入或替换条目；容量已满且为新 key 时先淘汰最久未使用条目。"""
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                ttl_seconds=ttl,
                access_count=0,
                last_accessed_at=now,
            )

    def has(self, key: str) -> bool:
        """存在性探测：过期条目顺带淘汰，不影响最近使用顺序与命中统计。"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """清空条目并重置命中/未命中计数。"""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def cleanup(self) -> int:
        """扫描并淘汰全部过期条目，返回淘汰数量。"""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                max_size=self._max_size,
                hit_rate=self._hits / total if total > 0 else 0.0,
                memory_usage=sum(self._estimate_entry_bytes(entry) for entry in self._entries.values()),
            )

    def keys(self) -> list[str]:
        """按最近使用顺序（旧 -> 新）返回全部键。"""
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def most_accessed(self, limit: int = 10) -> list[dict[str, Any]]:
        """按访问次数降序返回条目摘要。"""
        with self._lock:
            ranked = sorted(self._entries.values(), key=lambda entry: entry.access_count, reverse=True)
            return [
                {"key": entry.key, "access_count": entry.access_count, "value": entry.value}
                for entry in ranked[:limit]
            ]

    def update_ttl(self, key: str, ttl_seconds: float) -> bool:
        """更新条目 TTL，并以当前时间重新计时。"""
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.ttl_seconds = float(ttl_seconds)
            entry.created_at = self._clock()
            return True

    def export(self) -> dict[str, Any]:
        """导出监控快照：统计、键列表与访问最多的五个条目。"""
        return {
            "stats": self.stats().to_dict(),
            "keys": self.keys(),
            "most_accessed": [
                {"key": item["key"], "access_count": item["access_count"]} for item in self.most_accessed(5)
            ],
        }

    @staticmethod
    def _estimate_entry_bytes(entry: CacheEntry[Any]) -> int:
        # 粗略估算：按 JSON 文本长度的两倍计。
        serialized = json.dumps(
            {
                "key": entry.key,
                "value": entry.value,
                "created_at": entry.created_at,
                "ttl_seconds": entry.ttl_seconds,
                "access_count": entry.access_count,
                "last_accessed_at": entry.last_accessed_at,
            },
            ensure_ascii=False,
            default=str,
        )
        return len(serialized) * 2
