"""日志上下文：基于 contextvars 透传请求 ID 与缓存键前缀。"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from contextvars import ContextVar
from typing import Iterator

_UNSET = object()

_VARS: dict[str, ContextVar[str | None]] = {
    "request_id": ContextVar("refiner_request_id", default=None),
    "cache_key": ContextVar("refiner_cache_key", default=None),
}


def get_log_context() -> dict[str, str | None]:
    return {name: var.get() for name, var in _VARS.items()}


@contextmanager
def bind_log_context(*, request_id: object = _UNSET, cache_key: object = _UNSET) -> Iterator[None]:
    """在 with 范围内绑定日志字段，退出时恢复为进入前的值；未传入的字段保持不变。"""
    with ExitStack() as stack:
        for name, value in (("request_id", request_id), ("cache_key", cache_key)):
            if value is _UNSET:
                continue
            var = _VARS[name]
            token = var.set(value)  # type: ignore[arg-type]
            stack.callback(var.reset, token)
        yield
