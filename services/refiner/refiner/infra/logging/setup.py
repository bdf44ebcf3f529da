"""日志初始化：JSON 行输出、队列异步落盘、凭据脱敏与按模块放行 DEBUG。

调用方只需 configure_logging()/shutdown_logging()；业务代码通过
logging.getLogger(__name__) 输出，结构化字段放在 extra 中：
event / op / duration_ms / status_code / error_type / error / payload_preview。
"""

from __future__ import annotations

import json
import logging
import logging.config
import re
import sys
from contextlib import suppress
from datetime import datetime, timezone
from logging.handlers import QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue
from typing import Any

from refiner.config import Settings
from refiner.infra.logging.context import get_log_context

SERVICE_NAME = "structural-thinking-refiner"
LOG_FILE_NAME = "refiner.jsonl"

_SECRET_KEYS = ("x-api-key", "api_key", "password", "token", "secret")
_BEARER_RE = re.compile(r"(?i)(authorization\s*[:=]\s*bearer\s+)[^\s,;]+")
_KEY_VALUE_RE = re.compile(r"(?i)((?:%s)\s*[:=]\s*)[^\s,;]+" % "|".join(re.escape(key) for key in _SECRET_KEYS))
# strict 模式额外覆盖 JSON 形式的 "key": "value"。
_QUOTED_RE = re.compile(
    r'(?i)("(?:authorization|%s)"\s*:\s*)"[^"]*"' % "|".join(re.escape(key) for key in _SECRET_KEYS)
)

_CONTEXT_FIELDS = ("request_id", "cache_key")
_NUMERIC_FIELDS = ("duration_ms", "status_code")
_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "watchfiles")


def redact_text(value: str | None, mode: str) -> str | None:
    """按模式脱敏文本（off / standard / strict），提示词中夹带的凭据不落盘。"""
    if value is None:
        return None
    text = str(value)
    mode = mode.lower()
    if mode == "off":
        return text
    text = _BEARER_RE.sub(r"\1***", text)
    text = _KEY_VALUE_RE.sub(r"\1***", text)
    if mode == "strict":
        text = _QUOTED_RE.sub(r'\1"***"', text)
    return text


def render_payload_preview(payload: Any, *, max_chars: int, redaction_mode: str) -> str | None:
    if payload is None:
        return None
    serialized = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str)
    redacted = redact_text(serialized, redaction_mode) or ""
    return redacted if len(redacted) <= max_chars else f"{redacted[:max_chars]}...(truncated)"


class DebugRoutingFilter(logging.Filter):
    """低于 min_level 的记录默认丢弃；debug_modules 及其子模块的 DEBUG 记录放行。"""

    def __init__(self, *, min_level: int, debug_modules: set[str]) -> None:
        super().__init__()
        self._min_level = min_level
        self._prefixes = tuple(f"{item}." for item in debug_modules)
        self._modules = frozenset(debug_modules)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= self._min_level:
            return True
        if record.levelno != logging.DEBUG:
            return False
        return record.name in self._modules or record.name.startswith(self._prefixes)


class ContextInjectionFilter(logging.Filter):
    """入队前把 contextvars 中的请求标识写到 record 上，监听线程中读不到 contextvars。"""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_log_context().items():
            if value is not None and getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


def _as_number(value: Any) -> int | float | None:
    if value is None or isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class StructuredJsonFormatter(logging.Formatter):
    """每条记录输出一行 JSON，字段集合固定，缺失字段为 null。"""

    def __init__(self, *, service: str, process_role: str, redaction_mode: str, payload_preview_chars: int) -> None:
        super().__init__()
        self._static = {"service": service, "process_role": process_role}
        self._redaction_mode = redaction_mode
        self._preview_chars = payload_preview_chars

    def _redact(self, value: Any) -> str | None:
        return None if value is None else redact_text(str(value), self._redaction_mode)

    def format(self, record: logging.LogRecord) -> str:
        error = getattr(record, "error", None)
        if error is None and record.exc_info:
            error = self.formatException(record.exc_info)

        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            **self._static,
            "module": record.name,
            "event": getattr(record, "event", None),
        }
        context = get_log_context()
        for key in _CONTEXT_FIELDS:
            entry[key] = getattr(record, key, None) or context.get(key)
        entry["op"] = getattr(record, "op", None)
        for key in _NUMERIC_FIELDS:
            entry[key] = _as_number(getattr(record, key, None))
        entry["message"] = self._redact(record.getMessage())
        entry["error_type"] = getattr(record, "error_type", None)
        entry["error"] = self._redact(error)
        entry["payload_preview"] = render_payload_preview(
            getattr(record, "payload_preview", None),
            max_chars=self._preview_chars,
            redaction_mode=self._redaction_mode,
        )
        return json.dumps(entry, ensure_ascii=False)


class _LoggingRuntime:
    """持有当前进程的队列监听器，重复初始化时先关闭旧监听器。"""

    def __init__(self) -> None:
        self.listener: QueueListener | None = None

    def start(self, queue: SimpleQueue[logging.LogRecord], *handlers: logging.Handler) -> None:
        self.stop()
        self.listener = QueueListener(queue, *handlers, respect_handler_level=True)
        self.listener.start()

    def stop(self) -> None:
        listener, self.listener = self.listener, None
        if listener is None:
            return
        listener.stop()
        for handler in listener.handlers:
            with suppress(OSError):
                handler.close()


_runtime = _LoggingRuntime()


def _level_of(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def _log_file_for(settings: Settings, process_role: str) -> Path:
    root = settings.log_dir if settings.log_dir.is_absolute() else (Path.cwd() / settings.log_dir).resolve()
    role_dir = root / process_role
    role_dir.mkdir(parents=True, exist_ok=True)
    return role_dir / LOG_FILE_NAME


def configure_logging(settings: Settings, *, process_role: str) -> Path:
    """初始化全局日志：root -> QueueHandler -> 监听线程 -> 滚动 JSONL 文件 + stderr(ERROR)。

    返回本进程角色对应的日志文件路径。
    """
    _runtime.stop()
    log_file = _log_file_for(settings, process_role)
    queue: SimpleQueue[logging.LogRecord] = SimpleQueue()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "context": {"()": ContextInjectionFilter},
                "routing": {
                    "()": DebugRoutingFilter,
                    "min_level": _level_of(settings.log_level),
                    "debug_modules": set(settings.log_debug_modules_list()),
                },
            },
            "handlers": {
                "queue": {
                    "class": "logging.handlers.QueueHandler",
                    "queue": queue,
                    "filters": ["context", "routing"],
                }
            },
            "root": {"level": "DEBUG", "handlers": ["queue"]},
        }
    )

    formatter = StructuredJsonFormatter(
        service=SERVICE_NAME,
        process_role=process_role,
        redaction_mode=settings.log_redaction_mode,
        payload_preview_chars=settings.log_payload_preview_chars,
    )
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)
    _runtime.start(queue, file_handler, stderr_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_file


def shutdown_logging() -> None:
    """停止监听线程（会先排空队列）并关闭文件句柄。"""
    _runtime.stop()
