"""日志测试：验证 JSON 行输出、上下文注入、脱敏与 DEBUG 路由。"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from refiner.config import Settings
from refiner.infra.logging.context import bind_log_context, get_log_context
from refiner.infra.logging.setup import (
    DebugRoutingFilter,
    configure_logging,
    redact_text,
    render_payload_preview,
    shutdown_logging,
)


def test_configure_logging_writes_structured_lines(tmp_path: Path) -> None:
    settings = Settings(log_dir=tmp_path, log_level="INFO")
    log_file = configure_logging(settings, process_role="test")
    try:
        with bind_log_context(request_id="req-1", cache_key="abc123"):
            logging.getLogger("refiner.tests").info(
                "login with token=s3cr3t",
                extra={"event": "test.event", "duration_ms": "12.5", "payload_preview": {"removed": 2}},
            )
        logging.getLogger("refiner.tests").debug("hidden", extra={"event": "test.debug"})
    finally:
        shutdown_logging()

    assert log_file == tmp_path / "test" / "refiner.jsonl"
    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    (entry,) = [item for item in entries if item["event"] == "test.event"]
    assert entry["service"] == "structural-thinking-refiner"
    assert entry["process_role"] == "test"
    assert entry["request_id"] == "req-1"
    assert entry["cache_key"] == "abc123"
    assert entry["duration_ms"] == 12.5
    assert entry["message"] == "login with token=***"
    assert entry["payload_preview"] == '{"removed": 2}'
    assert all(item["event"] != "test.debug" for item in entries)


def test_bind_log_context_restores_previous_values() -> None:
    with bind_log_context(request_id="outer"):
        with bind_log_context(request_id="inner", cache_key="k"):
            assert get_log_context() == {"request_id": "inner", "cache_key": "k"}
        assert get_log_context() == {"request_id": "outer", "cache_key": None}
    assert get_log_context()["request_id"] is None


def test_redaction_modes() -> None:
    text = "Authorization: Bearer abc.def password=hunter2"
    assert redact_text(text, "off") == text
    assert redact_text(text, "standard") == "Authorization: Bearer *** password=***"
    assert redact_text(None, "standard") is None


def test_payload_preview_is_truncated() -> None:
    preview = render_payload_preview("x" * 50, max_chars=10, redaction_mode="standard")
    assert preview == "x" * 10 + "...(truncated)"


def test_debug_routing_filter() -> None:
    routing = DebugRoutingFilter(min_level=logging.INFO, debug_modules={"refiner.domain"})

    def record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert routing.filter(record("refiner.api", logging.WARNING)) is True
    assert routing.filter(record("refiner.domain.gaps", logging.DEBUG)) is True
    assert routing.filter(record("refiner.api", logging.DEBUG)) is False
