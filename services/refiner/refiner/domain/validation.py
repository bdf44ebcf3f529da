"""输入校验工具：在流水线运行前检查提示词、领域与开关参数的形态。

校验失败以值的形式返回（含机器可读 code 与人类可读说明），不抛异常。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from refiner.domain.enums import DOMAIN_VALUES

CODE_INVALID_TYPE = "INVALID_TYPE"
CODE_TOO_SHORT = "TOO_SHORT"
CODE_TOO_LONG = "TOO_LONG"
CODE_INVALID_DOMAIN = "INVALID_DOMAIN"

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """校验结果，valid 为 False 时附带错误说明与错误码。"""
    valid: bool
    error: str | None = None
    code: str | None = None


_OK = ValidationResult(valid=True)


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def validate_prompt(value: Any, min_length: int, max_length: int) -> ValidationResult:
    """校验提示词为字符串且长度位于 [min_length, max_length]。"""
    if not isinstance(value, str):
        return ValidationResult(valid=False, error=f"Expected string but received {_type_name(value)}", code=CODE_INVALID_TYPE)
    if len(value) < min_length:
        return ValidationResult(
            valid=False,
            error=f"String too short: {len(value)} chars (min: {min_length})",
            code=CODE_TOO_SHORT,
        )
    if len(value) > max_length:
        return ValidationResult(
            valid=False,
            error=f"String too long: {len(value)} chars (max: {max_length})",
            code=CODE_TOO_LONG,
        )
    return _OK


def validate_domain(value: Any) -> ValidationResult:
    """校验领域取值位于支持列表内。"""
    if not isinstance(value, str):
        return ValidationResult(valid=False, error=f"Expected string but received {_type_name(value)}", code=CODE_INVALID_TYPE)
    if value not in DOMAIN_VALUES:
        return ValidationResult(
            valid=False,
            error=f"Domain '{value}' is not supported. Valid options: {', '.join(DOMAIN_VALUES)}",
            code=CODE_INVALID_DOMAIN,
        )
    return _OK


def validate_flag(value: Any, name: str) -> ValidationResult:
    if not isinstance(value, bool):
        return ValidationResult(
            valid=False,
            error=f"Expected boolean for {name} but received {_type_name(value)}",
            code=CODE_INVALID_TYPE,
        )
    return _OK


def sanitize_text(text: str) -> str:
    """移除尖括号、javascript: 协议与内联事件处理器，用于回显用户文本。"""
    cleaned = _ANGLE_BRACKETS_RE.sub("", text)
    cleaned = _JS_PROTOCOL_RE.sub("", cleaned)
    cleaned = _EVENT_HANDLER_RE.sub("", cleaned)
    return cleaned.strip()
