"""文本处理工具：词数统计、半进位取整与行切分。"""

from __future__ import annotations

import math


def word_count(text: object) -> int:
    if not text or not isinstance(text, str):
        return 0
    return len(text.split())


def safe_round(value: float, precision: int = 2) -> float:
    """按半进位规则取整，避免内置 round 的银行家舍入差异。"""
    factor = 10 ** precision
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def non_empty_lines(text: str) -> list[str]:
    """切分为去空白后的非空行。"""
    return [line.strip() for line in text.splitlines() if line.strip()]


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length]
