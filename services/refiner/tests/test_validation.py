"""输入校验测试：验证类型、长度、领域与开关参数的错误码和文本清洗。"""

from __future__ import annotations

import pytest

from refiner.domain.validation import (
    CODE_INVALID_DOMAIN,
    CODE_INVALID_TYPE,
    CODE_TOO_LONG,
    CODE_TOO_SHORT,
    sanitize_text,
    validate_domain,
    validate_flag,
    validate_prompt,
)


@pytest.mark.parametrize(
    ("value", "code"),
    [
        ("", CODE_TOO_SHORT),
        ("ab", CODE_TOO_SHORT),
        ("x" * 10001, CODE_TOO_LONG),
        (None, CODE_INVALID_TYPE),
        (123, CODE_INVALID_TYPE),
        (["create"], CODE_INVALID_TYPE),
    ],
)
def test_validate_prompt_rejects(value: object, code: str) -> None:
    result = validate_prompt(value, 3, 10000)
    assert result.valid is False
    assert result.code == code
    assert result.error


@pytest.mark.parametrize("value", ["abc", "x" * 10000])
def test_validate_prompt_accepts_bounds(value: str) -> None:
    assert validate_prompt(value, 3, 10000).valid is True


def test_validate_prompt_reports_lengths() -> None:
    assert validate_prompt("", 3, 10000).error == "String too short: 0 chars (min: 3)"
    assert validate_prompt(None, 3, 10000).error == "Expected string but received null"


@pytest.mark.parametrize("domain", ["code", "docs", "data", "product", "research"])
def test_validate_domain_accepts_known_values(domain: str) -> None:
    assert validate_domain(domain).valid is True


def test_validate_domain_rejects_unknown_values() -> None:
    result = validate_domain("finance")
    assert result.code == CODE_INVALID_DOMAIN
    assert "finance" in (result.error or "")
    assert validate_domain(7).code == CODE_INVALID_TYPE


def test_validate_flag_requires_bool() -> None:
    assert validate_flag(True, "includeValidation").valid is True
    assert validate_flag("yes", "includeValidation").code == CODE_INVALID_TYPE
    assert validate_flag(1, "includeImprovements").code == CODE_INVALID_TYPE


def test_sanitize_text_strips_markup_and_handlers() -> None:
    cleaned = sanitize_text("<script>javascript:alert(1)</script> onclick=x ")
    assert cleaned == "scriptalert(1)/script x"
