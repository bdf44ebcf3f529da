"""评分引擎测试：验证单项信号、分值边界、确定性与模糊用语惩罚。"""

from __future__ import annotations

from dataclasses import replace

import pytest

from refiner.domain.drafter import draft_from_text
from refiner.domain.scoring.config import DEFAULT_SCORING_CONFIG
from refiner.domain.scoring.engine import (
    analyze_vague_language,
    calculate_clarity,
    calculate_completeness,
    clarity_breakdown,
    clarity_indicator_bonus,
    domain_term_bonus,
    measurement_bonus,
    question_bonus,
    sentence_length_penalty,
    structure_bonus,
    vague_language_penalty,
)

CLARITY = DEFAULT_SCORING_CONFIG.clarity

PROMPT_CORPUS = [
    "create user authentication",
    "Write a very good and quite nice solution",
    "Summarize the attached report in 200 words, specifically the revenue section.",
    "How should we improve the onboarding flow? First list the current steps, then compare them.",
    "- parse input.csv\n- compute the median per column\n- output the result as JSON",
    "Explain exactly what the function must return for at least 3 edge cases, for example empty input.",
    "make it better and faster, really really quickly",
    "x" * 400,
]


def test_vague_terms_lower_clarity() -> None:
    """加入四个模糊用语后清晰度应严格低于去掉它们的同一文本。"""
    vague = calculate_clarity("Write a very good and quite nice solution")
    plain = calculate_clarity("Write a and solution")
    assert vague < plain
    assert vague == pytest.approx(0.32)
    assert plain == pytest.approx(0.52)


@pytest.mark.parametrize("prompt", PROMPT_CORPUS)
@pytest.mark.parametrize("domain", [None, "code", "docs", "data", "product", "research"])
def test_scores_stay_in_unit_interval_and_are_deterministic(prompt: str, domain: str | None) -> None:
    """任意提示词与领域组合的两项评分均在 [0, 1] 内，且重复计算结果一致。"""
    spec = draft_from_text(prompt, domain)
    clarity = calculate_clarity(prompt, domain)
    completeness = calculate_completeness(prompt, spec, domain)
    assert 0.0 <= clarity <= 1.0
    assert 0.0 <= completeness <= 1.0
    assert calculate_clarity(prompt, domain) == clarity
    assert calculate_completeness(prompt, spec, domain) == completeness


@pytest.mark.parametrize("prompt", PROMPT_CORPUS)
def test_clarity_moves_with_indicators_and_vague_terms(prompt: str) -> None:
    """追加明确性句子不降低清晰度，追加模糊用语不提高清晰度。"""
    base = calculate_clarity(prompt)
    assert calculate_clarity(prompt + " It must be exact.") >= base
    assert calculate_clarity(prompt + " very") <= base


def test_invalid_inputs_score_zero() -> None:
    """非文本或短于最小长度的文本得 0 分。"""
    assert calculate_clarity(None) == 0.0
    assert calculate_clarity(42) == 0.0
    assert calculate_clarity("ab") == 0.0
    assert calculate_completeness("create user authentication", {"intent": "general"}) == 0.0


def test_vague_penalty_is_capped() -> None:
    text = "better nice good clean simple easy fast smooth"
    assert vague_language_penalty(text, CLARITY) == pytest.approx(-CLARITY.max_vague_word_penalty)


def test_vague_penalty_counts_each_term_once() -> None:
    """同一模糊词重复出现只计一次。"""
    assert vague_language_penalty("good good good", CLARITY) == pytest.approx(-0.05)


def test_positive_signals() -> None:
    assert clarity_indicator_bonus("you must and shall, it is required", CLARITY) == pytest.approx(0.09)
    assert measurement_bonus("return at least 5 items", CLARITY) == pytest.approx(0.04)
    assert structure_bonus("- first item", CLARITY) == pytest.approx(CLARITY.structure_bonus)
    assert structure_bonus("plain sentence", CLARITY) == 0.0
    assert question_bonus("how and why", CLARITY) == pytest.approx(0.04)
    assert question_bonus("what how why when where", CLARITY) == pytest.approx(CLARITY.max_question_bonus)


def test_domain_terms_only_count_with_domain() -> None:
    text = "Write a Python function"
    assert domain_term_bonus(text, CLARITY, None) == 0.0
    assert domain_term_bonus(text, CLARITY, "code") == pytest.approx(0.02)


def test_long_sentences_are_penalized() -> None:
    """平均句长超过两级阈值时分别扣分。"""
    assert sentence_length_penalty("word " * 40, CLARITY) == pytest.approx(-0.05)
    assert sentence_length_penalty("word " * 60, CLARITY) == pytest.approx(-0.15)
    assert sentence_length_penalty("Short one. Another short one.", CLARITY) == 0.0


def test_breakdown_sums_to_score() -> None:
    text = "Summarize the attached report in 200 words, specifically the revenue section."
    total = CLARITY.base_score + sum(clarity_breakdown(text).values())
    assert calculate_clarity(text) == pytest.approx(round(total, 2))


def test_completeness_for_minimal_prompt() -> None:
    """标题、指令与格式加分，指令过短扣分。"""
    spec = draft_from_text("create user authentication")
    assert spec.metrics is not None
    assert spec.metrics.clarity == pytest.approx(0.52)
    assert spec.metrics.completeness == pytest.approx(0.59)


def test_completeness_grows_with_constraints() -> None:
    spec = draft_from_text("create user authentication")
    text = spec.joined_instructions()
    baseline = calculate_completeness(text, spec)
    enriched = calculate_completeness(text, replace(spec, constraints=("max 100 words",)))
    assert enriched == pytest.approx(baseline + 0.12)


def test_analyze_vague_language_returns_unique_terms_and_suggestions() -> None:
    analysis = analyze_vague_language("Make it better, better and fast")
    assert analysis.has_vague is True
    assert analysis.vague_terms == ("better", "fast")
    assert "Specify measurable improvements" in analysis.suggestions
    assert "Specify performance requirements" in analysis.suggestions
    assert len(analysis.suggestions) == len(set(analysis.suggestions))


def test_analyze_vague_language_non_text() -> None:
    assert analyze_vague_language(None).has_vague is False
    assert analyze_vague_language("Return 3 rows").vague_terms == ()
