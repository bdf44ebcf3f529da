"""评分引擎：以（信号, 权重, 上限）表计算清晰度与完整度两项独立评分。

每个信号都是独立的纯函数，返回已按上限截断的增量（惩罚为负值）；
总分 = 基础分 + 各信号增量，最终截断到 [0, 1] 并按配置精度取整。
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from refiner.domain.models import Specification, VagueLanguageAnalysis
from refiner.domain.patterns import (
    CLARITY_INDICATORS,
    COMPLETENESS_INDICATORS,
    CONCRETE_VERBS,
    EXAMPLE_PHRASES,
    MEASUREMENT_PATTERNS,
    QUESTION_WORDS,
    STRUCTURE_PATTERNS,
    VAGUE_WORDS,
    domain_patterns,
    vague_suggestions,
)
from refiner.domain.scoring.config import ClarityConfig, CompletenessConfig, ScoringConfig, resolve_scoring_config
from refiner.domain.text import clamp, safe_round, word_count

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

ClaritySignal = Callable[[str, ClarityConfig, "str | None"], float]
CompletenessSignal = Callable[[str, Specification, CompletenessConfig], float]


def _distinct_hits(patterns: tuple[re.Pattern[str], ...], text: str) -> int:
    """统计命中的模式个数（同一模式多次出现只计一次）。"""
    return sum(1 for pattern in patterns if pattern.search(text))


def _total_hits(patterns: tuple[re.Pattern[str], ...], text: str) -> int:
    return sum(len(pattern.findall(text)) for pattern in patterns)


# --- 清晰度信号 ---

def vague_language_penalty(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    vague_count = _distinct_hits(VAGUE_WORDS, text)
    total_words = word_count(text)
    if cfg.proportional_scoring and total_words > 0:
        ratio = vague_count / total_words
        return -min(ratio * total_words * cfg.vague_word_penalty, cfg.max_vague_word_penalty)
    return -min(vague_count * cfg.vague_word_penalty, cfg.max_vague_word_penalty)


def clarity_indicator_bonus(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    count = _distinct_hits(CLARITY_INDICATORS, text)
    return min(count * cfg.clarity_indicator_bonus, cfg.max_clarity_indicator_bonus)


def measurement_bonus(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    count = _total_hits(MEASUREMENT_PATTERNS, text)
    return min(count * cfg.measurement_bonus, cfg.max_measurement_bonus)


def concrete_verb_bonus(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    count = _distinct_hits(CONCRETE_VERBS, text)
    return min(count * cfg.verb_bonus, cfg.max_verb_bonus)


def sentence_length_penalty(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    """平均句长超过阈值时扣分，仅统计长于最小长度的句子。"""
    sentences = [item for item in _SENTENCE_SPLIT_RE.split(text) if len(item.strip()) > cfg.min_sentence_length]
    if not sentences:
        return 0.0
    average = sum(len(item) for item in sentences) / len(sentences)
    penalty = 0.0
    if average > cfg.sentence_length_threshold_1:
        penalty -= cfg.long_sentence_penalty_1
    if average > cfg.sentence_length_threshold_2:
        penalty -= cfg.long_sentence_penalty_2
    return penalty


def structure_bonus(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    if any(pattern.search(text) for pattern in STRUCTURE_PATTERNS):
        return cfg.structure_bonus
    return 0.0


def question_bonus(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    count = len(QUESTION_WORDS.findall(text))
    if count == 0:
        return 0.0
    return min(count * cfg.question_bonus, cfg.max_question_bonus)


def domain_term_bonus(text: str, cfg: ClarityConfig, domain: str | None = None) -> float:
    count = _total_hits(domain_patterns(domain), text)
    if count == 0:
        return 0.0
    return min(count * cfg.domain_term_bonus, cfg.max_domain_term_bonus)


CLARITY_SIGNALS: tuple[tuple[str, ClaritySignal], ...] = (
    ("vague_language", vague_language_penalty),
    ("clarity_indicators", clarity_indicator_bonus),
    ("measurements", measurement_bonus),
    ("concrete_verbs", concrete_verb_bonus),
    ("sentence_length", sentence_length_penalty),
    ("structure", structure_bonus),
    ("questions", question_bonus),
    ("domain_terms", domain_term_bonus),
)


# --- 完整度信号 ---

def title_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    if spec.title and len(spec.title) >= cfg.title_min_length:
        return cfg.title_bonus
    return 0.0


def instructions_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    """指令存在加分，按词数阈值逐级追加深度分，过短再扣分。"""
    if not spec.instructions:
        return 0.0
    delta = cfg.instructions_bonus
    words = word_count(spec.joined_instructions())
    if words > cfg.depth_threshold_1:
        delta += cfg.depth_bonus_1
    if words > cfg.depth_threshold_2:
        delta += cfg.depth_bonus_2
    if words > cfg.depth_threshold_3:
        delta += cfg.depth_bonus_3
    if words < cfg.short_instruction_threshold:
        delta -= cfg.short_instruction_penalty
    return delta


def constraints_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    return cfg.constraints_bonus if spec.constraints else 0.0


def domain_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    return cfg.domain_bonus if spec.context.domain is not None else 0.0


def format_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    return cfg.format_bonus if spec.io.format is not None else 0.0


def sections_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    count = len(spec.io.contract.sections)
    if count == 0:
        return 0.0
    return min(count * cfg.sections_bonus, cfg.max_sections_bonus)


def completeness_indicator_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    count = _distinct_hits(COMPLETENESS_INDICATORS, text)
    return min(count * cfg.completeness_indicator_bonus, cfg.max_completeness_indicator_bonus)


def example_bonus(text: str, spec: Specification, cfg: CompletenessConfig) -> float:
    return cfg.example_bonus if EXAMPLE_PHRASES.search(text) else 0.0


COMPLETENESS_SIGNALS: tuple[tuple[str, CompletenessSignal], ...] = (
    ("title", title_bonus),
    ("instructions", instructions_bonus),
    ("constraints", constraints_bonus),
    ("domain", domain_bonus),
    ("format", format_bonus),
    ("sections", sections_bonus),
    ("indicators", completeness_indicator_bonus),
    ("examples", example_bonus),
)


def clarity_breakdown(text: str, domain: str | None = None, config: ScoringConfig | None = None) -> dict[str, float]:
    """返回各清晰度信号的增量，便于逐项测试与展示。"""
    cfg = (config or resolve_scoring_config(domain)).clarity
    return {name: signal(text, cfg, domain) for name, signal in CLARITY_SIGNALS}


def completeness_breakdown(
    text: str,
    spec: Specification,
    domain: str | None = None,
    config: ScoringConfig | None = None,
) -> dict[str, float]:
    """返回各完整度信号的增量。"""
    cfg = (config or resolve_scoring_config(domain)).completeness
    return {name: signal(text, spec, cfg) for name, signal in COMPLETENESS_SIGNALS}


def calculate_clarity(text: Any, domain: str | None = None, config: ScoringConfig | None = None) -> float:
    """计算清晰度评分；非文本或过短文本返回 0，异常时回退到基础分。"""
    resolved = config or resolve_scoring_config(domain)
    try:
        if not isinstance(text, str) or len(text) < resolved.validation.min_prompt_length:
            return 0.0
        total = resolved.clarity.base_score + sum(clarity_breakdown(text, domain, resolved).values())
        return safe_round(clamp(total), resolved.validation.rounding_precision)
    except Exception as exc:
        logger.exception(
            "clarity scoring failed",
            extra={"event": "scoring.clarity.failed", "error_type": type(exc).__name__, "error": str(exc)},
        )
        return resolved.clarity.base_score


def calculate_completeness(
    text: Any,
    spec: Any,
    domain: str | None = None,
    config: ScoringConfig | None = None,
) -> float:
    """计算完整度评分；输入形态不合法返回 0，异常时回退到基础分。"""
    resolved = config or resolve_scoring_config(domain)
    try:
        if not isinstance(text, str) or not isinstance(spec, Specification):
            return 0.0
        total = resolved.completeness.base_score + sum(completeness_breakdown(text, spec, domain, resolved).values())
        return safe_round(clamp(total), resolved.validation.rounding_precision)
    except Exception as exc:
        logger.exception(
            "completeness scoring failed",
            extra={"event": "scoring.completeness.failed", "error_type": type(exc).__name__, "error": str(exc)},
        )
        return resolved.completeness.base_score


def analyze_vague_language(text: Any) -> VagueLanguageAnalysis:
    """识别文本中的模糊用语并给出改写建议。"""
    if not isinstance(text, str):
        return VagueLanguageAnalysis(has_vague=False)
    terms: list[str] = []
    for pattern in VAGUE_WORDS:
        match = pattern.search(text)
        if match and match.group(0) not in terms:
            terms.append(match.group(0))
    return VagueLanguageAnalysis(
        has_vague=bool(terms),
        vague_terms=tuple(terms),
        suggestions=tuple(vague_suggestions(terms)),
    )
