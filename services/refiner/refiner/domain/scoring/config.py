"""评分参数配置：默认参数、领域覆盖与环境覆盖的纯函数合并。

参数来源优先级（高 -> 低）：
1) 启动时读取的环境覆盖（ScoringOverrides）
2) 领域覆盖（DOMAIN_OVERRIDES，按分组浅合并）
3) 默认参数（DEFAULT_SCORING_CONFIG）

所有配置对象均为不可变值，合并始终生成新对象，不修改共享默认值。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any


@dataclass(frozen=True, slots=True)
class ClarityConfig:
    """清晰度评分参数。"""
    base_score: float = 0.5
    proportional_scoring: bool = True
    vague_word_penalty: float = 0.05
    max_vague_word_penalty: float = 0.25
    clarity_indicator_bonus: float = 0.03
    max_clarity_indicator_bonus: float = 0.15
    measurement_bonus: float = 0.02
    max_measurement_bonus: float = 0.1
    verb_bonus: float = 0.02
    max_verb_bonus: float = 0.1
    min_sentence_length: int = 5
    sentence_length_threshold_1: int = 150
    sentence_length_threshold_2: int = 250
    long_sentence_penalty_1: float = 0.05
    long_sentence_penalty_2: float = 0.1
    structure_bonus: float = 0.05
    question_bonus: float = 0.02
    max_question_bonus: float = 0.08
    domain_term_bonus: float = 0.01
    max_domain_term_bonus: float = 0.05


@dataclass(frozen=True, slots=True)
class CompletenessConfig:
    """完整度评分参数。"""
    base_score: float = 0.35
    title_bonus: float = 0.08
    title_min_length: int = 5
    instructions_bonus: float = 0.18
    constraints_bonus: float = 0.12
    domain_bonus: float = 0.08
    format_bonus: float = 0.08
    sections_bonus: float = 0.04
    max_sections_bonus: float = 0.16
    completeness_indicator_bonus: float = 0.025
    max_completeness_indicator_bonus: float = 0.1
    example_bonus: float = 0.08
    depth_bonus_1: float = 0.04
    depth_bonus_2: float = 0.04
    depth_bonus_3: float = 0.04
    depth_threshold_1: int = 50
    depth_threshold_2: int = 100
    depth_threshold_3: int = 200
    short_instruction_penalty: float = 0.1
    short_instruction_threshold: int = 50


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    """输入长度边界与取整精度。"""
    min_prompt_length: int = 3
    max_prompt_length: int = 10000
    rounding_precision: int = 2


@dataclass(frozen=True, slots=True)
class ScoringConfig:
    """评分配置聚合对象。"""
    clarity: ClarityConfig = ClarityConfig()
    completeness: CompletenessConfig = CompletenessConfig()
    validation: ValidationConfig = ValidationConfig()


@dataclass(frozen=True, slots=True)
class ScoringOverrides:
    """环境来源的覆盖项，None 表示沿用领域/默认值。"""
    clarity_base_score: float | None = None
    completeness_base_score: float | None = None
    max_prompt_length: int | None = None

    def is_empty(self) -> bool:
        return self.clarity_base_score is None and self.completeness_base_score is None and self.max_prompt_length is None


DEFAULT_SCORING_CONFIG = ScoringConfig()

DOMAIN_OVERRIDES: dict[str, dict[str, dict[str, Any]]] = {
    "code": {
        # 技术类提示更看重动词、约束和代码示例。
        "clarity": {"verb_bonus": 0.03, "max_verb_bonus": 0.15},
        "completeness": {"constraints_bonus": 0.15, "example_bonus": 0.1},
    },
    "docs": {
        "clarity": {"structure_bonus": 0.08, "clarity_indicator_bonus": 0.04},
        "completeness": {"sections_bonus": 0.06, "max_sections_bonus": 0.2},
    },
    "product": {
        "completeness": {"example_bonus": 0.12, "depth_bonus_1": 0.06, "depth_bonus_2": 0.06, "depth_bonus_3": 0.06},
    },
    "research": {
        "clarity": {"measurement_bonus": 0.04, "max_measurement_bonus": 0.15},
        "completeness": {"depth_threshold_1": 75, "depth_threshold_2": 150, "depth_threshold_3": 300},
    },
}


def _apply_overrides(config: ScoringConfig, overrides: ScoringOverrides) -> ScoringConfig:
    clarity = config.clarity
    completeness = config.completeness
    validation = config.validation
    if overrides.clarity_base_score is not None:
        clarity = replace(clarity, base_score=overrides.clarity_base_score)
    if overrides.completeness_base_score is not None:
        completeness = replace(completeness, base_score=overrides.completeness_base_score)
    if overrides.max_prompt_length is not None:
        validation = replace(validation, max_prompt_length=overrides.max_prompt_length)
    return ScoringConfig(clarity=clarity, completeness=completeness, validation=validation)


@lru_cache(maxsize=64)
def resolve_scoring_config(domain: str | None = None, overrides: ScoringOverrides | None = None) -> ScoringConfig:
    """按领域浅合并默认参数，再叠加环境覆盖，返回新的不可变配置。"""
    config = DEFAULT_SCORING_CONFIG
    domain_config = DOMAIN_OVERRIDES.get(domain) if domain else None
    if domain_config:
        config = ScoringConfig(
            clarity=replace(config.clarity, **domain_config.get("clarity", {})),
            completeness=replace(config.completeness, **domain_config.get("completeness", {})),
            validation=replace(config.validation, **domain_config.get("validation", {})),
        )
    if overrides is not None and not overrides.is_empty():
        config = _apply_overrides(config, overrides)
    return config


class ScoringConfigResolver:
    """绑定一组启动期覆盖项的配置解析器，供流水线按领域取用。"""

    def __init__(self, overrides: ScoringOverrides | None = None) -> None:
        self._overrides = overrides or ScoringOverrides()

    @property
    def overrides(self) -> ScoringOverrides:
        return self._overrides

    def for_domain(self, domain: str | None) -> ScoringConfig:
        return resolve_scoring_config(domain, self._overrides)
