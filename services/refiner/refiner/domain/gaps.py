"""缺口检测器：逐条规则检查规格并给出分级问题与当前评分。

规则相互独立，每条最多产出一个问题；输出顺序固定，便于展示与测试比对。
检测器无状态，每次调用都会重新评估整个规格。
"""

from __future__ import annotations

import logging

from refiner.domain.enums import OutputFormat, Severity
from refiner.domain.models import GapReport, Issue, Score, Specification
from refiner.domain.scoring.config import ScoringConfig, resolve_scoring_config
from refiner.domain.scoring.engine import analyze_vague_language, calculate_clarity, calculate_completeness
from refiner.domain.text import word_count

logger = logging.getLogger(__name__)


def _has_instructions(spec: Specification) -> bool:
    return any(item.strip() for item in spec.instructions)


def _check_format(spec: Specification) -> Issue | None:
    if spec.io.format is None:
        return Issue(path="/io/format", message="Output format is required (markdown, json, csv or text)", severity=Severity.error)
    return None


def _check_sections(spec: Specification) -> Issue | None:
    if spec.io.format == OutputFormat.markdown and not spec.io.contract.sections:
        return Issue(
            path="/io/contract/sections",
            message="Missing markdown sections for output contract",
            severity=Severity.warn,
        )
    return None


def _check_instructions_present(spec: Specification) -> Issue | None:
    if not _has_instructions(spec):
        return Issue(path="/instructions", message="At least one instruction is required", severity=Severity.error)
    return None


def _check_vague_language(spec: Specification) -> Issue | None:
    if analyze_vague_language(spec.joined_instructions()).has_vague:
        return Issue(
            path="/instructions",
            message="Vague language detected (optimize/better/quickly/etc.)",
            severity=Severity.warn,
        )
    return None


def _check_constraints(spec: Specification) -> Issue | None:
    if not spec.constraints:
        return Issue(
            path="/constraints",
            message="Consider adding constraints (word limit, style, tone)",
            severity=Severity.info,
        )
    return None


def _check_inputs(spec: Specification) -> Issue | None:
    if not spec.context.inputs:
        return Issue(
            path="/context/inputs",
            message="No inputs linked (file/url/text). Add at least one if applicable.",
            severity=Severity.info,
        )
    return None


GAP_RULES = (
    _check_format,
    _check_sections,
    _check_instructions_present,
    _check_vague_language,
    _check_constraints,
    _check_inputs,
)


def current_score(spec: Specification, domain: str | None = None, config: ScoringConfig | None = None) -> Score:
    """回显规格上的评分；缺失时从指令文本重新推导。"""
    if spec.metrics is not None:
        return Score(clarity=spec.metrics.clarity, completeness=spec.metrics.completeness)
    effective_domain = domain or (spec.context.domain.value if spec.context.domain else None)
    resolved = config or resolve_scoring_config(effective_domain)
    text = spec.joined_instructions()
    return Score(
        clarity=calculate_clarity(text, effective_domain, resolved),
        completeness=calculate_completeness(text, spec, effective_domain, resolved),
    )


def detect_gaps(spec: Specification, domain: str | None = None, config: ScoringConfig | None = None) -> GapReport:
    """按固定顺序执行全部规则，返回问题列表与评分对。"""
    try:
        issues = tuple(issue for issue in (rule(spec) for rule in GAP_RULES) if issue is not None)
        return GapReport(issues=issues, score=current_score(spec, domain, config))
    except Exception as exc:
        logger.exception(
            "gap detection failed",
            extra={"event": "gaps.detect.failed", "error_type": type(exc).__name__, "error": str(exc)},
        )
        resolved = config or resolve_scoring_config(domain)
        return GapReport(
            issues=(),
            score=Score(clarity=resolved.clarity.base_score, completeness=resolved.completeness.base_score),
        )


def review_specification(spec: Specification, config: ScoringConfig | None = None) -> tuple[Issue, ...]:
    """生成校验阶段的提示性告警（约束、标题、领域与指令篇幅）。"""
    resolved = config or resolve_scoring_config(spec.context.domain.value if spec.context.domain else None)
    warnings: list[Issue] = []
    if not spec.constraints:
        warnings.append(Issue(path="/constraints", message="No constraints specified", severity=Severity.warn))
    if not spec.title or len(spec.title) < resolved.completeness.title_min_length:
        warnings.append(Issue(path="/title", message="Title is missing or too short", severity=Severity.warn))
    if spec.context.domain is None:
        warnings.append(Issue(path="/context/domain", message="Domain not specified", severity=Severity.warn))
    if spec.instructions and word_count(spec.joined_instructions()) < resolved.completeness.depth_threshold_1:
        warnings.append(Issue(path="/instructions", message="Instructions may be too brief", severity=Severity.warn))
    return tuple(warnings)
