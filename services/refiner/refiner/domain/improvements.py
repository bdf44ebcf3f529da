"""改进建议生成器：针对可修复的缺口给出结构化补丁（仅建议，不应用）。"""

from __future__ import annotations

import logging

from refiner.domain.enums import PatchOp
from refiner.domain.models import ImprovementSet, Issue, Patch, Specification
from refiner.domain.scoring.config import ScoringConfig, resolve_scoring_config
from refiner.domain.text import word_count

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS = ("Highlights", "Details", "NextSteps")
PLACEHOLDER_TITLE = "Enhanced Structural Thinking Specification"
DEFAULT_PATCH_DOMAIN = "general"
QUALITY_DIRECTIVES = (
    "Provide specific examples where applicable",
    "Include measurable criteria for success",
)


def generate_improvements(
    spec: Specification,
    issues: tuple[Issue, ...] | list[Issue],
    domain: str | None = None,
    config: ScoringConfig | None = None,
) -> ImprovementSet:
    """按固定规则顺序生成补丁；各补丁路径互不重叠，可按任意顺序应用。"""
    resolved = config or resolve_scoring_config(domain)
    try:
        return ImprovementSet(patches=tuple(_build_patches(spec, issues, domain, resolved)))
    except Exception as exc:
        logger.exception(
            "improvement generation failed",
            extra={"event": "improvements.failed", "error_type": type(exc).__name__, "error": str(exc)},
        )
        return ImprovementSet(patches=())


def _build_patches(
    spec: Specification,
    issues: tuple[Issue, ...] | list[Issue],
    domain: str | None,
    resolved: ScoringConfig,
) -> list[Patch]:
    patches: list[Patch] = []

    if any(issue.path == "/io/contract/sections" for issue in issues):
        patches.append(Patch(op=PatchOp.add, path="/io/contract", value={"sections": list(DEFAULT_SECTIONS)}))

    if not spec.title or len(spec.title) < resolved.completeness.title_min_length:
        patches.append(
            Patch(op=PatchOp.replace if spec.title else PatchOp.add, path="/title", value=PLACEHOLDER_TITLE)
        )

    if spec.context.domain is None:
        patches.append(Patch(op=PatchOp.add, path="/context/domain", value=domain or DEFAULT_PATCH_DOMAIN))

    # 阈值与完整度评分的第一级深度阈值保持一致；保留原有指令，仅追加。
    if spec.instructions and word_count(spec.joined_instructions()) < resolved.completeness.depth_threshold_1:
        patches.append(
            Patch(op=PatchOp.replace, path="/instructions", value=[*spec.instructions, *QUALITY_DIRECTIVES])
        )

    return patches
