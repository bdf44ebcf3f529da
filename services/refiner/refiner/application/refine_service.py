"""提示词精炼服务门面：校验输入、查询缓存、运行分析流水线并缓存渲染结果。"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any

from refiner.application.rendering import (
    render_input_error,
    render_internal_error,
    render_report,
    synthesize_improved_prompt,
)
from refiner.application.results import (
    InputError,
    InternalError,
    RefineOutcome,
    RefineReport,
    Summary,
    ValidationBlock,
)
from refiner.domain.drafter import draft_from_text
from refiner.domain.enums import DOMAIN_VALUES, Severity
from refiner.domain.gaps import detect_gaps, review_specification
from refiner.domain.improvements import generate_improvements
from refiner.domain.models import GapReport, ImprovementSet
from refiner.domain.scoring.config import ScoringConfigResolver
from refiner.domain.scoring.engine import analyze_vague_language
from refiner.domain.text import safe_round, word_count
from refiner.domain.validation import validate_domain, validate_flag, validate_prompt
from refiner.infra.cache.result_cache import CacheStats, ResultCache, build_cache_key
from refiner.infra.logging.context import bind_log_context
from refiner.infra.schema.validator import SpecSchemaValidator

logger = logging.getLogger(__name__)

READY_THRESHOLD = 0.6


def build_summary(gaps: GapReport, improvements: ImprovementSet | None, precision: int = 2) -> Summary:
    """汇总质量分与问题计数；无 error 且两项评分均高于阈值才视为可实施。"""
    errors = sum(1 for issue in gaps.issues if issue.severity == Severity.error)
    warnings = sum(1 for issue in gaps.issues if issue.severity == Severity.warn)
    return Summary(
        overall_quality=safe_round((gaps.score.clarity + gaps.score.completeness) / 2, precision),
        primary_issues=errors,
        warnings=warnings,
        suggestions=improvements.improvement_count if improvements else 0,
        ready_for_implementation=(
            errors == 0 and gaps.score.clarity > READY_THRESHOLD and gaps.score.completeness > READY_THRESHOLD
        ),
    )


class RefineService:
    """提示词精炼服务，串联起草、缺口检测、改进建议与结果缓存。"""

    def __init__(
        self,
        *,
        cache: ResultCache[RefineReport],
        scoring: ScoringConfigResolver,
        schema_validator: SpecSchemaValidator,
    ) -> None:
        self._cache = cache
        self._scoring = scoring
        self._schema_validator = schema_validator

    def refine(
        self,
        prompt: Any,
        domain: Any = None,
        include_validation: Any = True,
        include_improvements: Any = True,
    ) -> RefineOutcome:
        """执行一次完整分析；输入错误与内部异常均以结构化结果返回。"""
        input_error = self._validate_inputs(prompt, domain, include_validation, include_improvements)
        if input_error is not None:
            logger.warning(
                "refine input rejected",
                extra={"event": "refine.input.rejected", "payload_preview": input_error.to_dict()},
            )
            return RefineOutcome(text=render_input_error(input_error), error=input_error)

        cache_key = build_cache_key(
            prompt,
            domain,
            {"includeValidation": include_validation, "includeImprovements": include_improvements},
        )
        with bind_log_context(cache_key=cache_key[:16]):
            try:
                cached = self._cache.get(cache_key)
                if cached is not None:
                    logger.info("refine cache hit", extra={"event": "refine.cache.hit"})
                    return RefineOutcome(text=cached.text, report=cached, cached=True)

                started = time.perf_counter()
                report = self._run_pipeline(prompt, domain, include_validation, include_improvements)
                self._cache.set(cache_key, report)
                logger.info(
                    "refine pipeline completed",
                    extra={
                        "event": "refine.pipeline.succeeded",
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "payload_preview": report.summary.to_dict(),
                    },
                )
                return RefineOutcome(text=report.text, report=report)
            except Exception as exc:
                logger.exception(
                    "refine pipeline failed",
                    extra={"event": "refine.pipeline.failed", "error_type": type(exc).__name__, "error": str(exc)},
                )
                error = InternalError(message=str(exc) or "Unknown error occurred", error_type=type(exc).__name__)
                return RefineOutcome(text=render_internal_error(error), error=error)

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def cleanup_cache(self) -> int:
        removed = self._cache.cleanup()
        logger.info(
            "cache cleanup requested",
            extra={"event": "cache.cleanup.manual", "payload_preview": {"removed": removed}},
        )
        return removed

    def export_cache(self) -> dict[str, Any]:
        return self._cache.export()

    def _validate_inputs(
        self,
        prompt: Any,
        domain: Any,
        include_validation: Any,
        include_improvements: Any,
    ) -> InputError | None:
        bounds = self._scoring.for_domain(None).validation
        result = validate_prompt(prompt, bounds.min_prompt_length, bounds.max_prompt_length)
        if not result.valid:
            received = f"{type(prompt).__name__} ({len(prompt) if isinstance(prompt, str) else 'N/A'} characters)"
            return InputError(
                code=result.code or "INVALID_INPUT",
                message=result.error or "invalid prompt",
                expected=f"String between {bounds.min_prompt_length}-{bounds.max_prompt_length} characters",
                received=received,
                fix="Provide a valid prompt string within the specified length range.",
            )
        if domain is not None:
            result = validate_domain(domain)
            if not result.valid:
                return InputError(
                    code=result.code or "INVALID_INPUT",
                    message=result.error or "invalid domain",
                    expected=f"One of: {', '.join(DOMAIN_VALUES)}",
                    received=repr(domain),
                    fix="Choose a supported domain.",
                )
        for name, value in (("includeValidation", include_validation), ("includeImprovements", include_improvements)):
            result = validate_flag(value, name)
            if not result.valid:
                return InputError(
                    code=result.code or "INVALID_INPUT",
                    message=result.error or f"invalid {name}",
                    expected="boolean",
                    received=repr(value),
                    fix=f"Pass true or false for {name}.",
                )
        return None

    def _run_pipeline(
        self,
        prompt: str,
        domain: str | None,
        include_validation: bool,
        include_improvements: bool,
    ) -> RefineReport:
        config = self._scoring.for_domain(domain)
        spec = draft_from_text(prompt, domain, config)
        schema = self._schema_validator.check(spec.to_dict())
        gaps = detect_gaps(spec, domain, config)

        validation = None
        if include_validation:
            validation = ValidationBlock(
                valid=schema.valid,
                errors=schema.errors,
                warnings=review_specification(spec, config),
            )

        improvements = generate_improvements(spec, gaps.issues, domain, config) if include_improvements else None
        improved_prompt, notes = synthesize_improved_prompt(
            prompt,
            spec,
            improvements.patches if improvements else (),
            config.completeness.depth_threshold_1,
        )

        report = RefineReport(
            prompt_length=len(prompt),
            word_count=word_count(prompt),
            domain=domain,
            spec=spec,
            schema=schema,
            gaps=gaps,
            validation=validation,
            improvements=improvements,
            vague_language=analyze_vague_language(prompt),
            improved_prompt=improved_prompt,
            improvement_notes=notes,
            summary=build_summary(gaps, improvements, config.validation.rounding_precision),
        )
        return replace(report, text=render_report(report))
