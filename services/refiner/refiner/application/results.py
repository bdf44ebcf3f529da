"""流水线结果值对象：分析报告、摘要、输入错误与内部错误。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from refiner.domain.models import GapReport, ImprovementSet, Issue, Specification, VagueLanguageAnalysis
from refiner.domain.patterns import PATTERN_LIBRARY_VERSION
from refiner.infra.schema.validator import SchemaCheck


@dataclass(frozen=True, slots=True)
class InputError:
    """输入形态错误：说明失败内容、原因与修复方式。"""
    code: str
    message: str
    expected: str
    received: str
    fix: str

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "error": self.message,
            "expected": self.expected,
            "received": self.received,
            "fix": self.fix,
        }


@dataclass(frozen=True, slots=True)
class InternalError:
    """流水线内部异常的结构化说明。"""
    message: str
    error_type: str
    code: str = "INTERNAL_ERROR"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "error": self.message, "error_type": self.error_type}


@dataclass(frozen=True, slots=True)
class Summary:
    """分析摘要：综合质量、问题计数与是否可直接实施。"""
    overall_quality: float
    primary_issues: int
    warnings: int
    suggestions: int
    ready_for_implementation: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallQuality": self.overall_quality,
            "primaryIssues": self.primary_issues,
            "warnings": self.warnings,
            "suggestions": self.suggestions,
            "readyForImplementation": self.ready_for_implementation,
        }


@dataclass(frozen=True, slots=True)
class ValidationBlock:
    """结构校验结论与提示性告警。"""
    valid: bool
    errors: tuple[str, ...]
    warnings: tuple[Issue, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": [{"path": item.path, "message": item.message} for item in self.warnings],
        }


@dataclass(frozen=True, slots=True)
class RefineReport:
    """一次完整分析的结果，text 为渲染后的 markdown。"""
    prompt_length: int
    word_count: int
    domain: str | None
    spec: Specification
    schema: SchemaCheck
    gaps: GapReport
    validation: ValidationBlock | None
    improvements: ImprovementSet | None
    vague_language: VagueLanguageAnalysis
    improved_prompt: str
    improvement_notes: tuple[str, ...]
    summary: Summary
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "transformation": {
                "spec": self.spec.to_dict(),
                "schemaValid": self.schema.valid,
                "schemaErrors": list(self.schema.errors),
                "processingInfo": {
                    "promptLength": self.prompt_length,
                    "wordCount": self.word_count,
                    "domain": self.domain,
                    "patternLibraryVersion": PATTERN_LIBRARY_VERSION,
                },
            },
            "gapDetection": self.gaps.to_dict(),
            "vagueLanguage": {
                "hasVague": self.vague_language.has_vague,
                "vagueTerms": list(self.vague_language.vague_terms),
                "suggestions": list(self.vague_language.suggestions),
            },
            "improvedPrompt": self.improved_prompt,
            "improvementNotes": list(self.improvement_notes),
            "summary": self.summary.to_dict(),
        }
        if self.validation is not None:
            payload["validation"] = self.validation.to_dict()
        if self.improvements is not None:
            payload["improvements"] = self.improvements.to_dict()
        return payload


@dataclass(frozen=True, slots=True)
class RefineOutcome:
    """服务调用结果：成功时带报告，失败时带结构化错误；text 始终可直接回复。"""
    text: str
    report: RefineReport | None = None
    error: InputError | InternalError | None = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None
