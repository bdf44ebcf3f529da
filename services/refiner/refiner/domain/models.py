"""领域数据结构定义：结构化规格、问题、补丁与评分等不可变值对象。"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from refiner.domain.enums import Domain, InputType, Intent, OutputFormat, PatchOp, Severity

SPEC_VERSION = "1.0"


@dataclass(frozen=True, slots=True)
class InputRef:
    """上下文输入引用（文件、文本或 URL）。"""
    type: InputType
    ref: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "ref": self.ref}


@dataclass(frozen=True, slots=True)
class SpecContext:
    """规格上下文：可选领域与已识别的输入引用。"""
    domain: Domain | None = None
    inputs: tuple[InputRef, ...] = ()


@dataclass(frozen=True, slots=True)
class OutputContract:
    """输出契约，记录期望的输出章节。"""
    sections: tuple[str, ...] = ()
    schema_ref: str | None = None


@dataclass(frozen=True, slots=True)
class IOSpec:
    """输入输出约定；format 缺失视为硬性缺陷。"""
    format: OutputFormat | None = OutputFormat.markdown
    contract: OutputContract = field(default_factory=OutputContract)


@dataclass(frozen=True, slots=True)
class Metrics:
    """缓存在规格上的评分，始终可由文本重新推导。"""
    clarity: float
    completeness: float


@dataclass(frozen=True, slots=True)
class Specification:
    """由提示词推导出的结构化规格，创建后不再原地修改。"""
    intent: Intent
    instructions: tuple[str, ...]
    version: str = SPEC_VERSION
    title: str | None = None
    context: SpecContext = field(default_factory=SpecContext)
    constraints: tuple[str, ...] = ()
    io: IOSpec = field(default_factory=IOSpec)
    ambiguities: tuple[str, ...] = ()
    metrics: Metrics | None = None
    notes: str = ""

    def joined_instructions(self) -> str:
        return " ".join(self.instructions)

    def with_metrics(self, metrics: Metrics) -> Specification:
        """返回附带新评分的规格副本。"""
        return replace(self, metrics=metrics)

    def to_dict(self) -> dict[str, Any]:
        """转换为 JSON 结构，缺省的可选字段不输出。"""
        context: dict[str, Any] = {}
        if self.context.domain is not None:
            context["domain"] = self.context.domain.value
        if self.context.inputs:
            context["inputs"] = [item.to_dict() for item in self.context.inputs]

        contract: dict[str, Any] = {}
        if self.io.contract.sections:
            contract["sections"] = list(self.io.contract.sections)
        if self.io.contract.schema_ref:
            contract["schemaRef"] = self.io.contract.schema_ref
        io: dict[str, Any] = {"contract": contract}
        if self.io.format is not None:
            io["format"] = self.io.format.value

        payload: dict[str, Any] = {
            "version": self.version,
            "intent": self.intent.value,
            "context": context,
            "instructions": list(self.instructions),
            "constraints": list(self.constraints),
            "io": io,
            "ambiguities": list(self.ambiguities),
            "notes": self.notes,
        }
        if self.title is not None:
            payload["title"] = self.title
        if self.metrics is not None:
            payload["metrics"] = {"clarity": self.metrics.clarity, "completeness": self.metrics.completeness}
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Specification:
        """从外部 JSON 结构解析规格；枚举值非法时抛出 ValueError。"""
        if not isinstance(payload, dict):
            raise ValueError(f"specification must be an object, got {type(payload).__name__}")
        context_raw = payload.get("context") or {}
        io_raw = payload.get("io") or {}
        contract_raw = io_raw.get("contract") or {}
        metrics_raw = payload.get("metrics")

        domain_value = context_raw.get("domain")
        format_value = io_raw.get("format")
        metrics = None
        if isinstance(metrics_raw, dict) and "clarity" in metrics_raw and "completeness" in metrics_raw:
            metrics = Metrics(clarity=float(metrics_raw["clarity"]), completeness=float(metrics_raw["completeness"]))

        return cls(
            version=str(payload.get("version", SPEC_VERSION)),
            intent=Intent(payload.get("intent", Intent.general.value)),
            title=payload.get("title"),
            context=SpecContext(
                domain=Domain(domain_value) if domain_value else None,
                inputs=tuple(
                    InputRef(type=InputType(item["type"]), ref=str(item["ref"]))
                    for item in context_raw.get("inputs") or []
                ),
            ),
            instructions=tuple(str(item) for item in payload.get("instructions") or []),
            constraints=tuple(str(item) for item in payload.get("constraints") or []),
            io=IOSpec(
                format=OutputFormat(format_value) if format_value else None,
                contract=OutputContract(
                    sections=tuple(str(item) for item in contract_raw.get("sections") or []),
                    schema_ref=contract_raw.get("schemaRef"),
                ),
            ),
            ambiguities=tuple(str(item) for item in payload.get("ambiguities") or []),
            metrics=metrics,
            notes=str(payload.get("notes") or ""),
        )


@dataclass(frozen=True, slots=True)
class Issue:
    """规格缺陷，path 为指向规格字段的 JSON Pointer。"""
    path: str
    message: str
    severity: Severity

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "severity": self.severity.value}


@dataclass(frozen=True, slots=True)
class Patch:
    """尚未应用的规格修改建议。"""
    op: PatchOp
    path: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"op": self.op.value, "path": self.path}
        if self.value is not None:
            payload["value"] = self.value
        return payload


@dataclass(frozen=True, slots=True)
class Score:
    """清晰度与完整度评分对。"""
    clarity: float
    completeness: float

    def to_dict(self) -> dict[str, float]:
        return {"clarity": self.clarity, "completeness": self.completeness}


@dataclass(frozen=True, slots=True)
class GapReport:
    """缺口检测结果：有序问题列表与当前评分。"""
    issues: tuple[Issue, ...]
    score: Score

    def to_dict(self) -> dict[str, Any]:
        return {"issues": [item.to_dict() for item in self.issues], "score": self.score.to_dict()}


@dataclass(frozen=True, slots=True)
class ImprovementSet:
    """改进建议集合。"""
    patches: tuple[Patch, ...]

    @property
    def improvement_count(self) -> int:
        return len(self.patches)

    def to_dict(self) -> dict[str, Any]:
        return {"patches": [item.to_dict() for item in self.patches], "improvementCount": self.improvement_count}


@dataclass(frozen=True, slots=True)
class VagueLanguageAnalysis:
    """模糊用语分析结果。"""
    has_vague: bool
    vague_terms: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
