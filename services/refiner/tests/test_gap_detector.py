"""缺口检测测试：验证规则顺序、问题级别、评分回显与校验告警。"""

from __future__ import annotations

import pytest

from refiner.domain.drafter import draft_from_text
from refiner.domain.enums import InputType, Intent, OutputFormat, Severity
from refiner.domain.gaps import detect_gaps, review_specification
from refiner.domain.models import InputRef, IOSpec, Metrics, OutputContract, SpecContext, Specification


def test_missing_constraints_yields_single_info_issue() -> None:
    """constraints 为空时应恰好产出一条 /constraints 的 info 问题。"""
    spec = Specification(intent=Intent.general, instructions=("Write a summary of the report",), constraints=())
    issues = [item for item in detect_gaps(spec).issues if item.path == "/constraints"]
    assert len(issues) == 1
    assert issues[0].severity == Severity.info


def test_rules_run_in_fixed_order() -> None:
    spec = Specification(intent=Intent.general, instructions=(), io=IOSpec(format=None))
    report = detect_gaps(spec)
    assert [(item.path, item.severity) for item in report.issues] == [
        ("/io/format", Severity.error),
        ("/instructions", Severity.error),
        ("/constraints", Severity.info),
        ("/context/inputs", Severity.info),
    ]


def test_drafted_markdown_spec_without_sections_warns() -> None:
    report = detect_gaps(draft_from_text("create user authentication"))
    assert [(item.path, item.severity) for item in report.issues] == [
        ("/io/contract/sections", Severity.warn),
        ("/constraints", Severity.info),
        ("/context/inputs", Severity.info),
    ]


@pytest.mark.parametrize("output_format", [OutputFormat.json, OutputFormat.csv, OutputFormat.text])
def test_sections_rule_only_applies_to_markdown(output_format: OutputFormat) -> None:
    spec = Specification(intent=Intent.general, instructions=("list the rows",), io=IOSpec(format=output_format))
    assert all(item.path != "/io/contract/sections" for item in detect_gaps(spec).issues)


def test_vague_instructions_warn() -> None:
    spec = Specification(intent=Intent.general, instructions=("make it better",))
    issues = [item for item in detect_gaps(spec).issues if item.path == "/instructions"]
    assert len(issues) == 1
    assert issues[0].severity == Severity.warn


def test_complete_spec_has_no_issues() -> None:
    spec = Specification(
        intent=Intent.analyze,
        instructions=("Review main.py for unhandled errors",),
        constraints=("max 200 words",),
        context=SpecContext(inputs=(InputRef(type=InputType.file, ref="main.py"),)),
        io=IOSpec(format=OutputFormat.markdown, contract=OutputContract(sections=("Overview",))),
    )
    assert detect_gaps(spec).issues == ()


def test_score_echoes_existing_metrics() -> None:
    spec = Specification(
        intent=Intent.general,
        instructions=("create user authentication",),
        metrics=Metrics(clarity=0.9, completeness=0.1),
    )
    score = detect_gaps(spec).score
    assert (score.clarity, score.completeness) == (0.9, 0.1)


def test_score_is_rederived_without_metrics() -> None:
    spec = Specification(intent=Intent.general, instructions=("create user authentication",))
    assert detect_gaps(spec).score.clarity == pytest.approx(0.52)


def test_detector_is_stateless() -> None:
    spec = draft_from_text("Write a better onboarding guide")
    assert detect_gaps(spec) == detect_gaps(spec)


def test_review_specification_warnings() -> None:
    warnings = review_specification(draft_from_text("create user authentication"))
    assert [item.path for item in warnings] == ["/constraints", "/context/domain", "/instructions"]
    assert all(item.severity == Severity.warn for item in warnings)


def test_review_flags_short_title() -> None:
    spec = Specification(intent=Intent.general, instructions=("fix",), title="fix", constraints=("max 50 words",))
    assert "/title" in [item.path for item in review_specification(spec)]
