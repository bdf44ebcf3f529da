"""改进建议测试：验证补丁规则、默认值与保留原有指令。"""

from __future__ import annotations

from refiner.domain.drafter import draft_from_text
from refiner.domain.enums import Domain, Intent, PatchOp
from refiner.domain.gaps import detect_gaps
from refiner.domain.improvements import DEFAULT_SECTIONS, PLACEHOLDER_TITLE, QUALITY_DIRECTIVES, generate_improvements
from refiner.domain.models import SpecContext, Specification


def test_minimal_prompt_patches() -> None:
    spec = draft_from_text("create user authentication")
    patches = generate_improvements(spec, detect_gaps(spec).issues).patches
    assert [(item.op, item.path) for item in patches] == [
        (PatchOp.add, "/io/contract"),
        (PatchOp.add, "/context/domain"),
        (PatchOp.replace, "/instructions"),
    ]
    assert patches[0].value == {"sections": list(DEFAULT_SECTIONS)}
    assert patches[1].value == "general"


def test_domain_patch_uses_requested_domain() -> None:
    spec = Specification(intent=Intent.general, instructions=("create user authentication",), title="Authentication")
    patches = generate_improvements(spec, (), domain="code").patches
    domain_patch = next(item for item in patches if item.path == "/context/domain")
    assert domain_patch.value == "code"


def test_no_domain_patch_when_domain_is_set() -> None:
    spec = draft_from_text("create user authentication", "code")
    assert spec.context.domain == Domain.code
    patches = generate_improvements(spec, detect_gaps(spec).issues, "code").patches
    assert all(item.path != "/context/domain" for item in patches)


def test_title_patch_add_or_replace() -> None:
    missing = Specification(intent=Intent.general, instructions=("x",))
    short = Specification(intent=Intent.general, instructions=("x",), title="abc")
    (add_patch,) = [item for item in generate_improvements(missing, ()).patches if item.path == "/title"]
    (replace_patch,) = [item for item in generate_improvements(short, ()).patches if item.path == "/title"]
    assert add_patch.op == PatchOp.add
    assert replace_patch.op == PatchOp.replace
    assert replace_patch.value == PLACEHOLDER_TITLE


def test_instructions_patch_keeps_existing_content() -> None:
    spec = Specification(intent=Intent.general, instructions=("collect data", "plot it"), title="Chart report")
    (patch,) = [item for item in generate_improvements(spec, ()).patches if item.path == "/instructions"]
    assert patch.value == ["collect data", "plot it", *QUALITY_DIRECTIVES]


def test_long_instructions_are_not_patched() -> None:
    spec = Specification(
        intent=Intent.general,
        instructions=("word " * 60,),
        title="A long enough title",
        context=SpecContext(domain=Domain.docs),
    )
    assert generate_improvements(spec, ()).patches == ()


def test_sections_patch_requires_sections_issue() -> None:
    spec = Specification(intent=Intent.general, instructions=("x",))
    assert all(item.path != "/io/contract" for item in generate_improvements(spec, ()).patches)


def test_patch_paths_do_not_overlap() -> None:
    spec = Specification(intent=Intent.general, instructions=())
    patches = generate_improvements(spec, detect_gaps(spec).issues).patches
    paths = [item.path for item in patches]
    assert len(paths) == len(set(paths))
    assert generate_improvements(spec, ()).improvement_count == len(generate_improvements(spec, ()).patches)


def test_generator_fault_returns_empty_set() -> None:
    """输入形态异常时记录日志并返回空补丁集合。"""
    assert generate_improvements(None, ()).patches == ()  # type: ignore[arg-type]
