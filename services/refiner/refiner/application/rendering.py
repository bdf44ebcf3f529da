"""结果渲染：将分析报告、错误与缓存统计渲染为 markdown 文本，并合成改进后的提示词。"""

from __future__ import annotations

import json
from typing import Any

from refiner.application.results import InputError, InternalError, RefineReport
from refiner.domain.enums import PatchOp, Severity
from refiner.domain.models import Patch, Specification
from refiner.domain.text import safe_round, word_count
from refiner.domain.validation import sanitize_text
from refiner.infra.cache.result_cache import CacheStats

_SEVERITY_ICONS = {Severity.error: "🔴", Severity.warn: "🟡", Severity.info: "🔵"}
_ACTION_ICONS = {PatchOp.add: "➕", PatchOp.replace: "🔄", PatchOp.remove: "➖"}


def quality_level(score: float) -> str:
    if score >= 0.8:
        return "🟢 Excellent"
    if score >= 0.6:
        return "🟡 Good"
    return "🔴 Needs Work"


def readiness_icon(is_ready: bool) -> str:
    return "✅" if is_ready else "⚠️"


def severity_icon(severity: Severity) -> str:
    return _SEVERITY_ICONS.get(severity, "⚪")


def action_icon(op: PatchOp) -> str:
    return _ACTION_ICONS.get(op, "🔄")


def format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, indent=2)
    return str(value)


def synthesize_improved_prompt(
    prompt: str,
    spec: Specification,
    patches: tuple[Patch, ...],
    brief_threshold: int,
) -> tuple[str, tuple[str, ...]]:
    """按补丁建议以文本拼接方式合成改进后的提示词，仅用于展示。"""
    if not patches:
        return prompt, ()
    improved = prompt
    notes: list[str] = []
    if not spec.constraints:
        improved = (
            f"{improved}. Requirements: Provide a comprehensive response with specific examples and actionable details."
        )
        notes.append("Added clarity requirements")
    if not spec.io.contract.sections:
        improved = f"{improved} Structure the response with clear sections: Overview, Details, and Next Steps."
        notes.append("Added output structure")
    if word_count(spec.joined_instructions()) < brief_threshold:
        improved = f"{improved} Include specific examples and measurable outcomes where applicable."
        notes.append("Added success criteria")
    return improved, tuple(notes)


def render_report(report: RefineReport) -> str:
    """渲染完整分析报告。"""
    summary = report.summary
    score = report.gaps.score
    suggestion_count = report.improvements.improvement_count if report.improvements else 0

    vague_section = ""
    if report.vague_language.has_vague:
        terms = "\n".join(f'- "{term}"' for term in report.vague_language.vague_terms)
        suggestions = "\n".join(f"- {item}" for item in report.vague_language.suggestions)
        vague_section = f"\n\n### 🎯 **Vague Language Detected**\n{terms}\n\n**Suggestions:**\n{suggestions}"

    if report.gaps.issues:
        issues_block = "\n\n".join(
            f"{severity_icon(issue.severity)} **{issue.severity.value.upper()}:** {issue.message}\n"
            f"   *Location:* `{issue.path}`"
            for issue in report.gaps.issues
        )
    else:
        issues_block = "🎉 No issues found"

    if report.improvements and report.improvements.patches:
        patches_block = "\n\n".join(
            f"{action_icon(patch.op)} **{patch.op.value.upper()}** at `{patch.path}`:\n"
            f"   ```\n   {format_value(patch.value)}\n   ```"
            for patch in report.improvements.patches
        )
    else:
        patches_block = "✨ No suggestions needed"

    validation_block = ""
    if report.validation is not None:
        status = "✅ Valid" if report.validation.valid else "❌ Invalid"
        errors = "\n".join(f"- {item}" for item in report.validation.errors)
        warnings = "\n".join(f"- `{item.path}`: {item.message}" for item in report.validation.warnings)
        validation_block = f"\n\n### 🧪 **Schema Validation**\n**Status:** {status}"
        if errors:
            validation_block += f"\n\n**Errors:**\n{errors}"
        if warnings:
            validation_block += f"\n\n**Warnings:**\n{warnings}"

    notes = ", ".join(report.improvement_notes) or "None needed"
    return f"""## 📊 Analysis Summary

**Quality Score:** {quality_level(summary.overall_quality)} ({summary.overall_quality}/1.0)
**Ready for Implementation:** {readiness_icon(summary.ready_for_implementation)} {"Yes" if summary.ready_for_implementation else "Needs refinement"}
**Intent:** {report.spec.intent.value}
**Domain Context:** {report.domain or "General"}
**Word Count:** {report.word_count} words
**Improvements Applied:** {notes}

### 🔍 **Detailed Metrics**
- **Clarity Score:** {safe_round(score.clarity)}/1.0
- **Completeness Score:** {safe_round(score.completeness)}/1.0
- **Issues Found:** {len(report.gaps.issues)}
- **Suggestions Available:** {suggestion_count}{vague_section}

### ⚠️ **Issues Detected**
{issues_block}{validation_block}

### 💡 **Improvement Suggestions**
{patches_block}

---

## 🎯 IMPROVED PROMPT:

```
{sanitize_text(report.improved_prompt)}
```"""


def render_input_error(error: InputError) -> str:
    return (
        "❌ **Input Validation Error**\n\n"
        f"**Issue:** {error.message}\n"
        f"**Code:** {error.code}\n\n"
        f"**Expected:** {error.expected}\n"
        f"**Received:** {error.received}\n\n"
        f"**Fix:** {error.fix}"
    )


def render_internal_error(error: InternalError) -> str:
    return f"""🚨 **Internal Server Error**

**What happened:** An unexpected error occurred during structural thinking analysis

**Error Details:**
- **Message:** {error.message}
- **Type:** {error.error_type}

**Troubleshooting:**
1. Check if your prompt contains any special characters that might cause parsing issues
2. Ensure the prompt length is within acceptable limits
3. Try simplifying the prompt and running the analysis again
4. If the error persists, this may be a server-side issue"""


def render_cache_stats(stats: CacheStats) -> str:
    status = "✅ Healthy" if stats.hit_rate > 0.5 else "⚠️ Low hit rate"
    return f"""## 🗂️ Cache Statistics

**Performance:**
- **Hit Rate:** {stats.hit_rate * 100:.1f}%
- **Total Hits:** {stats.hits}
- **Total Misses:** {stats.misses}

**Storage:**
- **Current Size:** {stats.size} / {stats.max_size} entries
- **Memory Usage:** {stats.memory_usage / 1024:.1f} KB

**Status:** {status}"""


def render_cleanup(removed: int) -> str:
    status = "✅ Cleanup successful" if removed > 0 else "ℹ️ No expired entries found"
    return f"""## 🧹 Cache Cleanup Complete

**Removed:** {removed} expired entries
**Status:** {status}"""
