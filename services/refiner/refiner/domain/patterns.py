"""词法模式库：评分与缺口检测使用的正则集合与模糊用语建议。"""

from __future__ import annotations

import re

PATTERN_LIBRARY_VERSION = "1.0.0"


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(item, re.IGNORECASE) for item in patterns)


# 降低清晰度的模糊用语。
VAGUE_WORDS = _compile(
    r"\boptimi[sz]e[ds]?\b",
    r"\bbetter\b",
    r"\bquickly\b",
    r"\bimprove[ds]?\b",
    r"\bnice\b",
    r"\bgood\b",
    r"\bclean\b",
    r"\befficient\b",
    r"\bsimple\b",
    r"\beasy\b",
    r"\bfast\b",
    r"\bsmooth\b",
    r"\bpretty\b",
    r"\bquite\b",
    r"\bvery\b",
    r"\breally\b",
    r"\bsomewhat\b",
    r"\brather\b",
    r"\bbasically\b",
    r"\bobviously\b",
    r"\bclearly\b",
)

CLARITY_INDICATORS = _compile(
    r"\bspecifically\b",
    r"\bexactly\b",
    r"\bmust\b",
    r"\bshall\b",
    r"\brequired\b",
    r"\bmandatory\b",
    r"\bwill\b",
    r"\bshould\b",
    r"\bprecisely\b",
    r"\bexplicitly\b",
    r"\bdefined as\b",
    r"\bmeasured by\b",
    r"\bstrictly\b",
    r"\bcompulsory\b",
)

COMPLETENESS_INDICATORS = _compile(
    r"\binput\b",
    r"\boutput\b",
    r"\bformat\b",
    r"\bconstraints?\b",
    r"\blimits?\b",
    r"\bsteps?\b",
    r"\bprocess\b",
    r"\bmethods?\b",
    r"\bworkflows?\b",
    r"\bpipelines?\b",
    r"\brequirements?\b",
    r"\bspecifications?\b",
    r"\bparameters?\b",
    r"\bcriteria\b",
)

CONCRETE_VERBS = _compile(
    r"\bcreate[ds]?\b",
    r"\bgenerate[ds]?\b",
    r"\bwrite[ns]?\b",
    r"\banalyze[ds]?\b",
    r"\bcompare[ds]?\b",
    r"\blists?\b",
    r"\bsummari[sz]e[ds]?\b",
    r"\bextracts?\b",
    r"\bidentify\b",
    r"\bcalculate[ds]?\b",
    r"\bimplements?\b",
    r"\bdesigns?\b",
)

MEASUREMENT_PATTERNS = _compile(
    r"\b\d+\s*(?:words?|characters?|minutes?|hours?|days?|%|percent|items?|steps?)\b",
    r"\b(?:approximately|about|roughly)\s+\d+",
    r"\b\d+[-–]\d+\s*(?:words?|items?|steps?)",
    r"\b(?:less than|more than|at least|up to)\s+\d+",
)

STRUCTURE_PATTERNS = _compile(
    r"[-•*]\s+",
    r"\d+\.\s+",
    r"#{1,6}\s+",
    r"\b(?:first|second|third|then|next|finally)\b",
)

QUESTION_WORDS = re.compile(r"\b(?:what|how|why|when|where|which|who)\b", re.IGNORECASE)

EXAMPLE_PHRASES = re.compile(r"\b(?:example|instance|such as|like|including|for instance)\b", re.IGNORECASE)

DOMAIN_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "code": _compile(
        r"\b(?:function|class|method|variable|API|endpoint|database|framework)\b",
        r"\b(?:implement|deploy|debug|test|refactor|optimize)\b",
        r"\b(?:TypeScript|JavaScript|Python|React|Node\.js|SQL)\b",
    ),
    "docs": _compile(
        r"\b(?:documentation|guide|tutorial|reference|manual|FAQ)\b",
        r"\b(?:section|chapter|appendix|glossary|index)\b",
        r"\b(?:explain|describe|outline|summarize)\b",
    ),
    "data": _compile(
        r"\b(?:dataset|table|column|row|schema|record)s?\b",
        r"\b(?:aggregate|filter|join|group by|pivot|clean)\b",
        r"\b(?:mean|median|distribution|outlier|trend)s?\b",
    ),
    "product": _compile(
        r"\b(?:feature|requirement|user story|acceptance criteria|MVP)\b",
        r"\b(?:stakeholder|customer|user|persona|journey)\b",
        r"\b(?:prioritize|roadmap|milestone|release|sprint)\b",
    ),
    "research": _compile(
        r"\b(?:hypothesis|methodology|analysis|findings|conclusion)\b",
        r"\b(?:data|sample|statistical|correlation|significance)\b",
        r"\b(?:study|experiment|survey|interview|observation)\b",
    ),
}

# key 为词干或备选正则，按声明顺序匹配。
VAGUE_LANGUAGE_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "better": ("Specify measurable improvements", "Define quality criteria"),
    "optimi": ("Define optimization criteria and metrics", "Specify performance targets"),
    "improve": ("Quantify the improvement goals", "Define success metrics"),
    "good|nice": ("Define quality criteria specifically", "Use measurable standards"),
    "fast|quick": ("Specify performance requirements", "Define time constraints"),
    "clean": ("Define code quality standards", "Specify formatting rules"),
    "efficient": ("Define efficiency metrics", "Specify resource constraints"),
    "simple": ("Define complexity constraints", "Specify simplicity criteria"),
    "easy": ("Define usability requirements", "Specify learning curve goals"),
}


def domain_patterns(domain: str | None) -> tuple[re.Pattern[str], ...]:
    """返回领域术语模式；未知或缺省领域返回空集合。"""
    if not domain:
        return ()
    return DOMAIN_PATTERNS.get(domain, ())


def vague_suggestions(terms: list[str] | tuple[str, ...]) -> list[str]:
    """为已识别的模糊用语生成去重后的改写建议。"""
    suggestions: list[str] = []
    for term in terms:
        normalized = term.lower()
        for key, items in VAGUE_LANGUAGE_SUGGESTIONS.items():
            if key in normalized or re.search(key, normalized):
                for item in items:
                    if item not in suggestions:
                        suggestions.append(item)
    return suggestions
