"""规格起草器：将原始提示词转换为结构化规格，并填充初始评分。"""

from __future__ import annotations

import logging
import re

from refiner.domain.enums import DOMAIN_VALUES, Domain, InputType, Intent, OutputFormat
from refiner.domain.models import InputRef, IOSpec, Metrics, OutputContract, SpecContext, Specification
from refiner.domain.scoring.config import ScoringConfig, resolve_scoring_config
from refiner.domain.scoring.engine import analyze_vague_language, calculate_clarity, calculate_completeness
from refiner.domain.text import non_empty_lines, truncate

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100

# 按声明顺序匹配，首个命中的规则生效。
INTENT_RULES: tuple[tuple[Intent, re.Pattern[str]], ...] = (
    (Intent.generate_code, re.compile(r"\b(?:create|build|implement|develop|generate)\b", re.IGNORECASE)),
    (Intent.analyze, re.compile(r"\b(?:analyze|review|evaluate|assess)\b", re.IGNORECASE)),
    (Intent.explain, re.compile(r"\b(?:explain|describe|document|outline)\b", re.IGNORECASE)),
    (Intent.translate, re.compile(r"\b(?:translate|localize|transliterate)\b", re.IGNORECASE)),
    (Intent.refactor, re.compile(r"\b(?:refactor|restructure|rewrite|clean up)\b", re.IGNORECASE)),
    (Intent.classify, re.compile(r"\b(?:classify|categori[sz]e|label|tag)\b", re.IGNORECASE)),
    (Intent.plan, re.compile(r"\b(?:plan|roadmap|schedule|prioriti[sz]e)\b", re.IGNORECASE)),
    (Intent.compare, re.compile(r"\b(?:compare|contrast|versus|vs\.?)\b", re.IGNORECASE)),
    (Intent.summarize, re.compile(r"\b(?:summari[sz]e|condense|recap|tl;?dr)\b", re.IGNORECASE)),
)

SECTION_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Overview", re.compile(r"\b(?:overview|summary|introduction)\b", re.IGNORECASE)),
    ("Details", re.compile(r"\b(?:details?|implementation|steps?)\b", re.IGNORECASE)),
    ("NextSteps", re.compile(r"\b(?:next steps?|conclusion|follow[- ]?up)\b", re.IGNORECASE)),
    ("Examples", re.compile(r"\b(?:examples?|samples?)\b", re.IGNORECASE)),
)

# 仅在明确要求输出格式时切换，默认 markdown。
FORMAT_RULES: tuple[tuple[OutputFormat, re.Pattern[str]], ...] = (
    (
        OutputFormat.json,
        re.compile(r"\b(?:as|in|into|return|output|respond with)\s+(?:a\s+|an\s+|valid\s+)?json\b", re.IGNORECASE),
    ),
    (
        OutputFormat.csv,
        re.compile(r"\b(?:as|in|into|return|output|respond with)\s+(?:a\s+)?csv\b", re.IGNORECASE),
    ),
    (
        OutputFormat.text,
        re.compile(r"\b(?:as|in|return|output|respond with)\s+plain[- ]text\b", re.IGNORECASE),
    ),
)

WORD_LIMIT_RE = re.compile(r"(\d{2,4})\s*words?", re.IGNORECASE)
URL_RE = re.compile(r"https?://[^\s<>\"')\]]+", re.IGNORECASE)
FILE_RE = re.compile(
    r"(?<![\w/.:-])(?:[\w-]+/)*[\w-]+\.(?:py|ts|tsx|js|jsx|md|json|csv|ya?ml|txt|sql|html|css|xlsx|pdf|toml)\b",
    re.IGNORECASE,
)
_SENTENCE_RE = re.compile(r"^(.*?[.!?])(?:\s|$)")


def infer_intent(text: str) -> Intent:
    for intent, pattern in INTENT_RULES:
        if pattern.search(text):
            return intent
    return Intent.general


def detect_sections(text: str) -> tuple[str, ...]:
    sections: list[str] = []
    for name, pattern in SECTION_RULES:
        if pattern.search(text) and name not in sections:
            sections.append(name)
    return tuple(sections)


def detect_output_format(text: str) -> OutputFormat:
    for output_format, pattern in FORMAT_RULES:
        if pattern.search(text):
            return output_format
    return OutputFormat.markdown


def extract_constraints(text: str) -> tuple[str, ...]:
    match = WORD_LIMIT_RE.search(text)
    if match:
        return (f"max {match.group(1)} words",)
    return ()


def detect_inputs(text: str) -> tuple[InputRef, ...]:
    """识别 URL 与带已知后缀的文件名，去重并保持出现顺序。"""
    refs: list[InputRef] = []
    seen: set[str] = set()
    for match in URL_RE.finditer(text):
        url = match.group(0).rstrip(".,;:")
        if url not in seen:
            seen.add(url)
            refs.append(InputRef(type=InputType.url, ref=url))
    # URL 中的路径片段不再重复识别为文件。
    remainder = URL_RE.sub(" ", text)
    for match in FILE_RE.finditer(remainder):
        name = match.group(0)
        if name not in seen:
            seen.add(name)
            refs.append(InputRef(type=InputType.file, ref=name))
    return tuple(refs)


def derive_title(lines: list[str], normalized: str) -> str | None:
    if lines:
        return truncate(lines[0], TITLE_MAX_LENGTH)
    match = _SENTENCE_RE.match(normalized)
    first_sentence = match.group(1) if match else normalized
    return truncate(first_sentence, TITLE_MAX_LENGTH) or None


def _fallback_spec(normalized: str, domain: str | None, config: ScoringConfig) -> Specification:
    """起草失败时的保守规格：单条指令、markdown、基础分。"""
    return Specification(
        intent=Intent.general,
        instructions=(normalized,) if normalized else (),
        context=SpecContext(domain=Domain(domain) if domain in DOMAIN_VALUES else None),
        io=IOSpec(format=OutputFormat.markdown),
        metrics=Metrics(clarity=config.clarity.base_score, completeness=config.completeness.base_score),
    )


def draft_from_text(prompt: str, domain: str | None = None, config: ScoringConfig | None = None) -> Specification:
    """从原始提示词起草规格；完整度必须在指令、约束与章节填充之后计算。"""
    resolved = config or resolve_scoring_config(domain)
    lines = non_empty_lines(prompt)
    normalized = " ".join(lines).strip()
    try:
        spec = Specification(
            intent=infer_intent(normalized),
            title=derive_title(lines, normalized),
            context=SpecContext(
                domain=Domain(domain) if domain else None,
                inputs=detect_inputs(normalized),
            ),
            instructions=tuple(lines),
            constraints=extract_constraints(normalized),
            io=IOSpec(
                format=detect_output_format(normalized),
                contract=OutputContract(sections=detect_sections(normalized)),
            ),
            ambiguities=analyze_vague_language(normalized).vague_terms,
        )
        clarity = calculate_clarity(normalized, domain, resolved)
        completeness = calculate_completeness(normalized, spec, domain, resolved)
        return spec.with_metrics(Metrics(clarity=clarity, completeness=completeness))
    except Exception as exc:
        logger.exception(
            "spec drafting failed",
            extra={"event": "drafter.failed", "error_type": type(exc).__name__, "error": str(exc)},
        )
        return _fallback_spec(normalized, domain, resolved)
