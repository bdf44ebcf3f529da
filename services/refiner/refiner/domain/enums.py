"""领域枚举定义：统一意图、领域、输出格式、问题级别与补丁操作取值。"""

from __future__ import annotations

from enum import Enum


class Intent(str, Enum):
    """提示词意图枚举，由词法规则推断，默认 general。"""
    general = "general"
    generate_code = "generate_code"
    analyze = "analyze"
    explain = "explain"
    translate = "translate"
    refactor = "refactor"
    classify = "classify"
    plan = "plan"
    compare = "compare"
    summarize = "summarize"


class Domain(str, Enum):
    """可选主题领域，缺省视为通用领域。"""
    code = "code"
    docs = "docs"
    data = "data"
    product = "product"
    research = "research"


class OutputFormat(str, Enum):
    """输出格式枚举。"""
    markdown = "markdown"
    json = "json"
    csv = "csv"
    text = "text"


class InputType(str, Enum):
    """上下文输入引用类型。"""
    file = "file"
    text = "text"
    url = "url"


class Severity(str, Enum):
    """问题严重级别。"""
    info = "info"
    warn = "warn"
    error = "error"


class PatchOp(str, Enum):
    """补丁操作类型。"""
    add = "add"
    replace = "replace"
    remove = "remove"


DOMAIN_VALUES: tuple[str, ...] = tuple(item.value for item in Domain)
