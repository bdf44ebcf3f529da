"""规格结构校验：加载 JSON Schema 文档，对规格 JSON 输出通过/失败与错误位置列表。"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

SCHEMA_NAME = "structural-thinking.v1.json"


def default_schema_path() -> Path:
    """随包分发的规格 Schema 路径。"""
    return Path(__file__).resolve().parent / SCHEMA_NAME


@dataclass(frozen=True, slots=True)
class SchemaCheck:
    """校验结论；errors 中每项格式为 "<json pointer>: <message>"。"""
    valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)


class SpecSchemaValidator:
    """基于 Draft 2020-12 的规格结构校验器。"""

    def __init__(self, schema: dict[str, Any]) -> None:
        Draft202012Validator.check_schema(schema)
        self._validator = Draft202012Validator(schema)

    @classmethod
    def from_path(cls, path: Path | None = None) -> SpecSchemaValidator:
        schema_path = path or default_schema_path()
        if not schema_path.exists():
            raise FileNotFoundError(f"specification schema not found: {schema_path}")
        return cls(json.loads(schema_path.read_text(encoding="utf-8")))

    def check(self, payload: dict[str, Any]) -> SchemaCheck:
        errors = sorted(self._validator.iter_errors(payload), key=lambda item: [str(part) for part in item.absolute_path])
        if not errors:
            return SchemaCheck(valid=True)
        return SchemaCheck(
            valid=False,
            errors=tuple(f"{_json_pointer(item.absolute_path)}: {item.message}" for item in errors),
        )


def _json_pointer(path: Any) -> str:
    parts = [str(part).replace("~", "~0").replace("/", "~1") for part in path]
    return "".join(f"/{part}" for part in parts)
