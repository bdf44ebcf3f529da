"""API 请求与响应数据模型定义，约束精炼与缓存接口的收发结构。"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RefineRequest(BaseModel):
    """精炼接口请求体。
    字段类型放宽为 Any，由服务层输出结构化的输入错误而非框架默认的 422。
    """
    prompt: Any = None
    domain: Any = None
    include_validation: Any = Field(default=True, alias="includeValidation")
    include_improvements: Any = Field(default=True, alias="includeImprovements")

    model_config = ConfigDict(populate_by_name=True)


class RefineResponse(BaseModel):
    """精炼成功响应：渲染文本与结构化报告。"""
    cached: bool
    text: str
    report: dict[str, Any]


class ErrorResponse(BaseModel):
    """输入错误与内部错误的统一响应结构。"""
    code: str
    error: str
    expected: str | None = None
    received: str | None = None
    fix: str | None = None
    error_type: str | None = None
    text: str


class CacheStatsResponse(BaseModel):
    """缓存统计接口响应模型。"""
    hits: int
    misses: int
    size: int
    max_size: int
    hit_rate: float
    memory_usage: int
    text: str


class CacheCleanupResponse(BaseModel):
    """缓存清理接口响应模型。"""
    removed: int
    text: str
