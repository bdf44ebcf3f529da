"""依赖容器模块，负责单例化创建结果缓存、评分配置与精炼服务对象。"""

from __future__ import annotations

from functools import lru_cache

from refiner.application.maintenance import CacheSweeper
from refiner.application.refine_service import RefineService
from refiner.application.results import RefineReport
from refiner.config import get_settings
from refiner.domain.scoring.config import ScoringConfigResolver, ScoringOverrides
from refiner.infra.cache.result_cache import ResultCache
from refiner.infra.schema.validator import SpecSchemaValidator


@lru_cache(maxsize=1)
def get_result_cache() -> ResultCache[RefineReport]:
    """获取进程内结果缓存单例。"""
    settings = get_settings()
    return ResultCache(max_size=settings.cache_max_size, default_ttl_seconds=settings.cache_ttl_seconds)


@lru_cache(maxsize=1)
def get_scoring_resolver() -> ScoringConfigResolver:
    """获取评分配置解析器单例。
    覆盖项只在此处读取一次，运行期修改环境变量不会生效。
    """
    settings = get_settings()
    return ScoringConfigResolver(
        ScoringOverrides(
            clarity_base_score=settings.clarity_base_score,
            completeness_base_score=settings.completeness_base_score,
            max_prompt_length=settings.max_prompt_length,
        )
    )


@lru_cache(maxsize=1)
def get_schema_validator() -> SpecSchemaValidator:
    return SpecSchemaValidator.from_path(get_settings().schema_path)


@lru_cache(maxsize=1)
def get_refine_service() -> RefineService:
    """获取精炼服务单例。"""
    return RefineService(
        cache=get_result_cache(),
        scoring=get_scoring_resolver(),
        schema_validator=get_schema_validator(),
    )


@lru_cache(maxsize=1)
def get_cache_sweeper() -> CacheSweeper:
    """获取缓存清理任务单例，与精炼服务共享同一缓存实例。"""
    return CacheSweeper(get_result_cache(), get_settings().cache_cleanup_interval_seconds)


def shutdown_container_resources() -> None:
    """清空缓存数据并重置依赖容器。"""
    if get_result_cache.cache_info().currsize:
        get_result_cache().clear()

    # 按依赖顺序清理，确保后续请求可重新构建全新实例。
    for provider in (
        get_cache_sweeper,
        get_refine_service,
        get_schema_validator,
        get_scoring_resolver,
        get_result_cache,
    ):
        provider.cache_clear()
