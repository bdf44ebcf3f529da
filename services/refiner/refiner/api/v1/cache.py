"""缓存运维接口：查询命中统计与手动清理过期条目。"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from refiner.api.v1.schemas import CacheCleanupResponse, CacheStatsResponse
from refiner.application.container import get_refine_service
from refiner.application.refine_service import RefineService
from refiner.application.rendering import render_cache_stats, render_cleanup

router = APIRouter()


def _service() -> RefineService:
    return get_refine_service()


@router.get("/cache/stats", response_model=CacheStatsResponse)
def cache_stats(service: RefineService = Depends(_service)) -> CacheStatsResponse:
    stats = service.cache_stats()
    return CacheStatsResponse(**stats.to_dict(), text=render_cache_stats(stats))


@router.post("/cache/cleanup", response_model=CacheCleanupResponse)
def cache_cleanup(service: RefineService = Depends(_service)) -> CacheCleanupResponse:
    """立即清理过期条目并返回清理数量。"""
    removed = service.cleanup_cache()
    return CacheCleanupResponse(removed=removed, text=render_cleanup(removed))
