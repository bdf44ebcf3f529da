"""API 总路由配置，按业务域注册 refine 与 cache 子路由。"""

from __future__ import annotations

from fastapi import APIRouter

from refiner.api.v1.cache import router as cache_router
from refiner.api.v1.refine import router as refine_router
from refiner.config import get_settings

settings = get_settings()

api_router = APIRouter(prefix=settings.api_prefix)
api_router.include_router(refine_router, tags=["refine"])
api_router.include_router(cache_router, tags=["cache"])
