"""FastAPI 应用入口：日志初始化、生命周期（Schema 预加载与缓存清理任务）、中间件与路由挂载。"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from refiner.api.router import api_router
from refiner.application.container import get_cache_sweeper, get_schema_validator, shutdown_container_resources
from refiner.config import get_settings
from refiner.infra.logging.context import bind_log_context
from refiner.infra.logging.setup import configure_logging, shutdown_logging

REQUEST_ID_HEADER = "X-Request-Id"

settings = get_settings()
configure_logging(settings, process_role="api")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """启动时预加载 Schema 并拉起缓存清理任务；退出时按相反顺序释放。"""
    logger.info("api startup begin", extra={"event": "api.startup.started"})
    # Schema 缺失或不合法时直接启动失败。
    get_schema_validator()
    sweeper = get_cache_sweeper()
    await sweeper.start()
    logger.info(
        "api startup ready",
        extra={
            "event": "api.startup.succeeded",
            "payload_preview": {
                "cache_max_size": settings.cache_max_size,
                "cache_ttl_seconds": settings.cache_ttl_seconds,
            },
        },
    )
    try:
        yield
    finally:
        logger.info("api shutdown begin", extra={"event": "api.shutdown.started"})
        await sweeper.stop()
        shutdown_container_resources()
        shutdown_logging()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

if settings.cors_allowed_origins_list():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins_list(),
        allow_methods=settings.cors_allowed_methods_list(),
        allow_headers=settings.cors_allowed_headers_list(),
        allow_credentials=settings.cors_allow_credentials,
    )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """绑定请求 ID（优先沿用上游传入值）并记录每个请求的耗时与状态码。"""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    fields = {"op": f"{request.method} {request.url.path}"}
    started = time.perf_counter()
    with bind_log_context(request_id=request_id):
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "http request failed",
                extra={
                    **fields,
                    "event": "http.request.failed",
                    "duration_ms": _elapsed_ms(started),
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            raise
        logger.info(
            "http request completed",
            extra={
                **fields,
                "event": "http.request.completed",
                "duration_ms": _elapsed_ms(started),
                "status_code": response.status_code,
            },
        )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.get("/health")
@app.get("/healthz")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(api_router)
