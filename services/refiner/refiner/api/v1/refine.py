"""提示词精炼接口：校验输入、运行分析流水线并返回渲染文本与结构化报告。"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from refiner.api.v1.schemas import ErrorResponse, RefineRequest, RefineResponse
from refiner.application.container import get_refine_service
from refiner.application.refine_service import RefineService
from refiner.application.results import InputError

router = APIRouter()
logger = logging.getLogger(__name__)


def _service() -> RefineService:
    return get_refine_service()


@router.post(
    "/refine",
    response_model=RefineResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def refine_prompt(
    payload: RefineRequest,
    service: RefineService = Depends(_service),
) -> RefineResponse | JSONResponse:
    """分析提示词；输入错误返回 400，内部异常返回 500，均附带修复说明。"""
    outcome = service.refine(
        payload.prompt,
        domain=payload.domain,
        include_validation=payload.include_validation,
        include_improvements=payload.include_improvements,
    )
    if outcome.report is not None:
        return RefineResponse(cached=outcome.cached, text=outcome.text, report=outcome.report.to_dict())
    status_code = (
        status.HTTP_400_BAD_REQUEST
        if isinstance(outcome.error, InputError)
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    detail = outcome.error.to_dict() if outcome.error is not None else {}
    return JSONResponse(status_code=status_code, content={**detail, "text": outcome.text})
