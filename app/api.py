"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_proxy
from app.schemas import ErrorResponse, HealthResponse, PredictionResponse
from services.proxy import PredictionProxy

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_405_METHOD_NOT_ALLOWED: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.api_route(
    "/api/predict",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=PredictionResponse,
    responses=_ERROR_RESPONSES,
    summary="Relay a sensor reading to the hosted model.",
)
async def predict(
    request: Request,
    proxy: PredictionProxy = Depends(get_proxy),
) -> PredictionResponse:
    body = await request.body() if request.method == "POST" else None
    result = await run_in_threadpool(proxy.handle, request.method, body)
    return PredictionResponse(prediction=result.prediction, confidence=result.confidence)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(proxy: PredictionProxy = Depends(get_proxy)) -> HealthResponse:
    return HealthResponse(configured=proxy.settings.is_configured)


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "POST sensor readings to /api/predict."}
