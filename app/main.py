from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.errors import PredictionProxyError
from services.proxy import build_default_proxy

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    proxy = build_default_proxy()
    missing = proxy.settings.missing_credentials()
    if missing:
        logger.warning(
            "WML credentials not set; predictions will fail until configured",
            extra={"stage": "configuration", "missing": ",".join(missing)},
        )
    try:
        yield
    finally:
        proxy.close()
        build_default_proxy.cache_clear()


async def handle_proxy_error(_request: Request, exc: PredictionProxyError) -> JSONResponse:
    logger.error(
        "An error occurred in the /api/predict handler: %s",
        exc,
        extra={"stage": exc.stage, "status": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc)})


async def handle_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Routing failures (unknown path, unsupported verb) use the same body shape.
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error in request handler",
        extra={"stage": "unknown", "status": status.HTTP_500_INTERNAL_SERVER_ERROR},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": str(exc) or "Internal Server Error"},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="WML Prediction Proxy",
        description="Relays machine sensor readings to a hosted Watson Machine Learning model.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(PredictionProxyError, handle_proxy_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
