from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.dependencies import get_proxy
from services.errors import PredictionProxyError
from services.proxy import PredictionProxy

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

PRODUCT_TYPES = ("L", "M", "H")

_DEFAULT_FORM: Dict[str, Any] = {
    "product_type": "L",
    "air_temperature": 298.1,
    "process_temperature": 308.6,
    "rotational_speed": 1551,
    "torque": 42.8,
    "tool_wear": 0,
}


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {"form": _DEFAULT_FORM, "product_types": PRODUCT_TYPES},
    )


@router.post("/ui/predict", name="ui_predict", response_class=HTMLResponse)
async def ui_predict(
    request: Request,
    product_type: str = Form(...),
    air_temperature: float = Form(...),
    process_temperature: float = Form(...),
    rotational_speed: int = Form(...),
    torque: float = Form(...),
    tool_wear: int = Form(...),
    proxy: PredictionProxy = Depends(get_proxy),
) -> HTMLResponse:
    form = {
        "product_type": product_type,
        "air_temperature": air_temperature,
        "process_temperature": process_temperature,
        "rotational_speed": rotational_speed,
        "torque": torque,
        "tool_wear": tool_wear,
    }
    body = {"input_data": [{"values": [list(form.values())]}]}

    result = None
    error = None
    status_code = status.HTTP_200_OK
    try:
        result = await run_in_threadpool(proxy.handle, "POST", body)
    except PredictionProxyError as exc:
        logger.warning("Form prediction failed", extra={"stage": exc.stage, "reason": str(exc)})
        error = str(exc)
        status_code = exc.status_code

    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "form": form,
            "product_types": PRODUCT_TYPES,
            "result": result,
            "error": error,
        },
        status_code=status_code,
    )
