"""FastAPI dependencies shared by the API and UI routers."""

from __future__ import annotations

from services.proxy import PredictionProxy, build_default_proxy


def get_proxy() -> PredictionProxy:
    return build_default_proxy()
