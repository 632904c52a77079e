"""Request orchestration: authenticate, shape, score, extract."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Any

from models.records import PredictionResult
from services.auth import IAMTokenIssuer, TokenIssuer
from services.errors import MethodNotAllowed, ServerMisconfigured
from services.payload import (
    CompactInput,
    PayloadPlaceholders,
    build_payload,
    parse_body,
    resolve_input,
)
from services.scoring import PredictionClient, WatsonPredictionClient, extract_prediction
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


class PredictionProxy:
    """Relays one sensor reading to the hosted model and simplifies the answer."""

    def __init__(
        self,
        settings: Settings,
        token_issuer: TokenIssuer,
        prediction_client: PredictionClient,
    ) -> None:
        self.settings = settings
        self.token_issuer = token_issuer
        self.prediction_client = prediction_client
        self.placeholders = PayloadPlaceholders(
            udi=settings.udi_placeholder,
            product_id=settings.product_id_placeholder,
            target=settings.target_placeholder,
        )

    def handle(self, method: str, body: Any) -> PredictionResult:
        """Relay one inbound call.

        ``body`` is either the decoded JSON object or the raw request bytes;
        raw bytes are decoded only after the method and configuration checks.
        """
        if method.upper() != "POST":
            raise MethodNotAllowed()

        missing = self.settings.missing_credentials()
        if missing:
            logger.error(
                "Server configuration error: WML credentials not set",
                extra={"stage": "configuration", "missing": ",".join(missing)},
            )
            raise ServerMisconfigured()

        if isinstance(body, (bytes, bytearray)):
            body = parse_body(bytes(body))
        resolved = resolve_input(body)
        start_time = time.perf_counter()

        logger.info("Requesting IAM token", extra={"stage": "authenticate"})
        token = self.token_issuer.issue(self.settings.wml_api_key)
        logger.info(
            "IAM token issued",
            extra={"stage": "authenticate", "elapsed_ms": _elapsed_ms(start_time)},
        )

        payload = build_payload(resolved, self.placeholders)
        shape = "compact" if isinstance(resolved, CompactInput) else "pass-through"
        logger.info(
            "Submitting %s payload",
            shape,
            extra={"stage": "predict", "endpoint": self.settings.wml_endpoint_url},
        )
        data = self.prediction_client.predict(payload, token)
        logger.info(
            "Prediction response received",
            extra={"stage": "predict", "elapsed_ms": _elapsed_ms(start_time)},
        )

        result = extract_prediction(data)
        logger.info(
            "Prediction relayed",
            extra={
                "stage": "extract",
                "prediction": result.prediction,
                "confidence": result.confidence,
                "elapsed_ms": _elapsed_ms(start_time),
            },
        )
        return result

    def close(self) -> None:
        self.token_issuer.close()
        self.prediction_client.close()


@lru_cache
def build_default_proxy() -> PredictionProxy:
    """Factory that wires the proxy with IBM Cloud collaborators."""
    settings = get_settings()
    token_issuer = IAMTokenIssuer(
        token_url=settings.iam_token_url,
        timeout=settings.request_timeout,
    )
    prediction_client = WatsonPredictionClient(
        endpoint_url=settings.wml_endpoint_url,
        timeout=settings.request_timeout,
    )
    return PredictionProxy(
        settings=settings,
        token_issuer=token_issuer,
        prediction_client=prediction_client,
    )
