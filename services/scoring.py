"""Watson Machine Learning scoring requests and response extraction."""

from __future__ import annotations

import logging
from numbers import Real
from typing import Any, Dict, Optional, Protocol

import httpx

from models.records import PredictionResult
from services.errors import InvalidUpstreamResponse, PredictionRequestFailed

logger = logging.getLogger(__name__)


class PredictionClient(Protocol):
    def predict(self, payload: Dict[str, Any], token: str) -> Dict[str, Any]:
        ...

    def close(self) -> None:
        ...


class WatsonPredictionClient:
    """Posts a scoring payload to a deployment endpoint."""

    def __init__(
        self,
        endpoint_url: Optional[str],
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def predict(self, payload: Dict[str, Any], token: str) -> Dict[str, Any]:
        if not self.endpoint_url:
            raise PredictionRequestFailed("Prediction endpoint URL is not configured.")

        try:
            response = self._client.post(
                self.endpoint_url,
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.InvalidURL as exc:
            raise PredictionRequestFailed("Prediction endpoint URL is invalid.") from exc
        except httpx.TimeoutException as exc:
            raise PredictionRequestFailed("Prediction API call timed out.") from exc
        except httpx.HTTPError as exc:
            raise PredictionRequestFailed(
                f"Prediction API call failed: {type(exc).__name__}."
            ) from exc

        if not response.is_success:
            logger.error(
                "Error response from IBM Watson: %s",
                response.text.strip()[:1000],
                extra={"stage": "predict", "upstream_status": response.status_code},
            )
            raise PredictionRequestFailed.from_status(response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidUpstreamResponse() from exc
        if not isinstance(data, dict):
            raise InvalidUpstreamResponse()
        return data


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def extract_prediction(data: Dict[str, Any]) -> PredictionResult:
    """Pull ``[label, probabilities]`` out of ``predictions[0].values[0]``."""
    try:
        record = data["predictions"][0]["values"][0]
    except (KeyError, IndexError, TypeError) as exc:
        logger.error(
            "Invalid response structure from prediction API",
            extra={"stage": "extract", "reason": "missing predictions[0].values[0]"},
        )
        raise InvalidUpstreamResponse() from exc

    if not isinstance(record, list) or len(record) < 2:
        logger.error(
            "Invalid response structure from prediction API",
            extra={"stage": "extract", "reason": "record is not [label, probabilities]"},
        )
        raise InvalidUpstreamResponse()

    label, probabilities = record[0], record[1]
    if not isinstance(label, str):
        logger.error(
            "Invalid response structure from prediction API",
            extra={"stage": "extract", "reason": "label is not a string"},
        )
        raise InvalidUpstreamResponse()

    if (
        not isinstance(probabilities, list)
        or not probabilities
        or not all(_is_number(p) for p in probabilities)
    ):
        logger.error(
            "Invalid response structure from prediction API",
            extra={"stage": "extract", "reason": "probabilities are not a numeric list"},
        )
        raise InvalidUpstreamResponse()

    return PredictionResult(prediction=label, confidence=float(max(probabilities)))
