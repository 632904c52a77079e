"""Inbound body resolution and downstream payload shaping."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from models.records import SensorReading
from services.errors import InvalidRequestBody

MODEL_FIELDS = (
    "UDI",
    "Product ID",
    "Type",
    "Air temperature [K]",
    "Process temperature [K]",
    "Rotational speed [rpm]",
    "Torque [Nm]",
    "Tool wear [min]",
    "Target",
)


@dataclass(frozen=True)
class PayloadPlaceholders:
    """Constants for the schema fields the caller never supplies."""

    udi: int = 0
    product_id: str = "L50070"
    target: int = 1


@dataclass(frozen=True)
class CompactInput:
    reading: SensorReading


@dataclass(frozen=True)
class PassThroughInput:
    payload: Dict[str, Any]


ResolvedInput = Union[CompactInput, PassThroughInput]


def parse_body(raw: bytes) -> Any:
    """Decode a raw JSON request body."""
    if not raw:
        raise InvalidRequestBody("Request body is empty.")
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidRequestBody("Request body is not valid JSON.") from exc


def resolve_input(body: Any) -> ResolvedInput:
    """Decide once whether ``body`` is a compact reading or a full payload.

    A first ``input_data`` block carrying ``fields`` is forwarded as-is;
    otherwise its first ``values`` row must hold exactly six readings.
    """
    if not isinstance(body, Mapping):
        raise InvalidRequestBody("Request body must be a JSON object.")

    input_data = body.get("input_data")
    if not isinstance(input_data, list) or not input_data:
        raise InvalidRequestBody("Request body must contain a non-empty 'input_data' list.")

    block = input_data[0]
    if not isinstance(block, Mapping):
        raise InvalidRequestBody("'input_data[0]' must be an object.")

    if "fields" in block:
        return PassThroughInput(payload=copy.deepcopy(dict(body)))

    values = block.get("values")
    if not isinstance(values, list) or not values or not isinstance(values[0], list):
        raise InvalidRequestBody("'input_data[0].values[0]' must be a list of sensor values.")

    try:
        reading = SensorReading.from_values(values[0])
    except ValueError as exc:
        raise InvalidRequestBody(str(exc)) from exc
    return CompactInput(reading=reading)


def build_payload(resolved: ResolvedInput, placeholders: PayloadPlaceholders) -> Dict[str, Any]:
    if isinstance(resolved, PassThroughInput):
        return resolved.payload

    row = [
        placeholders.udi,
        placeholders.product_id,
        *resolved.reading.as_values(),
        placeholders.target,
    ]
    return {"input_data": [{"fields": list(MODEL_FIELDS), "values": [row]}]}
