"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

SensorValue = Union[str, int, float]


@dataclass(frozen=True, slots=True)
class SensorReading:
    """One machine reading in the positional order the model was trained on."""

    product_type: SensorValue
    air_temperature: SensorValue
    process_temperature: SensorValue
    rotational_speed: SensorValue
    torque: SensorValue
    tool_wear: SensorValue

    @classmethod
    def from_values(cls, values: Sequence[SensorValue]) -> "SensorReading":
        if len(values) != 6:
            raise ValueError(f"Expected 6 sensor values, got {len(values)}.")
        return cls(*values)

    def as_values(self) -> list[SensorValue]:
        return [
            self.product_type,
            self.air_temperature,
            self.process_temperature,
            self.rotational_speed,
            self.torque,
            self.tool_wear,
        ]


@dataclass(slots=True)
class PredictionResult:
    """Label and confidence relayed back to the caller."""

    prediction: str
    confidence: float
