"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PredictionResponse(BaseModel):
    """Simplified model output returned to the caller."""

    prediction: str = Field(..., description="Predicted failure label, e.g. 'No Failure'.")
    confidence: float = Field(
        ..., description="Highest class probability reported by the model."
    )


class ErrorResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    configured: bool = Field(
        ..., description="Whether both WML credentials are present."
    )
