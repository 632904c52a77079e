"""Failure kinds raised by the prediction proxy."""

from __future__ import annotations


class PredictionProxyError(Exception):
    """Base class; ``status_code`` is the HTTP status reported to the caller."""

    status_code = 500
    stage = "proxy"


class MethodNotAllowed(PredictionProxyError):
    status_code = 405
    stage = "method_guard"

    def __init__(self, message: str = "Method Not Allowed") -> None:
        super().__init__(message)


class ServerMisconfigured(PredictionProxyError):
    stage = "configuration"

    def __init__(self, message: str = "Server configuration error.") -> None:
        super().__init__(message)


class InvalidRequestBody(PredictionProxyError):
    status_code = 400
    stage = "input"


class AuthenticationFailed(PredictionProxyError):
    stage = "authenticate"

    def __init__(
        self,
        message: str = "Authentication with IBM Cloud failed.",
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class PredictionRequestFailed(PredictionProxyError):
    stage = "predict"

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status

    @classmethod
    def from_status(cls, status: int) -> "PredictionRequestFailed":
        return cls(f"Prediction API call failed. Status: {status}.", upstream_status=status)


class InvalidUpstreamResponse(PredictionProxyError):
    stage = "extract"

    def __init__(
        self, message: str = "Invalid response structure from prediction API."
    ) -> None:
        super().__init__(message)
