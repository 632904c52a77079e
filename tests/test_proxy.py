from __future__ import annotations

import logging
from typing import Any, Dict, List

import pytest

from services.errors import (
    AuthenticationFailed,
    InvalidRequestBody,
    InvalidUpstreamResponse,
    MethodNotAllowed,
    PredictionRequestFailed,
    ServerMisconfigured,
)
from services.proxy import PredictionProxy
from settings import Settings

COMPACT_BODY = {"input_data": [{"values": [["L", 298.1, 308.6, 1551, 42.8, 0]]}]}
OVERSTRAIN = {"predictions": [{"values": [["Overstrain Failure", [0.1, 0.7, 0.2]]]}]}


class StubTokenIssuer:
    def __init__(self, token: str = "token-abc", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.calls: List[str] = []
        self.closed = False

    def issue(self, api_key: str) -> str:
        self.calls.append(api_key)
        if self.error is not None:
            raise self.error
        return self.token

    def close(self) -> None:
        self.closed = True


class StubPredictionClient:
    def __init__(self, response: Dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.response = response if response is not None else OVERSTRAIN
        self.error = error
        self.calls: List[tuple[Dict[str, Any], str]] = []
        self.closed = False

    def predict(self, payload: Dict[str, Any], token: str) -> Dict[str, Any]:
        self.calls.append((payload, token))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        self.closed = True


def _settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "wml_api_key": "test-key",
        "wml_endpoint_url": "https://wml.example.test/predictions",
    }
    values.update(overrides)
    return Settings(**values)


def _proxy(
    settings: Settings | None = None,
    issuer: StubTokenIssuer | None = None,
    client: StubPredictionClient | None = None,
) -> PredictionProxy:
    return PredictionProxy(
        settings=settings or _settings(),
        token_issuer=issuer or StubTokenIssuer(),
        prediction_client=client or StubPredictionClient(),
    )


def test_handle_returns_label_and_confidence() -> None:
    issuer = StubTokenIssuer()
    client = StubPredictionClient()
    proxy = _proxy(issuer=issuer, client=client)

    result = proxy.handle("POST", COMPACT_BODY)

    assert result.prediction == "Overstrain Failure"
    assert result.confidence == pytest.approx(0.7)
    assert issuer.calls == ["test-key"]
    payload, token = client.calls[0]
    assert token == "token-abc"
    assert payload["input_data"][0]["values"][0] == [0, "L50070", "L", 298.1, 308.6, 1551, 42.8, 0, 1]


def test_handle_uses_configured_target_placeholder() -> None:
    client = StubPredictionClient()
    proxy = _proxy(settings=_settings(target_placeholder=0), client=client)

    proxy.handle("post", COMPACT_BODY)

    payload, _ = client.calls[0]
    assert payload["input_data"][0]["values"][0][-1] == 0


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "OPTIONS"])
def test_non_post_methods_are_rejected_without_network(method: str) -> None:
    issuer = StubTokenIssuer()
    client = StubPredictionClient()
    proxy = _proxy(issuer=issuer, client=client)

    with pytest.raises(MethodNotAllowed) as excinfo:
        proxy.handle(method, COMPACT_BODY)

    assert excinfo.value.status_code == 405
    assert str(excinfo.value) == "Method Not Allowed"
    assert issuer.calls == []
    assert client.calls == []


@pytest.mark.parametrize(
    "overrides",
    [{"wml_api_key": None}, {"wml_endpoint_url": None}, {"wml_api_key": None, "wml_endpoint_url": None}],
)
def test_missing_credentials_fail_before_network(overrides: Dict[str, Any], caplog) -> None:
    issuer = StubTokenIssuer()
    client = StubPredictionClient()
    proxy = _proxy(settings=_settings(**overrides), issuer=issuer, client=client)

    with caplog.at_level(logging.ERROR, logger="services.proxy"):
        with pytest.raises(ServerMisconfigured) as excinfo:
            proxy.handle("POST", COMPACT_BODY)

    assert excinfo.value.status_code == 500
    assert issuer.calls == []
    assert client.calls == []
    assert any(record.stage == "configuration" for record in caplog.records)


def test_authentication_failure_skips_prediction() -> None:
    issuer = StubTokenIssuer(error=AuthenticationFailed(upstream_status=401))
    client = StubPredictionClient()
    proxy = _proxy(issuer=issuer, client=client)

    with pytest.raises(AuthenticationFailed, match="Authentication"):
        proxy.handle("POST", COMPACT_BODY)

    assert client.calls == []


def test_prediction_failure_propagates() -> None:
    client = StubPredictionClient(error=PredictionRequestFailed.from_status(502))
    proxy = _proxy(client=client)

    with pytest.raises(PredictionRequestFailed, match="Status: 502"):
        proxy.handle("POST", COMPACT_BODY)


def test_malformed_upstream_response_is_rejected() -> None:
    proxy = _proxy(client=StubPredictionClient(response={"predictions": [{"values": []}]}))

    with pytest.raises(InvalidUpstreamResponse):
        proxy.handle("POST", COMPACT_BODY)


def test_unusable_body_fails_before_network() -> None:
    issuer = StubTokenIssuer()
    proxy = _proxy(issuer=issuer)

    with pytest.raises(InvalidRequestBody):
        proxy.handle("POST", {"unexpected": True})

    assert issuer.calls == []


def test_pass_through_body_is_forwarded_unchanged() -> None:
    body = {
        "input_data": [
            {
                "fields": ["UDI", "Product ID", "Type", "Air temperature [K]", "Process temperature [K]",
                           "Rotational speed [rpm]", "Torque [Nm]", "Tool wear [min]", "Target"],
                "values": [[5, "L47184", "L", 298.2, 308.7, 1408, 40.0, 9, 0]],
            }
        ]
    }
    client = StubPredictionClient()
    proxy = _proxy(client=client)

    proxy.handle("POST", body)

    payload, _ = client.calls[0]
    assert payload == body


def test_close_releases_both_collaborators() -> None:
    issuer = StubTokenIssuer()
    client = StubPredictionClient()

    _proxy(issuer=issuer, client=client).close()

    assert issuer.closed is True
    assert client.closed is True


def test_raw_json_bytes_are_decoded() -> None:
    client = StubPredictionClient()
    proxy = _proxy(client=client)

    result = proxy.handle("POST", b'{"input_data": [{"values": [["M", 300, 310, 1500, 40, 3]]}]}')

    assert result.prediction == "Overstrain Failure"
    payload, _ = client.calls[0]
    assert payload["input_data"][0]["values"][0][2:8] == ["M", 300, 310, 1500, 40, 3]


@pytest.mark.parametrize("raw", [b"", b"{not json"])
def test_undecodable_bytes_raise_invalid_body(raw: bytes) -> None:
    issuer = StubTokenIssuer()
    proxy = _proxy(issuer=issuer)

    with pytest.raises(InvalidRequestBody):
        proxy.handle("POST", raw)

    assert issuer.calls == []


def test_configuration_is_checked_before_body_is_decoded() -> None:
    proxy = _proxy(settings=_settings(wml_api_key=None))

    with pytest.raises(ServerMisconfigured):
        proxy.handle("POST", b"")


def test_each_stage_logs_before_and_after(caplog) -> None:
    proxy = _proxy()

    with caplog.at_level(logging.INFO, logger="services.proxy"):
        proxy.handle("POST", COMPACT_BODY)

    messages = [(record.stage, record.getMessage()) for record in caplog.records]
    assert messages == [
        ("authenticate", "Requesting IAM token"),
        ("authenticate", "IAM token issued"),
        ("predict", "Submitting compact payload"),
        ("predict", "Prediction response received"),
        ("extract", "Prediction relayed"),
    ]
    assert all("test-key" not in record.getMessage() for record in caplog.records)
