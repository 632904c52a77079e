"""IBM Cloud IAM token exchange."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from services.errors import AuthenticationFailed

logger = logging.getLogger(__name__)

API_KEY_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"


class TokenIssuer(Protocol):
    def issue(self, api_key: str) -> str:
        ...

    def close(self) -> None:
        ...


class IAMTokenIssuer:
    """Exchanges an API key for a short-lived bearer token."""

    def __init__(
        self,
        token_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.token_url = token_url
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def issue(self, api_key: str) -> str:
        try:
            response = self._client.post(
                self.token_url,
                data={"grant_type": API_KEY_GRANT_TYPE, "apikey": api_key},
                headers={"Accept": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(
                "Token request did not complete",
                extra={"stage": "authenticate", "reason": type(exc).__name__},
            )
            raise AuthenticationFailed() from exc

        if not response.is_success:
            logger.error(
                "Authentication with IBM Cloud failed: %s",
                response.text.strip()[:500],
                extra={"stage": "authenticate", "upstream_status": response.status_code},
            )
            raise AuthenticationFailed(upstream_status=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise AuthenticationFailed(upstream_status=response.status_code) from exc
        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            logger.error(
                "Token response carried no access_token",
                extra={"stage": "authenticate", "upstream_status": response.status_code},
            )
            raise AuthenticationFailed(upstream_status=response.status_code)
        return token
