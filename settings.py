from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_IAM_TOKEN_URL = "https://iam.cloud.ibm.com/identity/token"

_API_KEY_ENV = "WML_API_KEY"
_ENDPOINT_URL_ENV = "WML_ENDPOINT_URL"
_IAM_TOKEN_URL_ENV = "WML_IAM_TOKEN_URL"
_TIMEOUT_ENV = "WML_REQUEST_TIMEOUT"
_UDI_ENV = "WML_UDI_PLACEHOLDER"
_PRODUCT_ID_ENV = "WML_PRODUCT_ID_PLACEHOLDER"
_TARGET_ENV = "WML_TARGET_PLACEHOLDER"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    wml_api_key: Optional[str]
    wml_endpoint_url: Optional[str]
    iam_token_url: str = DEFAULT_IAM_TOKEN_URL
    request_timeout: float = 30.0
    udi_placeholder: int = 0
    product_id_placeholder: str = "L50070"
    target_placeholder: int = 1
    log_level: str = "INFO"

    def missing_credentials(self) -> list[str]:
        """Names of the required environment variables that are unset."""
        missing: list[str] = []
        if not self.wml_api_key:
            missing.append(_API_KEY_ENV)
        if not self.wml_endpoint_url:
            missing.append(_ENDPOINT_URL_ENV)
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing_credentials()


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return int(candidate)
    except ValueError:
        return default


def _read_timeout(default: float) -> float:
    value = os.getenv(_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        wml_api_key=_read_optional_env(_API_KEY_ENV, None),
        wml_endpoint_url=_read_optional_env(_ENDPOINT_URL_ENV, None),
        iam_token_url=_read_str_env(_IAM_TOKEN_URL_ENV, DEFAULT_IAM_TOKEN_URL),
        request_timeout=_read_timeout(30.0),
        udi_placeholder=_read_int_env(_UDI_ENV, 0),
        product_id_placeholder=_read_str_env(_PRODUCT_ID_ENV, "L50070"),
        target_placeholder=_read_int_env(_TARGET_ENV, 1),
        log_level=_read_log_level("INFO"),
    )
