from __future__ import annotations

import logging
import re
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import get_settings

_DEFAULT_EXTRA_KEYS = (
    "stage",
    "status",
    "upstream_status",
    "endpoint",
    "prediction",
    "confidence",
    "elapsed_ms",
    "reason",
    "missing",
)

_REDACTED = "***"
_BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*")
_API_KEY_PARAM_PATTERN = re.compile(r"(apikey=)[^&\s]+")

_configured = False


class ContextualFormatter(logging.Formatter):
    """Appends ``key=value`` pairs for the proxy's ``extra=`` attributes."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}"
            for key in self._extra_keys
            if getattr(record, key, None) is not None
        )
        return f"{message} | {context}" if context else message


class SecretRedactingFilter(logging.Filter):
    """Masks the WML API key and bearer tokens in rendered log messages."""

    def __init__(self, secrets: Iterable[str | None] | None = None) -> None:
        super().__init__()
        self._secrets = tuple(secret for secret in (secrets or ()) if secret)

    def redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, _REDACTED)
        text = _BEARER_PATTERN.sub(rf"\g<1>{_REDACTED}", text)
        return _API_KEY_PARAM_PATTERN.sub(rf"\g<1>{_REDACTED}", text)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(level: str | int | None = None) -> None:
    """Configure application-wide logging with contextual formatting."""
    global _configured
    if _configured:
        return

    settings = get_settings()
    log_level = level if level is not None else settings.log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "redact_secrets": {
                    "()": "logging_config.SecretRedactingFilter",
                    "secrets": [settings.wml_api_key],
                }
            },
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                    "filters": ["redact_secrets"],
                }
            },
            # httpx logs every request URL at INFO; the proxy logs its own stages.
            "loggers": {"httpx": {"level": "WARNING"}, "httpcore": {"level": "WARNING"}},
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
