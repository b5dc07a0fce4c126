"""Structured JSON logging for the subcast services.

Logs are emitted as single-line JSON objects. Secrets such as
``OPENAI_API_KEY`` or ``NIJIVOICE_API_KEY`` are masked before logging, as are
per-request credentials registered through :func:`secret_scope`.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from shared.config import settings


SERVICE_NAME = "subcast"

# Configure root logger for JSON output. Only the JSON message body is printed.
_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", settings.LOG_LEVEL).upper(), logging.INFO)
logging.basicConfig(level=_LEVEL, format="%(message)s")

_SECRET_KEYS = {"api_key", "OPENAI_API_KEY", "NIJIVOICE_API_KEY"}

_scoped_secrets: ContextVar[tuple[str, ...]] = ContextVar("scoped_secrets", default=())


def _current_secrets() -> list[str]:
    return [settings.OPENAI_API_KEY, settings.NIJIVOICE_API_KEY, *_scoped_secrets.get()]


@contextmanager
def secret_scope(*values: str | None) -> Iterator[None]:
    """Mask ``values`` in every log line emitted inside the ``with`` block."""
    extra = tuple(v for v in values if v)
    token = _scoped_secrets.set(_scoped_secrets.get() + extra)
    try:
        yield
    finally:
        _scoped_secrets.reset(token)


def _mask(value: Any) -> Any:
    """Replace occurrences of known secret values with ``[MASKED]``."""
    if isinstance(value, str):
        for secret in _current_secrets():
            if secret and secret in value:
                value = value.replace(secret, "[MASKED]")
    return value


def _log(level: int, event: str, **fields: object) -> None:
    data: dict[str, Any] = {"service": SERVICE_NAME, "event": event}
    for key, value in fields.items():
        if key in _SECRET_KEYS:
            data[key] = "[MASKED]"
        else:
            data[key] = _mask(value)
    logging.log(level, json.dumps(data, ensure_ascii=False, default=str))


def log_info(event: str, **fields: object) -> None:
    """Emit an informational JSON log line."""
    _log(logging.INFO, event, **fields)


def log_warning(event: str, **fields: object) -> None:
    """Emit a warning-level JSON log line."""
    _log(logging.WARNING, event, **fields)


def log_error(event: str, **fields: object) -> None:
    """Emit an error JSON log line."""
    _log(logging.ERROR, event, **fields)


def log_debug(event: str, **fields: object) -> None:
    """Emit a debug-level JSON log line."""
    _log(logging.DEBUG, event, **fields)


__all__ = [
    "log_info",
    "log_warning",
    "log_error",
    "log_debug",
    "secret_scope",
    "SERVICE_NAME",
]
