"""
structlog setup for SpliceDesk.

Everything is rendered as one JSON object per line on the stdlib root logger.
The OvenMediaEngine access token travels in request headers and occasionally
in URLs, so a scrubbing processor runs just before rendering.
"""

import logging
import re
from typing import Any

import structlog

from .settings import settings

REDACTED = "***REDACTED***"

# Substrings of event keys whose values are dropped outright
SECRET_KEYS = (
    "access_token",
    "token",
    "password",
    "secret",
    "authorization",
)

_CREDENTIAL_URL = re.compile(r"://[^:/@\s]+:[^@\s]+@")
_SECRET_PARAM = re.compile(r"\b(token|password)=[^&\s]+")


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        value = _CREDENTIAL_URL.sub("://***@", value)
        return _SECRET_PARAM.sub(r"\1=***", value)
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(v) for v in value]
    return value


def redact_secrets(_logger, _method, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: blank secret-named keys, mask secrets inside values."""
    for key, value in event_dict.items():
        if any(s in key.lower() for s in SECRET_KEYS):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _scrub(value)
    return event_dict


def configure_logging(level: str | None = None) -> None:
    """Route structlog through stdlib logging at ``level`` (default from settings)."""
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            redact_secrets,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Lazy logger bound to the service name and environment."""
    return structlog.get_logger(name, service="splicedesk", env=settings.env)
