"""Structured logging for the registration backend.

Log events are snake_case identifiers with key/value context. Every entry
emitted while a request is being handled carries that request's short
correlation ID. Credential-bearing keys are masked before rendering.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any
from uuid import uuid4

import structlog

from registration_api.config import Settings, get_settings

# Correlation ID of the request currently being handled
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "***"
SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "authorization",
        "client_secret",
        "sharepoint_client_secret",
        "token",
    }
)

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "msal")


def add_request_id(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Attach the current request's correlation ID, when there is one."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def redact_secrets(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask values logged under credential-bearing keys."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def build_processors(settings: Settings) -> list[structlog.typing.Processor]:
    """Processor chain: enrichment, redaction, then the renderer.

    Development renders coloured console lines; every other environment
    renders one JSON object per line for log aggregation.
    """
    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_id,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def configure_logging() -> None:
    """Route structlog through stdlib logging at the configured level."""
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Short correlation ID for one request."""
    return uuid4().hex[:8]
