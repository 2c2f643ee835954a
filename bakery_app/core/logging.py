"""
Structured logging for the bakery service.

Every record is stamped with the service name, version and environment, and
with the id of the HTTP request being served (``-`` outside of a request).
The request id is bound by the request logging middleware through
``bind_request_id``.
"""

import logging
import sys
from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from bakery_app.core.config import Settings, get_settings

LOGGER_NAME = "bakery"
JSON_FIELDS = "%(timestamp)s %(levelname)s %(name)s %(request_id)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(request_id: str) -> Token:
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        return True


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines with ``level``/``logger`` keys and the service identity on every record."""

    def __init__(self, settings: Settings, **kwargs: Any) -> None:
        super().__init__(
            JSON_FIELDS,
            timestamp=True,
            rename_fields={"levelname": "level", "name": "logger"},
            static_fields={
                "service": settings.app_name,
                "version": settings.app_version,
                "environment": settings.environment,
            },
            **kwargs,
        )

    def add_fields(
        self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if log_record.get("request_id") == "-":
            del log_record["request_id"]


def build_formatter(settings: Settings) -> logging.Formatter:
    if settings.log_format.lower() == "json":
        return ServiceJsonFormatter(settings)
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure the ``bakery`` logger. Safe to call again; handlers are replaced."""
    settings = settings or get_settings()
    service_logger = logging.getLogger(LOGGER_NAME)
    service_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(build_formatter(settings))

    service_logger.handlers.clear()
    service_logger.addHandler(handler)
    service_logger.propagate = False
    return service_logger


logger = setup_logging()
