"""
Structured Logging
==================
JSON logging for the API engine, with request and user context.

Usage:
    from garden_api.logging import setup_logging

    setup_logging(service_name="forum-api")

Modules log through ``structlog.get_logger(__name__)``; after
``setup_logging`` those events go through the stdlib root logger and come
out as one JSON object per line.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
service_name_var: ContextVar[str] = ContextVar("service_name", default="unknown")


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the request context attached."""

    def format(self, record: logging.LogRecord) -> str:
        # structlog records carry the event dict as their message
        if isinstance(record.msg, dict):
            event = dict(record.msg)
            message = event.pop("event", "")
        else:
            event = {}
            message = record.getMessage()

        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "service": service_name_var.get(),
            "request_id": request_id_var.get() or None,
            "user_id": user_id_var.get() or None,
            **event,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


# =============================================================================
# Setup
# =============================================================================

def _event_dict_as_message(logger, method_name, event_dict):
    """Pass the event dict through as the record message; JSONFormatter renders it."""
    return {"msg": event_dict}


def setup_logging(service_name: str, level: str = "INFO") -> logging.Logger:
    """
    Route stdlib and structlog output through one JSON handler on stdout.

    Args:
        service_name: Name reported in every record
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured root logger
    """
    service_name_var.set(service_name)
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers[:] = [handler]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            _event_dict_as_message,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return root_logger
