"""
Garden API Logging Module

Structured logging with request and user context.
"""

from .structured import (
    setup_logging,
    JSONFormatter,
    request_id_var,
    user_id_var,
    service_name_var,
)

__all__ = [
    "setup_logging",
    "JSONFormatter",
    "request_id_var",
    "user_id_var",
    "service_name_var",
]
