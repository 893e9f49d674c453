"""
API Errors
==========
Error kinds surfaced by authentication and dispatch, each carrying the HTTP
status the caller should answer with.

Errors are values: they travel inside ``AuthResult`` and ``DispatchResult``
instead of being raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorFamily(str, Enum):
    """High-level grouping for logging and monitoring."""
    AUTHENTICATION = "authentication"
    ROUTING = "routing"
    HANDLER = "handler"


class ErrorKind(str, Enum):
    """Every way a request can be rejected."""
    MISSING_QUERY = "missing_query"
    MISSING_IDENTITY = "missing_identity"
    MISSING_TIMESTAMP = "missing_timestamp"
    EXPIRED = "expired"
    MISSING_TOKEN = "missing_token"
    UNKNOWN_USER = "unknown_user"
    BAD_SIGNATURE = "bad_signature"
    RESOURCE_NOT_FOUND = "resource_not_found"
    NOT_IMPLEMENTED = "not_implemented"
    NO_CONTROLLER = "no_controller"

    @property
    def status(self) -> int:
        return _STATUS[self]

    @property
    def family(self) -> ErrorFamily:
        return _FAMILY.get(self, ErrorFamily.AUTHENTICATION)


_STATUS = {
    ErrorKind.MISSING_QUERY: 401,
    ErrorKind.MISSING_IDENTITY: 401,
    ErrorKind.MISSING_TIMESTAMP: 401,
    ErrorKind.EXPIRED: 401,
    ErrorKind.MISSING_TOKEN: 401,
    ErrorKind.UNKNOWN_USER: 401,
    ErrorKind.BAD_SIGNATURE: 401,
    ErrorKind.RESOURCE_NOT_FOUND: 404,
    ErrorKind.NOT_IMPLEMENTED: 501,
    ErrorKind.NO_CONTROLLER: 500,
}

_FAMILY = {
    ErrorKind.RESOURCE_NOT_FOUND: ErrorFamily.ROUTING,
    ErrorKind.NOT_IMPLEMENTED: ErrorFamily.HANDLER,
    ErrorKind.NO_CONTROLLER: ErrorFamily.HANDLER,
}

DEFAULT_MESSAGES = {
    ErrorKind.MISSING_QUERY: "No authentication query defined",
    ErrorKind.MISSING_IDENTITY: "Authentication required: Username or email must be specified",
    ErrorKind.MISSING_TIMESTAMP: "Authentication failed: A timestamp must be specified",
    ErrorKind.EXPIRED: "Authentication failed: The request is no longer valid",
    ErrorKind.MISSING_TOKEN: "Authentication failed: A token must be specified",
    ErrorKind.UNKNOWN_USER: "Authentication failed: The specified user doesn't exist",
    ErrorKind.BAD_SIGNATURE: "Authentication failed: Token and signature do not match",
    ErrorKind.RESOURCE_NOT_FOUND: "No such API found",
    ErrorKind.NOT_IMPLEMENTED: "Method Not Implemented",
    ErrorKind.NO_CONTROLLER: "No controller has been defined",
}


@dataclass(frozen=True)
class APIError:
    """A terminal request failure."""
    kind: ErrorKind
    message: str = ""
    detail: Optional[str] = None

    def __post_init__(self):
        if not self.message:
            object.__setattr__(self, "message", DEFAULT_MESSAGES[self.kind])

    @property
    def status(self) -> int:
        return self.kind.status

    @property
    def family(self) -> ErrorFamily:
        return self.kind.family

    @property
    def is_auth_error(self) -> bool:
        return self.family is ErrorFamily.AUTHENTICATION

    def to_response(self) -> Dict[str, Any]:
        """Convert to the JSON error envelope sent to clients."""
        return {
            "error": {
                "code": self.kind.value,
                "message": self.message,
                "family": self.family.value,
                "status": self.status,
            }
        }


def not_implemented(detail: Optional[str] = None) -> APIError:
    """Shortcut used by resource handlers for verbs they do not support."""
    return APIError(ErrorKind.NOT_IMPLEMENTED, detail=detail)
