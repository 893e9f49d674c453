"""
Authentication Models
=====================
Data models and enums for request authentication.
"""

from typing import Optional, Union
from dataclasses import dataclass
from enum import Enum

from garden_api.errors import APIError, ErrorKind

Identity = Union[int, str]


class AuthDecision(str, Enum):
    """Authentication outcome."""
    ALLOW = "ALLOW"
    BLOCK = "BLOCK"


@dataclass
class Credentials:
    """Identity claims and signature extracted from a request query."""
    username: Optional[str] = None
    email: Optional[str] = None
    timestamp: Optional[str] = None
    token: Optional[str] = None

    @property
    def login(self) -> Optional[str]:
        """The username when given, otherwise the email."""
        return self.username or self.email


@dataclass
class AuthResult:
    """Result of authentication check."""
    decision: AuthDecision
    identity: Optional[Identity] = None
    error: Optional[APIError] = None

    @classmethod
    def allow(cls, identity: Identity) -> "AuthResult":
        return cls(decision=AuthDecision.ALLOW, identity=identity)

    @classmethod
    def block(cls, kind: ErrorKind) -> "AuthResult":
        return cls(decision=AuthDecision.BLOCK, error=APIError(kind))

    @property
    def allowed(self) -> bool:
        return self.decision is AuthDecision.ALLOW

    @property
    def reason_code(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None
