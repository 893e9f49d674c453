"""
Request Authenticator
=====================
Token-based, per-request authentication.

The whole query string is turned into parameters, the token and delivery
hints are removed, and the rest is signed the same way the client signed it.
A matching token proves the client knows the shared secret.
"""

import time
from typing import Callable, Dict, Optional
from urllib.parse import parse_qsl

import structlog

from garden_api.config import APIConfig
from garden_api.errors import ErrorKind
from garden_api.signing.models import AuthResult, Credentials
from garden_api.signing.signature import (
    TOKEN_KEY,
    check_timestamp_freshness,
    strip_transport_keys,
    verify_signature,
)
from .identity import IdentityResolver

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


def parse_query(raw_query: str) -> Dict[str, str]:
    """Decode a query string; the last value wins for repeated keys."""
    return dict(parse_qsl(raw_query, keep_blank_values=True))


def _present(value: Optional[str]) -> Optional[str]:
    # "0" counts as absent, like an empty value
    if not value or value == "0":
        return None
    return value


def extract_credentials(parameters: Dict[str, str]) -> Credentials:
    """Pull the authentication fields out of decoded parameters."""
    return Credentials(
        username=_present(parameters.get("username")),
        email=_present(parameters.get("email")),
        timestamp=_present(parameters.get("timestamp")),
        token=_present(parameters.get(TOKEN_KEY)),
    )


def has_login(parameters: Dict[str, str]) -> bool:
    """True when a username or an email was supplied."""
    return extract_credentials(parameters).login is not None


class RequestAuthenticator:
    """
    Validates signed request queries.

    Stateless apart from its injected collaborators, so one instance can
    serve concurrent requests.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        config: Optional[APIConfig] = None,
        clock: Clock = time.time,
    ):
        self.resolver = resolver
        self.config = config or APIConfig()
        self.clock = clock

    def authenticate(self, raw_query: Optional[str]) -> AuthResult:
        """
        Authenticate a request from its raw query string.

        Args:
            raw_query: Query string without the leading ``?``

        Returns:
            AuthResult carrying the resolved identity or the rejection kind
        """
        if not raw_query:
            return self._reject(ErrorKind.MISSING_QUERY)

        parameters = parse_query(raw_query)
        credentials = extract_credentials(parameters)
        signed = strip_transport_keys(parameters)

        if credentials.login is None:
            return self._reject(ErrorKind.MISSING_IDENTITY)

        if credentials.timestamp is None:
            return self._reject(ErrorKind.MISSING_TIMESTAMP)

        if not self._is_fresh(credentials.timestamp):
            return self._reject(ErrorKind.EXPIRED, timestamp=credentials.timestamp)

        if credentials.token is None:
            return self._reject(ErrorKind.MISSING_TOKEN)

        identity = self.resolver.resolve(credentials.username, credentials.email)
        if identity is None:
            return self._reject(ErrorKind.UNKNOWN_USER, login=credentials.login)

        if not verify_signature(signed, self.config.secret, credentials.token):
            return self._reject(ErrorKind.BAD_SIGNATURE, login=credentials.login)

        logger.info("api_request_authenticated", user_id=identity)
        return AuthResult.allow(identity)

    def _is_fresh(self, timestamp: str) -> bool:
        try:
            value = int(float(timestamp))
        except (ValueError, OverflowError):
            return False
        return check_timestamp_freshness(value, self.config.expiration, now=self.clock())

    def _reject(self, kind: ErrorKind, **context) -> AuthResult:
        logger.warning("api_authentication_failed", code=kind.value, **context)
        return AuthResult.block(kind)
