"""
Signature Functions
===================
HMAC signature computation and verification for request authentication.

The canonical form must match existing clients byte for byte: the values of
the request parameters, ordered by key, joined with a dash and lower-cased
in the ASCII range only. Keys are not part of the signed string, so swapping values
between two keys that sort next to each other yields the same digest.
Clients depend on this form, so it is kept as is.
"""

import hmac
import hashlib
import string
import time
import uuid
from typing import Dict, Mapping, Optional, Union

# Configuration
DEFAULT_EXPIRATION_SECONDS = 300  # 5 minutes
SIGNATURE_ALGORITHM = "sha256"
VALUE_DELIMITER = "-"

# Keys used to carry the token and delivery hints; never signed
TOKEN_KEY = "token"
TRANSPORT_KEYS = frozenset({TOKEN_KEY, "DeliveryType", "DeliveryMethod"})

# Only ASCII letters are folded; other characters are signed as sent
ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

Secret = Union[str, bytes]


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, bytes):
        return secret
    return secret.encode()


def strip_transport_keys(parameters: Mapping[str, str]) -> Dict[str, str]:
    """
    Return a copy of the parameters without the token and delivery hints.

    Args:
        parameters: Decoded query parameters

    Returns:
        Parameters that take part in the signature
    """
    return {
        key: value for key, value in parameters.items()
        if key not in TRANSPORT_KEYS
    }


def canonical_string(parameters: Mapping[str, str]) -> str:
    """Build the string that gets signed."""
    ordered = [str(parameters[key]) for key in sorted(parameters)]
    return VALUE_DELIMITER.join(ordered).translate(ASCII_LOWER)


def compute_signature(parameters: Mapping[str, str], secret: Secret) -> str:
    """
    Compute the HMAC-SHA256 signature of a set of request parameters.

    The caller removes transport keys first (see ``strip_transport_keys``).

    Args:
        parameters: Request parameters to sign
        secret: Shared application secret

    Returns:
        Lower-case hex-encoded HMAC-SHA256 signature
    """
    message = canonical_string(parameters)
    return hmac.new(
        _secret_bytes(secret),
        message.encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    parameters: Mapping[str, str],
    secret: Secret,
    provided_signature: str,
) -> bool:
    """
    Verify a client token against the server signature.

    Args:
        parameters: Request parameters, transport keys already removed
        secret: Shared application secret
        provided_signature: Token sent by the client

    Returns:
        True if the token matches
    """
    expected_signature = compute_signature(parameters, secret)
    return hmac.compare_digest(
        expected_signature.encode(),
        provided_signature.encode(),
    )


def check_timestamp_freshness(
    timestamp: int,
    window: int = DEFAULT_EXPIRATION_SECONDS,
    now: Optional[float] = None,
) -> bool:
    """
    Check that a timestamp lies within the freshness window.

    The window is symmetric: stale and future timestamps are treated alike.

    Args:
        timestamp: Unix timestamp from the request
        window: Maximum allowed difference in seconds
        now: Current time, defaults to ``time.time()``

    Returns:
        True if timestamp is acceptable
    """
    current_time = int(time.time() if now is None else now)
    return abs(timestamp - current_time) <= window


def sign_parameters(
    parameters: Mapping[str, str],
    secret: Secret,
    timestamp: Optional[int] = None,
) -> Dict[str, str]:
    """
    Client-side helper: add a timestamp and the matching token.

    Args:
        parameters: Query parameters the client wants to send
        secret: Shared application secret
        timestamp: Unix timestamp, defaults to now

    Returns:
        Parameters including ``timestamp`` and ``token``
    """
    signed = dict(parameters)
    signed["timestamp"] = str(int(time.time()) if timestamp is None else timestamp)
    signed[TOKEN_KEY] = compute_signature(strip_transport_keys(signed), secret)
    return signed


def generate_unique_id() -> str:
    """Generate a random UUID (version 4)."""
    return str(uuid.uuid4())
