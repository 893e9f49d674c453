"""
Request Signing Module
======================
HMAC signing of request parameters and freshness checks.
"""

from .models import AuthDecision, AuthResult, Credentials, Identity
from .signature import (
    compute_signature,
    canonical_string,
    verify_signature,
    strip_transport_keys,
    check_timestamp_freshness,
    sign_parameters,
    generate_unique_id,
    DEFAULT_EXPIRATION_SECONDS,
    SIGNATURE_ALGORITHM,
    TOKEN_KEY,
    TRANSPORT_KEYS,
)

__all__ = [
    # Models
    "AuthDecision",
    "AuthResult",
    "Credentials",
    "Identity",
    # Signature
    "compute_signature",
    "canonical_string",
    "verify_signature",
    "strip_transport_keys",
    "check_timestamp_freshness",
    "sign_parameters",
    "generate_unique_id",
    "DEFAULT_EXPIRATION_SECONDS",
    "SIGNATURE_ALGORITHM",
    "TOKEN_KEY",
    "TRANSPORT_KEYS",
]
