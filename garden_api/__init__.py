"""
Garden API
==========
Signed-request authentication and resource dispatch for the forum API.
"""

__version__ = "0.1.0"

# Configuration
from garden_api.config import APIConfig

# Errors
from garden_api.errors import APIError, ErrorFamily, ErrorKind

# Signing
from garden_api.signing import (
    compute_signature,
    verify_signature,
    strip_transport_keys,
    check_timestamp_freshness,
    sign_parameters,
    generate_unique_id,
    AuthDecision,
    AuthResult,
    Credentials,
)

# Authentication
from garden_api.auth import (
    RequestAuthenticator,
    IdentityResolver,
    InMemoryIdentityResolver,
    RequestSession,
)

# Body normalization
from garden_api.body import NormalizedBody, normalize_body, StoredUpload

# Resources
from garden_api.resources import (
    AuthRequirement,
    DispatchDescriptor,
    ResourceHandler,
    ResourceRegistry,
    create_default_registry,
)

# Dispatch
from garden_api.dispatcher import (
    APIRequest,
    ApplicationLoader,
    Dispatcher,
    DispatchResult,
    DispatchState,
    RoutingDecision,
)

# Delivery
from garden_api.delivery import DeliveryFormat, select_delivery_format, cors_headers

__all__ = [
    # Configuration
    "APIConfig",
    # Errors
    "APIError",
    "ErrorFamily",
    "ErrorKind",
    # Signing
    "compute_signature",
    "verify_signature",
    "strip_transport_keys",
    "check_timestamp_freshness",
    "sign_parameters",
    "generate_unique_id",
    "AuthDecision",
    "AuthResult",
    "Credentials",
    # Authentication
    "RequestAuthenticator",
    "IdentityResolver",
    "InMemoryIdentityResolver",
    "RequestSession",
    # Body normalization
    "NormalizedBody",
    "normalize_body",
    "StoredUpload",
    # Resources
    "AuthRequirement",
    "DispatchDescriptor",
    "ResourceHandler",
    "ResourceRegistry",
    "create_default_registry",
    # Dispatch
    "APIRequest",
    "ApplicationLoader",
    "Dispatcher",
    "DispatchResult",
    "DispatchState",
    "RoutingDecision",
    # Delivery
    "DeliveryFormat",
    "select_delivery_format",
    "cors_headers",
]
