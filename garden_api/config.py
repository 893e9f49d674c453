"""
API Configuration
=================
Shared secret, freshness window and transport options, read from the
environment.
"""

import os
from dataclasses import dataclass, field

from garden_api.signing.signature import DEFAULT_EXPIRATION_SECONDS

TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


@dataclass
class APIConfig:
    """Configuration for request authentication and dispatch."""
    secret: str = field(default_factory=lambda: os.getenv("API_SECRET", ""))
    expiration: int = field(
        default_factory=lambda: int(os.getenv("API_EXPIRATION", str(DEFAULT_EXPIRATION_SECONDS)))
    )
    allow_cors: bool = field(default_factory=lambda: _env_bool("API_ALLOW_CORS"))
    upload_dir: str = field(default_factory=lambda: os.getenv("API_UPLOAD_DIR", "uploads"))
    path_prefix: str = field(default_factory=lambda: os.getenv("API_PATH_PREFIX", "/"))

    def validate(self) -> None:
        if not self.secret:
            raise ValueError("API_SECRET environment variable is required")
        if self.expiration <= 0:
            raise ValueError("API_EXPIRATION must be a positive number of seconds")
