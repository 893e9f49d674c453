"""
Response Delivery
=================
Response format selection and CORS headers.
"""

from enum import Enum
from typing import Dict, Optional

from garden_api.config import APIConfig

CORS_ALLOWED_HEADERS = "Origin, X-Requested-With, Content-Type, Accept"


class DeliveryFormat(str, Enum):
    JSON = "json"
    XML = "xml"


def select_delivery_format(accept: Optional[str]) -> DeliveryFormat:
    """XML only when the client asks for exactly ``application/xml``."""
    if accept and accept.strip().lower() == "application/xml":
        return DeliveryFormat.XML
    return DeliveryFormat.JSON


def cors_headers(config: APIConfig) -> Dict[str, str]:
    if not config.allow_cors:
        return {}
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": CORS_ALLOWED_HEADERS,
    }
