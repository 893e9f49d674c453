"""
Resource Handlers
=================
Base class for API resources and the descriptor they return.

A resource does not write output itself. Each verb returns a
``DispatchDescriptor`` telling the framework which controller to run, or an
``APIError`` when the request cannot be served.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from garden_api.errors import APIError, not_implemented


class AuthRequirement(str, Enum):
    """Whether a request must, may or need not be authenticated."""
    REQUIRED = "required"
    OPTIONAL = "optional"
    NONE = "none"


@dataclass
class DispatchDescriptor:
    """Where a resource wants the request routed."""
    controller: str = ""
    method: str = "Index"
    arguments: Dict[str, Any] = field(default_factory=dict)
    application: Optional[str] = None
    authenticate: AuthRequirement = AuthRequirement.OPTIONAL


HandlerResult = Union[DispatchDescriptor, APIError]


class ResourceHandler:
    """
    Base class for API resources.

    Subclasses override the verbs they support. ``path`` is the lower-cased
    request path split on ``/``; ``path[1]`` is the resource name.
    """

    name: str = ""

    def get(self, path: List[str]) -> HandlerResult:
        return not_implemented(f"GET {self.name}")

    def post(self, path: List[str]) -> HandlerResult:
        return not_implemented(f"POST {self.name}")

    def put(self, path: List[str]) -> HandlerResult:
        return not_implemented(f"PUT {self.name}")

    def delete(self, path: List[str]) -> HandlerResult:
        return not_implemented(f"DELETE {self.name}")
