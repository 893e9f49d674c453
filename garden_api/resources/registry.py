"""
Resource Registry
=================
Maps resource names to handler instances.
"""

from typing import Callable, Dict, List, Optional, Type, TypeVar

import structlog

from .base import ResourceHandler

logger = structlog.get_logger(__name__)

H = TypeVar("H", bound=Type[ResourceHandler])


class ResourceRegistry:
    """
    Explicit name -> handler table, filled at startup.

    Names are matched exactly against the lower-cased resource segment of
    the request path.
    """

    def __init__(self):
        self._handlers: Dict[str, ResourceHandler] = {}

    def register(self, name: str, handler: ResourceHandler) -> None:
        key = name.lower()
        if key in self._handlers:
            raise ValueError(f"Resource {key!r} is already registered")
        handler.name = key
        self._handlers[key] = handler
        logger.debug("resource_registered", resource=key, handler=type(handler).__name__)

    def resource(self, name: str) -> Callable[[H], H]:
        """Class decorator registering an instance of the decorated handler."""
        def decorator(cls: H) -> H:
            self.register(name, cls())
            return cls
        return decorator

    def lookup(self, name: str) -> Optional[ResourceHandler]:
        return self._handlers.get(name)

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def create_default_registry() -> ResourceRegistry:
    """Registry with the bundled resources."""
    from .locales import LocalesAPI
    from .themes import ThemesAPI

    registry = ResourceRegistry()
    registry.register("locales", LocalesAPI())
    registry.register("themes", ThemesAPI())
    return registry
