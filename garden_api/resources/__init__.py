"""
Resources Module
================
Resource handler contract, registry and bundled resources.
"""

from .base import AuthRequirement, DispatchDescriptor, HandlerResult, ResourceHandler
from .registry import ResourceRegistry, create_default_registry
from .locales import LocalesAPI
from .themes import ThemesAPI

__all__ = [
    "AuthRequirement",
    "DispatchDescriptor",
    "HandlerResult",
    "ResourceHandler",
    "ResourceRegistry",
    "create_default_registry",
    "LocalesAPI",
    "ThemesAPI",
]
