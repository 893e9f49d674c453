"""Locales API."""

from .base import ResourceHandler


class LocalesAPI(ResourceHandler):
    """Locale management. No verbs are implemented yet."""
