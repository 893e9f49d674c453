"""Themes API."""

from .base import ResourceHandler


class ThemesAPI(ResourceHandler):
    """Theme management. No verbs are implemented yet."""
