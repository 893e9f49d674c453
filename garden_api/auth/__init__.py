"""
Authentication Module
=====================
Signed-query authentication, identity resolution and request sessions.
"""

from .authenticator import RequestAuthenticator, parse_query, extract_credentials, has_login
from .identity import IdentityResolver, InMemoryIdentityResolver
from .session import RequestSession

__all__ = [
    "RequestAuthenticator",
    "parse_query",
    "extract_credentials",
    "has_login",
    "IdentityResolver",
    "InMemoryIdentityResolver",
    "RequestSession",
]
