"""
Identity Resolution
===================
Collaborator interface for looking up users by username or email, plus an
in-memory implementation for development and testing.
"""

from typing import Dict, Optional

from garden_api.signing.models import Identity


class IdentityResolver:
    """
    Resolves a username or an email to a stable user identifier.

    Implementations talk to the user store. Lookups may be slow; no timeout
    or retry is applied by this package.
    """

    def resolve_by_username(self, username: str) -> Optional[Identity]:
        raise NotImplementedError

    def resolve_by_email(self, email: str) -> Optional[Identity]:
        raise NotImplementedError

    def resolve(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[Identity]:
        """
        Get a user ID using either a username or an email.

        If both are given only the username is used, so a caller cannot try
        two lookups with one request.
        """
        if username:
            return self.resolve_by_username(username)
        if email:
            return self.resolve_by_email(email)
        return None


class InMemoryIdentityResolver(IdentityResolver):
    """
    Dictionary-backed resolver.

    For development and testing only.
    """

    def __init__(
        self,
        usernames: Optional[Dict[str, Identity]] = None,
        emails: Optional[Dict[str, Identity]] = None,
    ):
        self._usernames: Dict[str, Identity] = dict(usernames or {})
        self._emails: Dict[str, Identity] = dict(emails or {})

    def add_user(
        self,
        identity: Identity,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        if username:
            self._usernames[username] = identity
        if email:
            self._emails[email] = identity

    def resolve_by_username(self, username: str) -> Optional[Identity]:
        return self._usernames.get(username)

    def resolve_by_email(self, email: str) -> Optional[Identity]:
        return self._emails.get(email)
