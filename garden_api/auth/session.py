"""
Request Session
===============
Session collaborator started once a request has been authenticated.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from garden_api.logging import user_id_var
from garden_api.signing.models import Identity

logger = structlog.get_logger(__name__)


@dataclass
class RequestSession:
    """
    Per-request session.

    Holds the identity established for the rest of request processing and
    exposes it to the logging context. Nothing is persisted.
    """
    user_id: Optional[Identity] = None
    persistent: bool = False

    def is_valid(self) -> bool:
        return self.user_id is not None

    def start(self, identity: Identity, persistent: bool = False) -> None:
        self.user_id = identity
        self.persistent = persistent
        user_id_var.set(str(identity))
        logger.debug("session_started", user_id=identity, persistent=persistent)
