"""Session adapter — turns the authenticated session user into an ``Actor``."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from newsdesk.models.actor import Actor, ActorRole
from newsdesk.workflow.errors import AuthorizationError

logger = logging.getLogger(__name__)


def get_user(session: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Extract the authenticated user from the session, if present."""
    if not session:
        return None
    user = session.get("user")
    return user if isinstance(user, dict) else None


def actor_from_session(session: Mapping[str, Any] | None) -> Actor | None:
    """Build the session's actor, computing its direct-access capability once.

    Returns None for anonymous sessions and for users whose role is not an
    editorial one.
    """
    user = get_user(session)
    if not user or not user.get("id"):
        return None
    try:
        role = ActorRole(user.get("role", ""))
    except ValueError:
        logger.warning("Ignoring session user with unknown role=%s", user.get("role"))
        return None
    return Actor.from_grant(
        str(user["id"]),
        role,
        crud_grant=bool(user.get("crud_access", False)),
        name=str(user.get("name", "")),
    )


def require_actor(session: Mapping[str, Any] | None) -> Actor:
    """Return the session's actor or raise ``AuthorizationError``."""
    actor = actor_from_session(session)
    if actor is None:
        raise AuthorizationError("Authentication required")
    return actor
