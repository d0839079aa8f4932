"""Authentication glue — session user to workflow actor."""

from newsdesk.auth.session import actor_from_session, get_user, require_actor

__all__ = ["actor_from_session", "get_user", "require_actor"]
