"""Shared fixtures: a fixed clock, the three actor tiers and a draft post."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from factories import NOW, make_post
from newsdesk.models.actor import Actor, ActorRole
from newsdesk.models.post import Post
from newsdesk.workflow.engine import PublicationWorkflowEngine


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def future() -> datetime:
    return NOW + timedelta(hours=1)


@pytest.fixture
def engine() -> PublicationWorkflowEngine:
    return PublicationWorkflowEngine()


@pytest.fixture
def author() -> Actor:
    """An admin in approval mode (no CRUD grant)."""
    return Actor(id="admin-1", role=ActorRole.ADMIN, has_direct_access=False, name="Asha")


@pytest.fixture
def trusted_author() -> Actor:
    """An admin holding a CRUD grant."""
    return Actor(id="admin-2", role=ActorRole.ADMIN, has_direct_access=True, name="Ravi")


@pytest.fixture
def superadmin() -> Actor:
    return Actor(id="super-1", role=ActorRole.SUPERADMIN, name="Meera")


@pytest.fixture
def draft() -> Post:
    return make_post()
