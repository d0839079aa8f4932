"""Tests for the post state transition table."""

import pytest

from newsdesk.models.post import PostStatus
from newsdesk.workflow.engine import VALID_TRANSITIONS, can_transition


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (PostStatus.DRAFT, PostStatus.PENDING_APPROVAL),
        (PostStatus.DRAFT, PostStatus.PUBLISHED),
        (PostStatus.DRAFT, PostStatus.SCHEDULED),
        (PostStatus.PENDING_APPROVAL, PostStatus.DRAFT),
        (PostStatus.PENDING_APPROVAL, PostStatus.SCHEDULED),
        (PostStatus.SCHEDULED, PostStatus.PUBLISHED),
        (PostStatus.SCHEDULED, PostStatus.DRAFT),
        (PostStatus.PUBLISHED, PostStatus.PUBLISHED),
    ],
)
def test_allowed_transitions(current, target) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (PostStatus.PUBLISHED, PostStatus.DRAFT),
        (PostStatus.SCHEDULED, PostStatus.PENDING_APPROVAL),
        (PostStatus.PENDING_APPROVAL, PostStatus.PENDING_APPROVAL),
        (PostStatus.ARCHIVED, PostStatus.PUBLISHED),
    ],
)
def test_forbidden_transitions(current, target) -> None:
    assert not can_transition(current, target)


def test_every_status_has_an_entry() -> None:
    assert set(VALID_TRANSITIONS) == set(PostStatus)


def test_archived_is_terminal() -> None:
    assert VALID_TRANSITIONS[PostStatus.ARCHIVED] == frozenset()
