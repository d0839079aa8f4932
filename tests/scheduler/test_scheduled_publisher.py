"""Tests for ScheduledPublisher."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from factories import NOW, make_post
from newsdesk.models.post import PostStatus
from newsdesk.scheduler.publisher import ScheduledPublisher

DUE_AT = NOW - timedelta(minutes=5)


def _due_post(post_id: str = "post-1"):
    return make_post(
        post_id=post_id,
        status=PostStatus.SCHEDULED,
        publish_at=DUE_AT,
        schedule_approved=True,
    )


@pytest.fixture
def posts_repo():
    repo = AsyncMock()
    repo.list_due_scheduled.return_value = [_due_post()]
    repo.get_with_etag.side_effect = lambda post_id, _pk: (_due_post(post_id), f"etag-{post_id}")
    repo.replace_if_unmodified.return_value = True
    return repo


@pytest.fixture
def activity_repo():
    return AsyncMock()


@pytest.fixture
def events():
    return AsyncMock()


@pytest.fixture
def publisher(posts_repo, activity_repo, events):
    return ScheduledPublisher(
        posts_repo, activity_repo, events, poll_seconds=0.01, clock=lambda: NOW
    )


async def test_publishes_due_post(publisher, posts_repo, activity_repo, events):
    count = await publisher.publish_due_posts()

    assert count == 1
    posts_repo.list_due_scheduled.assert_awaited_once_with(NOW)
    saved, etag = posts_repo.replace_if_unmodified.call_args[0]
    assert saved.status == PostStatus.PUBLISHED
    assert saved.published_at == NOW
    assert etag == "etag-post-1"
    record = activity_repo.record.call_args[0][0]
    assert record.actor_id == "system"
    assert record.details["delay_minutes"] == 5
    events.publish.assert_awaited_once()


async def test_explicit_now_overrides_clock(publisher, posts_repo):
    later = NOW + timedelta(hours=1)

    await publisher.publish_due_posts(later)

    posts_repo.list_due_scheduled.assert_awaited_once_with(later)


async def test_skips_post_modified_concurrently(publisher, posts_repo, activity_repo):
    posts_repo.replace_if_unmodified.return_value = False

    count = await publisher.publish_due_posts()

    assert count == 0
    activity_repo.record.assert_not_called()


async def test_skips_post_cancelled_since_listing(publisher, posts_repo):
    posts_repo.get_with_etag.side_effect = None
    posts_repo.get_with_etag.return_value = (make_post(status=PostStatus.DRAFT), "etag-1")

    count = await publisher.publish_due_posts()

    assert count == 0
    posts_repo.replace_if_unmodified.assert_not_called()


async def test_skips_post_deleted_since_listing(publisher, posts_repo):
    posts_repo.get_with_etag.side_effect = None
    posts_repo.get_with_etag.return_value = None

    assert await publisher.publish_due_posts() == 0


async def test_one_failure_does_not_stop_the_batch(publisher, posts_repo):
    posts_repo.list_due_scheduled.return_value = [_due_post("post-1"), _due_post("post-2")]
    posts_repo.replace_if_unmodified.side_effect = [RuntimeError("boom"), True]

    count = await publisher.publish_due_posts()

    assert count == 1
    assert posts_repo.replace_if_unmodified.call_count == 2


async def test_nothing_due(publisher, posts_repo, events):
    posts_repo.list_due_scheduled.return_value = []

    assert await publisher.publish_due_posts() == 0
    events.publish.assert_not_called()


async def test_start_creates_background_task(publisher):
    await publisher.start()
    assert publisher._running is True
    assert publisher._task is not None
    await publisher.stop()


async def test_stop_cancels_task(publisher):
    await publisher.start()
    await publisher.stop()
    assert publisher._running is False
    assert publisher._task.done()


async def test_poll_loop_survives_errors(publisher, posts_repo):
    posts_repo.list_due_scheduled.side_effect = RuntimeError("cosmos down")

    await publisher.start()
    await asyncio.sleep(0.05)
    await publisher.stop()

    assert posts_repo.list_due_scheduled.await_count >= 2
