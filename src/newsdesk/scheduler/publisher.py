"""Scheduled publication — polls for due scheduled posts and publishes them."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from newsdesk.services.publication import record_transition
from newsdesk.workflow.engine import PublicationWorkflowEngine
from newsdesk.workflow.errors import InvalidStateError

if TYPE_CHECKING:
    from newsdesk.database.repositories.activity import ActivityRepository
    from newsdesk.database.repositories.posts import PostRepository
    from newsdesk.events import EventPublisher
    from newsdesk.models.post import Post

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ScheduledPublisher:
    """Publishes approved scheduled posts once their publish time has passed.

    Runs as a background task in the worker process. Each post is re-read with
    its ETag and re-checked by the engine before being written, so a post that
    was cancelled or already published by another worker is skipped.
    """

    def __init__(
        self,
        posts_repo: PostRepository,
        activity_repo: ActivityRepository,
        events: EventPublisher,
        *,
        engine: PublicationWorkflowEngine | None = None,
        poll_seconds: float = 60.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._posts = posts_repo
        self._activity = activity_repo
        self._events = events
        self._engine = engine or PublicationWorkflowEngine()
        self._poll_seconds = poll_seconds
        self._clock = clock
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start polling in a background task."""
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("Scheduled publisher started — poll_seconds=%.0f", self._poll_seconds)

    async def stop(self) -> None:
        """Stop the polling task gracefully."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        logger.info("Scheduled publisher stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.publish_due_posts()
            except Exception:
                logger.exception("Error publishing scheduled posts")

            await asyncio.sleep(self._poll_seconds)

    async def publish_due_posts(self, now: datetime | None = None) -> int:
        """Publish every due post. Returns the number of posts published."""
        now = now or self._clock()
        due = await self._posts.list_due_scheduled(now)
        published = 0
        for post in due:
            try:
                if await self._publish(post, now):
                    published += 1
            except Exception:
                logger.exception("Failed to auto-publish post %s", post.id)

        if published:
            logger.info("Auto-published %d scheduled post(s)", published)
        return published

    async def _publish(self, post: Post, now: datetime) -> bool:
        found = await self._posts.get_with_etag(post.id, post.id)
        if found is None:
            return False
        current, etag = found

        try:
            decision = self._engine.publish_due(current, now)
        except InvalidStateError as exc:
            logger.info("Skipping post %s — %s", post.id, exc)
            return False

        if not await self._posts.replace_if_unmodified(decision.post, etag):
            logger.info("Skipping post %s — modified while publishing", post.id)
            return False

        await record_transition(decision.record, self._activity, self._events)
        logger.info(
            "Auto-published post %s — scheduled_for=%s delay_minutes=%s",
            post.id,
            decision.record.details["scheduled_for"],
            decision.record.details["delay_minutes"],
        )
        return True
