"""Publication business logic — load records, consult the engine, persist the decision.

Every method follows the same sequence: read the records with their ETags,
ask ``PublicationWorkflowEngine`` for a decision, write the decision back with
a compare-and-swap, then append the transition to the activity log and hand it
to the notification publisher.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from azure.cosmos.exceptions import CosmosHttpResponseError

from newsdesk.events.contracts import POST_TRANSITION_EVENT, TransitionNotification
from newsdesk.models.approval import ReviewDecision
from newsdesk.models.post import Post
from newsdesk.workflow.decisions import (
    ApprovalResolution,
    Draft,
    PendingApproval,
    Published,
    Scheduled,
)
from newsdesk.workflow.engine import PublicationWorkflowEngine
from newsdesk.workflow.errors import (
    ConcurrencyConflictError,
    RecordNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from newsdesk.database.repositories.activity import ActivityRepository
    from newsdesk.database.repositories.approvals import ApprovalRequestRepository
    from newsdesk.database.repositories.posts import PostRepository
    from newsdesk.events import EventPublisher
    from newsdesk.models.activity import TransitionRecord
    from newsdesk.models.actor import Actor

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def record_transition(
    record: TransitionRecord,
    activity_repo: ActivityRepository,
    events: EventPublisher,
) -> None:
    """Append a transition to the audit trail and notify the post's author.

    The transition is already committed when this runs, so a failed audit
    write is logged rather than raised.
    """
    try:
        await activity_repo.record(record)
    except CosmosHttpResponseError:
        logger.warning(
            "Failed to record activity — post=%s action=%s",
            record.post_id,
            record.action,
            exc_info=True,
        )
    await events.publish(
        POST_TRANSITION_EVENT,
        TransitionNotification.from_record(record).model_dump(mode="json"),
    )


class PublicationService:
    """Entry point used by every editor-facing surface to move posts through the workflow."""

    def __init__(
        self,
        posts_repo: PostRepository,
        approvals_repo: ApprovalRequestRepository,
        activity_repo: ActivityRepository,
        events: EventPublisher,
        *,
        engine: PublicationWorkflowEngine | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._posts = posts_repo
        self._approvals = approvals_repo
        self._activity = activity_repo
        self._events = events
        self._engine = engine or PublicationWorkflowEngine()
        self._clock = clock

    async def save_draft(self, post: Post, actor: Actor) -> Draft:
        """Create a new draft, or save content and schedule edits to an existing one."""
        if post.id is None:
            decision = self._engine.save_draft(post, actor, self._clock())
            await self._posts.create(decision.post)
        else:
            existing, etag = await self._load_post(post.id)
            if post.author_id != existing.author_id:
                raise ValidationError("The author of a post cannot be changed")
            edited = Post.model_validate(
                {
                    **existing.model_dump(),
                    "content": post.content.model_dump(),
                    "publish_at": post.publish_at,
                }
            )
            decision = self._engine.save_draft(edited, actor, self._clock())
            await self._swap_post(decision.post, etag)

        await record_transition(decision.record, self._activity, self._events)
        logger.info("Draft saved — post=%s author=%s", decision.post.id, decision.post.author_id)
        return decision

    async def submit(self, post_id: str, actor: Actor) -> Published | Scheduled | PendingApproval:
        """Submit a saved draft for publication.

        An approval request is created before the post is written, and withdrawn
        if the post cannot be written, so a pending post always has its request.
        """
        post, etag = await self._load_post(post_id)
        decision = self._engine.evaluate_submission(post, actor, self._clock())
        if isinstance(decision, PendingApproval):
            await self._approvals.create(decision.request)
            try:
                await self._swap_post(decision.post, etag)
            except Exception:
                logger.warning(
                    "Post write failed — withdrawing request=%s post=%s",
                    decision.request.id,
                    post_id,
                )
                await self._approvals.delete(decision.request.id, decision.request.post_id)
                raise
        else:
            await self._swap_post(decision.post, etag)

        await record_transition(decision.record, self._activity, self._events)
        logger.info(
            "Post submitted — post=%s actor=%s outcome=%s",
            post_id,
            actor.id,
            decision.outcome,
        )
        return decision

    async def edit_published(
        self, post_id: str, changes: Mapping[str, Any], actor: Actor
    ) -> Published:
        """Edit a live post directly (direct-access actors only)."""
        post, etag = await self._load_post(post_id)
        decision = self._engine.edit_published(post, changes, actor, self._clock())
        await self._swap_post(decision.post, etag)
        await record_transition(decision.record, self._activity, self._events)
        logger.info(
            "Published post edited — post=%s actor=%s version=%d",
            post_id,
            actor.id,
            decision.post.version,
        )
        return decision

    async def request_update(
        self, post_id: str, changes: Mapping[str, Any], actor: Actor
    ) -> PendingApproval:
        """Queue changes to a live post for review; the live post is not written."""
        post, _ = await self._load_post(post_id)
        decision = self._engine.request_update(post, changes, actor, self._clock())
        await self._approvals.create(decision.request)
        await record_transition(decision.record, self._activity, self._events)
        logger.info(
            "Update requested — post=%s request=%s base_version=%d",
            post_id,
            decision.request.id,
            decision.request.base_version,
        )
        return decision

    async def resolve(
        self,
        request_id: str,
        post_id: str,
        decision: ReviewDecision | str,
        reviewer: Actor,
        notes: str | None = None,
    ) -> ApprovalResolution:
        """Resolve a queued approval request.

        The request is swapped first so that only one reviewer can win; if the
        post cannot then be written, the request is put back.
        """
        found = await self._approvals.get_with_etag(request_id, post_id)
        if found is None:
            raise RecordNotFoundError(f"Approval request {request_id} not found")
        request, request_etag = found
        post, post_etag = await self._load_post(post_id)

        resolution = self._engine.resolve_approval(
            request, decision, reviewer, notes, post=post, now=self._clock()
        )

        if not await self._approvals.replace_if_unmodified(resolution.request, request_etag):
            raise ConcurrencyConflictError(
                f"Approval request {request_id} was resolved concurrently"
            )
        if resolution.post_changed:
            try:
                await self._swap_post(resolution.post, post_etag)
            except Exception:
                logger.warning(
                    "Post write failed — reopening request=%s post=%s", request_id, post_id
                )
                await self._approvals.update(request, post_id)
                raise

        await record_transition(resolution.record, self._activity, self._events)
        logger.info(
            "Approval resolved — request=%s post=%s outcome=%s status=%s",
            request_id,
            post_id,
            resolution.request.review_outcome,
            resolution.post.status,
        )
        return resolution

    async def cancel_schedule(self, post_id: str, actor: Actor) -> Draft:
        """Return a scheduled post to draft."""
        post, etag = await self._load_post(post_id)
        decision = self._engine.cancel_schedule(post, actor, self._clock())
        await self._swap_post(decision.post, etag)
        await record_transition(decision.record, self._activity, self._events)
        logger.info("Schedule cancelled — post=%s actor=%s", post_id, actor.id)
        return decision

    async def _load_post(self, post_id: str) -> tuple[Post, str]:
        found = await self._posts.get_with_etag(post_id, post_id)
        if found is None:
            raise RecordNotFoundError(f"Post {post_id} not found")
        return found

    async def _swap_post(self, post: Post, etag: str) -> None:
        if not await self._posts.replace_if_unmodified(post, etag):
            raise ConcurrencyConflictError(f"Post {post.id} was modified concurrently")

