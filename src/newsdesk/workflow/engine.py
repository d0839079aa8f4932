"""Publication workflow engine — the single authority on post state transitions.

States:
    draft ──→ published ──→ published (direct edit)
      │           ↑
      ├──→ pending_approval ──→ draft (reject / changes requested)
      │           │
      └──→ scheduled ←┘ ──→ published (publish time reached)
                │
                └──→ draft (cancel)

Admins without direct access route everything through an ``ApprovalRequest``;
superadmins and admins holding a CRUD grant publish or schedule directly.

The engine performs no I/O and never mutates its inputs. Each operation
returns a decision holding fresh copies of the post (and request) to persist,
or raises before producing anything.

Usage:
    engine = PublicationWorkflowEngine()
    decision = engine.evaluate_submission(post, actor, now)
    if isinstance(decision, PendingApproval):
        ...  # persist decision.request alongside decision.post
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from newsdesk.models.activity import SYSTEM_ACTOR_ID, ActivityType, TransitionRecord
from newsdesk.models.actor import Actor
from newsdesk.models.approval import (
    ApprovalKind,
    ApprovalRequest,
    ReviewDecision,
    ReviewOutcome,
)
from newsdesk.models.base import new_id
from newsdesk.models.post import Post, PostContent, PostStatus
from newsdesk.workflow.decisions import (
    ApprovalResolution,
    Draft,
    PendingApproval,
    Published,
    Scheduled,
)
from newsdesk.workflow.errors import (
    AuthorizationError,
    InvalidStateError,
    ValidationError,
)

VALID_TRANSITIONS: dict[PostStatus, frozenset[PostStatus]] = {
    PostStatus.DRAFT: frozenset(
        {
            PostStatus.DRAFT,  # saving a draft
            PostStatus.PENDING_APPROVAL,
            PostStatus.SCHEDULED,
            PostStatus.PUBLISHED,
        }
    ),
    PostStatus.PENDING_APPROVAL: frozenset(
        {PostStatus.DRAFT, PostStatus.PUBLISHED, PostStatus.SCHEDULED}
    ),
    PostStatus.SCHEDULED: frozenset({PostStatus.PUBLISHED, PostStatus.DRAFT}),
    PostStatus.PUBLISHED: frozenset({PostStatus.PUBLISHED, PostStatus.PENDING_APPROVAL}),
    PostStatus.ARCHIVED: frozenset(),  # only the external archival process touches these
}

_REQUEST_ACTIONS: dict[ApprovalKind, ActivityType] = {
    ApprovalKind.NEW_POST: ActivityType.APPROVAL_REQUEST,
    ApprovalKind.UPDATE_REQUEST: ActivityType.UPDATE_REQUEST,
    ApprovalKind.SCHEDULE_REQUEST: ActivityType.SCHEDULE_REQUEST,
}

_APPROVAL_ACTIONS: dict[ApprovalKind, ActivityType] = {
    ApprovalKind.NEW_POST: ActivityType.POST_APPROVED,
    ApprovalKind.UPDATE_REQUEST: ActivityType.UPDATE_APPROVED,
    ApprovalKind.SCHEDULE_REQUEST: ActivityType.SCHEDULE_APPROVED,
}


def can_transition(current: PostStatus, target: PostStatus) -> bool:
    """Check whether the state machine allows moving from ``current`` to ``target``."""
    return target in VALID_TRANSITIONS.get(current, frozenset())


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def _resolve_now(now: datetime | None) -> datetime:
    return _as_utc(now) if now is not None else datetime.now(UTC)


def _is_scheduled(post: Post, now: datetime) -> bool:
    """A post is scheduled only while its publish time lies strictly in the future."""
    return post.publish_at is not None and _as_utc(post.publish_at) > now


def _transition(post: Post, target: PostStatus) -> None:
    if not can_transition(post.status, target):
        raise InvalidStateError(
            f"Invalid transition from {post.status.value} to {target.value}"
        )
    post.status = target


def _merge_content(content: PostContent, changes: Mapping[str, Any]) -> PostContent:
    """Validate proposed content changes and return the merged content."""
    if not changes:
        raise ValidationError("No content changes were proposed")
    unknown = sorted(set(changes) - set(PostContent.model_fields))
    if unknown:
        raise ValidationError(f"Unknown content fields: {', '.join(unknown)}")
    try:
        return PostContent.model_validate({**content.model_dump(), **changes})
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid content changes: {exc}") from exc


class PublicationWorkflowEngine:
    """Decides every post transition from the post, the actor and the clock."""

    # ------------------------------------------------------------------
    # Author entry points
    # ------------------------------------------------------------------

    def evaluate_submission(
        self,
        post: Post,
        actor: Actor,
        now: datetime | None = None,
    ) -> Published | Scheduled | PendingApproval:
        """Submit a draft for publication.

        Actors with direct access publish immediately, or get their schedule
        auto-approved when ``publish_at`` lies in the future. Everyone else
        gets a pending post plus exactly one approval request: a
        ``schedule_request`` for future-dated posts, otherwise ``new_post``
        for never-published posts and ``update_request`` for the rest.

        A ``publish_at`` at or before ``now`` is treated as unscheduled and
        cleared.

        Raises:
            AuthorizationError: The actor is neither the author nor a superadmin.
            InvalidStateError: The post is not a draft.
        """
        now = _resolve_now(now)
        self._check_owner(post, actor, "submit")
        if post.status != PostStatus.DRAFT:
            raise InvalidStateError(
                f"Only draft posts can be submitted (post is {post.status.value})"
            )

        scheduled = _is_scheduled(post, now)
        updated = self._working_copy(post, now)
        updated.rejection_reason = None
        if not scheduled:
            updated.publish_at = None

        if actor.has_direct_access:
            if scheduled:
                _transition(updated, PostStatus.SCHEDULED)
                self._approve_schedule(updated, actor.id, now)
                return Scheduled(
                    post=updated,
                    record=self._record(
                        updated,
                        actor,
                        ActivityType.SCHEDULE,
                        post.status,
                        now,
                        publish_at=updated.publish_at.isoformat(),
                        auto_approved=True,
                    ),
                )
            self._publish(updated, now)
            return Published(
                post=updated,
                record=self._record(
                    updated,
                    actor,
                    ActivityType.PUBLISH,
                    post.status,
                    now,
                    version=updated.version,
                ),
            )

        _transition(updated, PostStatus.PENDING_APPROVAL)
        updated.schedule_approved = False
        if scheduled:
            kind = ApprovalKind.SCHEDULE_REQUEST
        elif post.has_been_published:
            kind = ApprovalKind.UPDATE_REQUEST
        else:
            kind = ApprovalKind.NEW_POST

        request = ApprovalRequest(
            post_id=updated.id,
            requested_by=actor.id,
            kind=kind,
            base_version=post.version,
            created_at=now,
            updated_at=now,
        )
        return PendingApproval(
            post=updated,
            request=request,
            record=self._record(
                updated,
                actor,
                _REQUEST_ACTIONS[kind],
                post.status,
                now,
                request_id=request.id,
                kind=kind.value,
            ),
        )

    def save_draft(self, post: Post, actor: Actor, now: datetime | None = None) -> Draft:
        """Save a draft without submitting it."""
        now = _resolve_now(now)
        self._check_owner(post, actor, "edit")
        if post.status != PostStatus.DRAFT:
            raise InvalidStateError(
                f"Only drafts can be saved as drafts (post is {post.status.value})"
            )
        updated = self._working_copy(post, now)
        _transition(updated, PostStatus.DRAFT)
        return Draft(
            post=updated,
            record=self._record(updated, actor, ActivityType.DRAFT_SAVED, post.status, now),
        )

    def edit_published(
        self,
        post: Post,
        changes: Mapping[str, Any],
        actor: Actor,
        now: datetime | None = None,
    ) -> Published:
        """Edit a live post in place. Only actors with direct access may do this."""
        now = _resolve_now(now)
        self._check_owner(post, actor, "edit")
        if not actor.has_direct_access:
            raise AuthorizationError(
                "Editing a published post requires direct access; "
                "submit an update request instead"
            )
        if post.status != PostStatus.PUBLISHED:
            raise InvalidStateError(
                f"Only published posts can be edited in place (post is {post.status.value})"
            )

        updated = self._working_copy(post, now)
        updated.content = _merge_content(post.content, changes).with_meta_defaults()
        _transition(updated, PostStatus.PUBLISHED)
        updated.version += 1
        return Published(
            post=updated,
            record=self._record(
                updated,
                actor,
                ActivityType.UPDATE,
                post.status,
                now,
                version=updated.version,
                fields=sorted(changes),
            ),
        )

    def request_update(
        self,
        existing_post: Post,
        proposed_changes: Mapping[str, Any],
        actor: Actor,
        now: datetime | None = None,
    ) -> PendingApproval:
        """Hold proposed changes to a live post for superadmin review.

        The live post is returned unchanged; its version is recorded on the
        request and only advances when the request is approved.
        """
        now = _resolve_now(now)
        self._check_owner(existing_post, actor, "request an update for")
        if existing_post.status != PostStatus.PUBLISHED:
            raise InvalidStateError(
                "Update requests apply only to published posts "
                f"(post is {existing_post.status.value})"
            )
        if existing_post.id is None:
            raise InvalidStateError("Cannot request an update for an unsaved post")

        merged = _merge_content(existing_post.content, proposed_changes)
        request = ApprovalRequest(
            post_id=existing_post.id,
            requested_by=actor.id,
            kind=ApprovalKind.UPDATE_REQUEST,
            proposed_changes=merged.model_dump(mode="json", include=set(proposed_changes)),
            original_content=existing_post.content.model_copy(deep=True),
            base_version=existing_post.version,
            created_at=now,
            updated_at=now,
        )
        live = existing_post.model_copy(deep=True)
        return PendingApproval(
            post=live,
            request=request,
            record=self._record(
                live,
                actor,
                ActivityType.UPDATE_REQUEST,
                existing_post.status,
                now,
                request_id=request.id,
                kind=request.kind.value,
                fields=sorted(proposed_changes),
            ),
        )

    # ------------------------------------------------------------------
    # Reviewer entry points
    # ------------------------------------------------------------------

    def resolve_approval(
        self,
        request: ApprovalRequest,
        decision: ReviewDecision | str,
        reviewer: Actor,
        notes: str | None = None,
        *,
        post: Post,
        now: datetime | None = None,
    ) -> ApprovalResolution:
        """Approve, reject or send back a pending approval request.

        Raises:
            AuthorizationError: The reviewer is not a superadmin.
            InvalidStateError: The request was already resolved, does not
                reference ``post``, or the post has left the approval stage.
            ValidationError: ``reject``/``request_changes`` without notes.
        """
        now = _resolve_now(now)
        try:
            decision = ReviewDecision(decision)
        except ValueError as exc:
            raise ValidationError(f"Unknown review decision: {decision}") from exc
        if not reviewer.is_superadmin:
            raise AuthorizationError("Only a superadmin can resolve approval requests")
        if not request.is_pending:
            raise InvalidStateError(
                f"Approval request {request.id} is already {request.review_outcome.value}"
            )
        if request.post_id != post.id:
            raise InvalidStateError(
                f"Approval request {request.id} does not reference post {post.id}"
            )
        text = (notes or "").strip()
        if decision != ReviewDecision.APPROVE and not text:
            raise ValidationError(
                "Reviewer notes are required to reject or request changes"
            )

        updated = post.model_copy(deep=True)
        if decision == ReviewDecision.APPROVE:
            action = _APPROVAL_ACTIONS[request.kind]
            outcome = ReviewOutcome.APPROVED
            self._apply_approval(updated, request, reviewer, now)
            post_updated = True
        else:
            if decision == ReviewDecision.REJECT:
                action, outcome = ActivityType.POST_REJECTED, ReviewOutcome.REJECTED
            else:
                action, outcome = (
                    ActivityType.CHANGES_REQUESTED,
                    ReviewOutcome.CHANGES_REQUESTED,
                )
            post_updated = self._send_back(updated, request, decision, text, now)

        resolved = request.model_copy(
            deep=True,
            update={
                "review_outcome": outcome,
                "reviewer_notes": text or None,
                "reviewed_by": reviewer.id,
                "reviewed_at": now,
                "updated_at": now,
            },
        )
        return ApprovalResolution(
            post=updated,
            request=resolved,
            record=self._record(
                updated,
                reviewer,
                action,
                post.status,
                now,
                request_id=request.id,
                kind=request.kind.value,
                decision=decision.value,
                notes=text or None,
                post_updated=post_updated,
            ),
        )

    def cancel_schedule(self, post: Post, actor: Actor, now: datetime | None = None) -> Draft:
        """Pull a scheduled post back to draft and drop its schedule."""
        now = _resolve_now(now)
        if not actor.has_direct_access:
            raise AuthorizationError("Cancelling a schedule requires direct access")
        if post.status != PostStatus.SCHEDULED:
            raise InvalidStateError(
                f"Only scheduled posts can be cancelled (post is {post.status.value})"
            )

        updated = self._working_copy(post, now)
        _transition(updated, PostStatus.DRAFT)
        updated.schedule_approved = False
        updated.schedule_approved_by = None
        updated.schedule_approved_at = None
        updated.publish_at = None
        return Draft(
            post=updated,
            record=self._record(
                updated,
                actor,
                ActivityType.SCHEDULE_CANCELLED,
                post.status,
                now,
                publish_at=post.publish_at.isoformat() if post.publish_at else None,
            ),
        )

    # ------------------------------------------------------------------
    # Scheduler entry point
    # ------------------------------------------------------------------

    def publish_due(self, post: Post, now: datetime | None = None) -> Published:
        """Publish an approved scheduled post whose publish time has been reached."""
        now = _resolve_now(now)
        if post.status != PostStatus.SCHEDULED or not post.schedule_approved:
            raise InvalidStateError(
                f"Post {post.id} is not an approved scheduled post ({post.status.value})"
            )
        if post.publish_at is None or _is_scheduled(post, now):
            raise InvalidStateError(f"Post {post.id} is not due for publication yet")

        scheduled_for = _as_utc(post.publish_at)
        updated = self._working_copy(post, now)
        self._publish(updated, now)
        return Published(
            post=updated,
            record=TransitionRecord(
                post_id=updated.id,
                actor_id=SYSTEM_ACTOR_ID,
                actor_name="System (Auto-publish)",
                action=ActivityType.PUBLISH,
                from_status=post.status,
                to_status=updated.status,
                details={
                    "automated": True,
                    "scheduled_for": scheduled_for.isoformat(),
                    "delay_minutes": int((now - scheduled_for).total_seconds() // 60),
                    "version": updated.version,
                },
                at=now,
                created_at=now,
                updated_at=now,
            ),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _check_owner(post: Post, actor: Actor, verb: str) -> None:
        if actor.id != post.author_id and not actor.is_superadmin:
            raise AuthorizationError(f"Cannot {verb} another author's post")

    @staticmethod
    def _working_copy(post: Post, now: datetime) -> Post:
        updated = post.model_copy(deep=True)
        if updated.id is None:
            updated.id = new_id()
        updated.updated_at = now
        return updated

    @staticmethod
    def _publish(post: Post, now: datetime) -> None:
        _transition(post, PostStatus.PUBLISHED)
        post.content = post.content.with_meta_defaults()
        if post.published_at is None:
            post.published_at = now
        post.version += 1

    @staticmethod
    def _approve_schedule(post: Post, approver_id: str, now: datetime) -> None:
        post.schedule_approved = True
        post.schedule_approved_by = approver_id
        post.schedule_approved_at = now

    def _apply_approval(
        self,
        post: Post,
        request: ApprovalRequest,
        reviewer: Actor,
        now: datetime,
    ) -> None:
        if request.kind == ApprovalKind.UPDATE_REQUEST:
            if post.status not in (PostStatus.PENDING_APPROVAL, PostStatus.PUBLISHED):
                raise InvalidStateError(
                    f"Post {post.id} is {post.status.value}; the update can no longer be applied"
                )
            if post.version != request.base_version:
                raise InvalidStateError(
                    f"Post {post.id} changed since the update was requested "
                    f"(version {post.version}, request based on {request.base_version})"
                )
            if request.proposed_changes:
                post.content = _merge_content(post.content, request.proposed_changes)
        elif post.status != PostStatus.PENDING_APPROVAL:
            raise InvalidStateError(
                f"Post {post.id} is {post.status.value}; it has already left the approval stage"
            )

        post.updated_at = now
        post.rejection_reason = None
        post.last_approved_by = reviewer.id
        post.last_approved_at = now

        if request.kind == ApprovalKind.SCHEDULE_REQUEST:
            if post.publish_at is None:
                raise InvalidStateError(f"Post {post.id} has no publish time to approve")
            self._approve_schedule(post, reviewer.id, now)
            if _is_scheduled(post, now):
                _transition(post, PostStatus.SCHEDULED)
                return
            # the requested time passed while the request waited in the queue
        self._publish(post, now)

    @staticmethod
    def _send_back(
        post: Post,
        request: ApprovalRequest,
        decision: ReviewDecision,
        notes: str,
        now: datetime,
    ) -> bool:
        """Return a post to its author. Returns False when the post is left untouched."""
        if request.kind == ApprovalKind.UPDATE_REQUEST and post.status == PostStatus.PUBLISHED:
            # held changes are discarded; the live post stays as it is
            return False
        if post.status != PostStatus.PENDING_APPROVAL:
            raise InvalidStateError(
                f"Post {post.id} is {post.status.value}; it has already left the approval stage"
            )

        _transition(post, PostStatus.DRAFT)
        post.updated_at = now
        post.schedule_approved = False
        if decision == ReviewDecision.REJECT:
            post.rejection_reason = notes
            if request.kind == ApprovalKind.SCHEDULE_REQUEST:
                post.publish_at = None
        return True

    @staticmethod
    def _record(
        post: Post,
        actor: Actor,
        action: ActivityType,
        from_status: PostStatus,
        now: datetime,
        *,
        request_id: str | None = None,
        **details: Any,
    ) -> TransitionRecord:
        return TransitionRecord(
            post_id=post.id,
            actor_id=actor.id,
            actor_name=actor.name,
            action=action,
            from_status=from_status,
            to_status=post.status,
            request_id=request_id,
            details=details,
            at=now,
            created_at=now,
            updated_at=now,
        )
