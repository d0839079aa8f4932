"""Engine results — a tagged union of submission outcomes plus approval resolutions.

Every engine operation returns one of these. Each carries the complete new
state to persist (the post, an optional approval request) and the transition
record the caller forwards to the activity log and notification dispatcher.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from newsdesk.models.activity import TransitionRecord
from newsdesk.models.approval import ApprovalRequest
from newsdesk.models.post import Post


class Published(BaseModel):
    outcome: Literal["published"] = "published"
    post: Post
    record: TransitionRecord


class Scheduled(BaseModel):
    outcome: Literal["scheduled"] = "scheduled"
    post: Post
    record: TransitionRecord


class PendingApproval(BaseModel):
    outcome: Literal["pending_approval"] = "pending_approval"
    post: Post
    request: ApprovalRequest
    record: TransitionRecord


class Draft(BaseModel):
    outcome: Literal["draft"] = "draft"
    post: Post
    record: TransitionRecord


Decision = Annotated[
    Published | Scheduled | PendingApproval | Draft,
    Field(discriminator="outcome"),
]


class ApprovalResolution(BaseModel):
    """Outcome of a superadmin review: the resolved request and the target post."""

    post: Post
    request: ApprovalRequest
    record: TransitionRecord

    @property
    def post_changed(self) -> bool:
        """False when only the request was resolved and the post must not be written."""
        return bool(self.record.details.get("post_updated"))
