"""Approval request document model — queued superadmin review items."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from newsdesk.models.base import DocumentBase
from newsdesk.models.post import PostContent


class ApprovalKind(StrEnum):
    NEW_POST = "new_post"
    UPDATE_REQUEST = "update_request"
    SCHEDULE_REQUEST = "schedule_request"


class ReviewOutcome(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CHANGES_REQUESTED = "changes_requested"


class ReviewDecision(StrEnum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_CHANGES = "request_changes"


class ApprovalRequest(DocumentBase):
    """A pending decision linked to one post, resolved exactly once."""

    post_id: str
    requested_by: str
    kind: ApprovalKind
    review_outcome: ReviewOutcome = ReviewOutcome.PENDING
    reviewer_notes: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    proposed_changes: dict[str, Any] = Field(default_factory=dict)
    original_content: PostContent | None = None
    base_version: int = 0

    @property
    def is_pending(self) -> bool:
        return self.review_outcome == ReviewOutcome.PENDING
