"""Activity document model — audit trail of workflow transitions."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from newsdesk.models.base import DocumentBase, utcnow
from newsdesk.models.post import PostStatus

SYSTEM_ACTOR_ID = "system"


class ActivityType(StrEnum):
    DRAFT_SAVED = "draft_saved"
    PUBLISH = "publish"
    SCHEDULE = "schedule"
    UPDATE = "update"
    APPROVAL_REQUEST = "approval_request"
    UPDATE_REQUEST = "update_request"
    SCHEDULE_REQUEST = "schedule_request"
    POST_APPROVED = "post_approved"
    UPDATE_APPROVED = "update_approved"
    SCHEDULE_APPROVED = "schedule_approved"
    POST_REJECTED = "post_rejected"
    CHANGES_REQUESTED = "changes_requested"
    SCHEDULE_CANCELLED = "schedule_cancelled"


class TransitionRecord(DocumentBase):
    """One engine decision, persisted for audit and forwarded to notifications."""

    post_id: str
    actor_id: str
    actor_name: str = ""
    action: ActivityType
    from_status: PostStatus
    to_status: PostStatus
    request_id: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    at: datetime = Field(default_factory=utcnow)
