"""Typed contracts for workflow events sent to the notification dispatcher."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from newsdesk.models.activity import ActivityType, TransitionRecord
from newsdesk.models.post import PostStatus

POST_TRANSITION_EVENT = "post-transition"


class EventEnvelope(BaseModel):
    """Message body placed on the post events topic."""

    event: str
    data: dict[str, Any]

    @classmethod
    def from_message_body(cls, body: str | bytes) -> EventEnvelope:
        """Parse an envelope received by a topic subscriber."""
        return cls.model_validate_json(body)


class TransitionNotification(BaseModel):
    """What the notification dispatcher needs to tell an author about their post."""

    post_id: str
    action: ActivityType
    from_status: PostStatus
    to_status: PostStatus
    actor_id: str
    request_id: str | None = None
    notes: str | None = None
    at: datetime

    @classmethod
    def from_record(cls, record: TransitionRecord) -> TransitionNotification:
        return cls(
            post_id=record.post_id,
            action=record.action,
            from_status=record.from_status,
            to_status=record.to_status,
            actor_id=record.actor_id,
            request_id=record.request_id,
            notes=record.details.get("notes"),
            at=record.at,
        )
