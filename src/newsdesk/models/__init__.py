"""Data models for Cosmos DB document types."""

from newsdesk.models.activity import SYSTEM_ACTOR_ID, ActivityType, TransitionRecord
from newsdesk.models.actor import Actor, ActorRole
from newsdesk.models.approval import (
    ApprovalKind,
    ApprovalRequest,
    ReviewDecision,
    ReviewOutcome,
)
from newsdesk.models.post import Post, PostContent, PostStatus

__all__ = [
    "SYSTEM_ACTOR_ID",
    "ActivityType",
    "Actor",
    "ActorRole",
    "ApprovalKind",
    "ApprovalRequest",
    "Post",
    "PostContent",
    "PostStatus",
    "ReviewDecision",
    "ReviewOutcome",
    "TransitionRecord",
]
