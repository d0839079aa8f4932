"""Post document model — content items under publication workflow control."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from newsdesk.models.base import DocumentBase

_META_DESCRIPTION_LENGTH = 150


class PostStatus(StrEnum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PostContent(BaseModel):
    """Editable article content. Every field has a default so drafts may be partial."""

    title: str = Field(default="", max_length=200)
    short_title: str = Field(default="", max_length=100)
    body: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    region: str = "India"
    author: str = ""
    is_sponsored: bool = False
    meta_title: str = ""
    meta_description: str = ""
    image_url: str | None = None

    def with_meta_defaults(self) -> PostContent:
        """Fill empty SEO fields from the title and body."""
        updates: dict[str, str] = {}
        if not self.meta_title and self.title:
            updates["meta_title"] = self.title
        if not self.meta_description and self.body:
            updates["meta_description"] = self.body[:_META_DESCRIPTION_LENGTH] + "..."
        return self.model_copy(update=updates) if updates else self.model_copy()


class Post(DocumentBase):
    """A news post. ``id`` stays unset until the post is first persisted."""

    id: str | None = None  # type: ignore[assignment]
    author_id: str
    status: PostStatus = PostStatus.DRAFT
    content: PostContent = Field(default_factory=PostContent)
    publish_at: datetime | None = None
    schedule_approved: bool = False
    schedule_approved_by: str | None = None
    schedule_approved_at: datetime | None = None
    version: int = 0
    published_at: datetime | None = None
    last_approved_by: str | None = None
    last_approved_at: datetime | None = None
    rejection_reason: str | None = None

    @field_validator("publish_at")
    @classmethod
    def _publish_at_in_utc(cls, value: datetime | None) -> datetime | None:
        """Store publish times in UTC; the due-post query compares them as strings."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def has_been_published(self) -> bool:
        return self.version > 0
