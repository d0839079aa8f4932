"""Repository for the posts container (partitioned by /id)."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import TypeAdapter

from newsdesk.database.repositories.base import BaseRepository
from newsdesk.models.post import Post, PostStatus

_DATETIME = TypeAdapter(datetime)


class PostRepository(BaseRepository[Post]):
    """Provide data access for the posts container."""

    container_name = "posts"
    model_class = Post

    async def list_by_status(self, status: PostStatus) -> list[Post]:
        """Fetch live posts in a given workflow status, newest first."""
        return await self.query(
            "SELECT * FROM c WHERE c.status = @status"
            " AND NOT IS_DEFINED(c.deleted_at)"
            " ORDER BY c.created_at DESC",
            [{"name": "@status", "value": status.value}],
        )

    async def list_by_author(
        self, author_id: str, status: PostStatus | None = None
    ) -> list[Post]:
        """Fetch an author's live posts, optionally filtered by status."""
        sql = "SELECT * FROM c WHERE c.author_id = @author_id AND NOT IS_DEFINED(c.deleted_at)"
        parameters = [{"name": "@author_id", "value": author_id}]
        if status is not None:
            sql += " AND c.status = @status"
            parameters.append({"name": "@status", "value": status.value})
        return await self.query(sql + " ORDER BY c.created_at DESC", parameters)

    async def list_due_scheduled(self, now: datetime) -> list[Post]:
        """Fetch approved scheduled posts whose publish time is at or before ``now``.

        ``publish_at`` is stored as a UTC ISO string, so ``now`` is converted to
        UTC before the comparison.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        cutoff = _DATETIME.dump_python(now.astimezone(UTC), mode="json")
        return await self.query(
            "SELECT * FROM c WHERE c.status = @status"
            " AND c.schedule_approved = true"
            " AND c.publish_at <= @now"
            " AND NOT IS_DEFINED(c.deleted_at)"
            " ORDER BY c.publish_at ASC",
            [
                {"name": "@status", "value": PostStatus.SCHEDULED.value},
                {"name": "@now", "value": cutoff},
            ],
        )
