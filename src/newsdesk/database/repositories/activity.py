"""Repository for the activity container (partitioned by /post_id)."""

from __future__ import annotations

from newsdesk.database.repositories.base import BaseRepository
from newsdesk.models.activity import TransitionRecord


class ActivityRepository(BaseRepository[TransitionRecord]):
    container_name = "activity"
    model_class = TransitionRecord

    async def record(self, record: TransitionRecord) -> TransitionRecord:
        """Append a transition record to the audit trail."""
        return await self.create(record)

    async def list_by_post(self, post_id: str) -> list[TransitionRecord]:
        """Fetch a post's transition history, most recent first."""
        return await self.query(
            "SELECT * FROM c WHERE c.post_id = @post_id ORDER BY c.at DESC",
            [{"name": "@post_id", "value": post_id}],
        )
