"""Repository for the approval_requests container (partitioned by /post_id)."""

from __future__ import annotations

from newsdesk.database.repositories.base import BaseRepository
from newsdesk.models.approval import ApprovalKind, ApprovalRequest, ReviewOutcome


class ApprovalRequestRepository(BaseRepository[ApprovalRequest]):
    """Provide data access for the superadmin approval queue."""

    container_name = "approval_requests"
    model_class = ApprovalRequest

    async def list_pending(self, kind: ApprovalKind | None = None) -> list[ApprovalRequest]:
        """Fetch the open queue, oldest first, optionally for one request kind."""
        sql = "SELECT * FROM c WHERE c.review_outcome = @outcome AND NOT IS_DEFINED(c.deleted_at)"
        parameters = [{"name": "@outcome", "value": ReviewOutcome.PENDING.value}]
        if kind is not None:
            sql += " AND c.kind = @kind"
            parameters.append({"name": "@kind", "value": kind.value})
        return await self.query(sql + " ORDER BY c.created_at ASC", parameters)

    async def list_by_requester(
        self, actor_id: str, outcome: ReviewOutcome | None = None
    ) -> list[ApprovalRequest]:
        """Fetch the requests an author has submitted, newest first."""
        sql = (
            "SELECT * FROM c WHERE c.requested_by = @requested_by"
            " AND NOT IS_DEFINED(c.deleted_at)"
        )
        parameters = [{"name": "@requested_by", "value": actor_id}]
        if outcome is not None:
            sql += " AND c.review_outcome = @outcome"
            parameters.append({"name": "@outcome", "value": outcome.value})
        return await self.query(sql + " ORDER BY c.created_at DESC", parameters)

    async def list_by_post(self, post_id: str) -> list[ApprovalRequest]:
        """Fetch every request raised for a post, newest first."""
        return await self.query(
            "SELECT * FROM c WHERE c.post_id = @post_id"
            " AND NOT IS_DEFINED(c.deleted_at)"
            " ORDER BY c.created_at DESC",
            [{"name": "@post_id", "value": post_id}],
        )
