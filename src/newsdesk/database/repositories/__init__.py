"""Repository modules for each Cosmos DB container."""

from newsdesk.database.repositories.activity import ActivityRepository
from newsdesk.database.repositories.approvals import ApprovalRequestRepository
from newsdesk.database.repositories.posts import PostRepository

__all__ = [
    "ActivityRepository",
    "ApprovalRequestRepository",
    "PostRepository",
]
