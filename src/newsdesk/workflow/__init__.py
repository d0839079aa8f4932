"""Post publication workflow — engine, decisions and error kinds."""

from newsdesk.workflow.decisions import (
    ApprovalResolution,
    Decision,
    Draft,
    PendingApproval,
    Published,
    Scheduled,
)
from newsdesk.workflow.engine import (
    VALID_TRANSITIONS,
    PublicationWorkflowEngine,
    can_transition,
)
from newsdesk.workflow.errors import (
    AuthorizationError,
    ConcurrencyConflictError,
    InvalidStateError,
    RecordNotFoundError,
    ValidationError,
    WorkflowError,
)

__all__ = [
    "VALID_TRANSITIONS",
    "ApprovalResolution",
    "AuthorizationError",
    "ConcurrencyConflictError",
    "Decision",
    "Draft",
    "InvalidStateError",
    "PendingApproval",
    "PublicationWorkflowEngine",
    "Published",
    "RecordNotFoundError",
    "Scheduled",
    "ValidationError",
    "WorkflowError",
    "can_transition",
]
