"""Workflow error kinds surfaced to callers."""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for every error raised by the publication workflow."""

    code = "WORKFLOW_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthorizationError(WorkflowError):
    """The actor lacks the role or ownership the transition requires."""

    code = "PERMISSION_DENIED"


class InvalidStateError(WorkflowError):
    """The post or approval request is not in a state that permits the operation."""

    code = "INVALID_STATE"


class ValidationError(WorkflowError):
    """The operation input is incomplete or malformed."""

    code = "VALIDATION_ERROR"


class RecordNotFoundError(WorkflowError, LookupError):
    """A referenced post or approval request does not exist."""

    code = "NOT_FOUND"


class ConcurrencyConflictError(WorkflowError):
    """A record changed between read and write; the caller may retry."""

    code = "CONFLICT"
