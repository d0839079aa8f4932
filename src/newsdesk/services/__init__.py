"""Service layer tying the workflow engine to persistence and notifications."""

from newsdesk.services.publication import PublicationService, record_transition

__all__ = ["PublicationService", "record_transition"]
