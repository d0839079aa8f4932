"""Event contracts and publishing interfaces for workflow notifications."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from newsdesk.events.contracts import (
    POST_TRANSITION_EVENT,
    EventEnvelope,
    TransitionNotification,
)
from newsdesk.events.servicebus import ServiceBusPublisher


@runtime_checkable
class EventPublisher(Protocol):
    """Protocol for publishing workflow events to connected consumers."""

    async def publish(self, event_type: str, data: dict[str, Any]) -> None:
        """Broadcast an event to all connected consumers."""
        ...


__all__ = [
    "POST_TRANSITION_EVENT",
    "EventEnvelope",
    "EventPublisher",
    "ServiceBusPublisher",
    "TransitionNotification",
]
