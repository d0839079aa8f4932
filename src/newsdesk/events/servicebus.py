"""Service Bus publisher for post workflow events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient, ServiceBusSender

from newsdesk.events.contracts import EventEnvelope

if TYPE_CHECKING:
    from newsdesk.config import ServiceBusConfig

logger = logging.getLogger(__name__)


class ServiceBusPublisher:
    """Send transition events to the notification dispatcher's topic.

    A publisher without a connection string is inert, so local runs work
    without a namespace. Delivery is best effort: the transition being
    announced is already committed, so send failures are logged, not raised.
    """

    def __init__(self, config: ServiceBusConfig, *, topic_name: str | None = None) -> None:
        self._connection_string = config.connection_string
        self._topic_name = topic_name or config.topic_name
        self._client: ServiceBusClient | None = None
        self._sender: ServiceBusSender | None = None
        if not self.enabled:
            logger.warning(
                "AZURE_SERVICEBUS_CONNECTION_STRING is not set — post notifications are disabled"
            )

    @property
    def enabled(self) -> bool:
        return bool(self._connection_string)

    def _get_sender(self) -> ServiceBusSender:
        if self._sender is None:
            self._client = ServiceBusClient.from_connection_string(self._connection_string)
            self._sender = self._client.get_topic_sender(topic_name=self._topic_name)
        return self._sender

    async def publish(self, event_type: str, data: dict[str, Any]) -> None:
        """Send one event, tagged with its type for subscription filters."""
        if not self.enabled:
            return

        message = ServiceBusMessage(
            body=EventEnvelope(event=event_type, data=data).model_dump_json(),
            content_type="application/json",
            subject=event_type,
            application_properties={"event_type": event_type},
        )
        try:
            await self._get_sender().send_messages(message)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Failed to publish event=%s post=%s",
                event_type,
                data.get("post_id"),
                exc_info=True,
            )
            return
        logger.debug("Published event=%s post=%s", event_type, data.get("post_id"))

    async def close(self) -> None:
        """Close the sender and the client, if they were ever opened."""
        for resource in (self._sender, self._client):
            if resource is not None:
                await resource.close()
        self._sender = None
        self._client = None
