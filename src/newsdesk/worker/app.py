"""Worker entry point — runs the scheduled publication loop."""

from __future__ import annotations

import asyncio
import logging
import signal

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.sdk.resources import Resource

from newsdesk.config import load_settings
from newsdesk.database.client import CosmosClient
from newsdesk.database.repositories.activity import ActivityRepository
from newsdesk.database.repositories.posts import PostRepository
from newsdesk.events import ServiceBusPublisher
from newsdesk.health import check_emulators
from newsdesk.logging import configure_logging
from newsdesk.scheduler.publisher import ScheduledPublisher

logger = logging.getLogger(__name__)

SERVICE_NAME = "newsdesk-scheduler"


async def run() -> None:
    """Initialize and run the worker until terminated."""
    settings = load_settings()
    configure_logging(settings.app.log_level, log_file="scheduler.log")

    logger.info("Worker starting")

    if settings.monitor.connection_string:
        configure_azure_monitor(
            connection_string=settings.monitor.connection_string,
            resource=Resource.create({"service.name": SERVICE_NAME}),
        )
        logger.info("Azure Monitor OpenTelemetry configured")

    if settings.app.is_development and not await check_emulators(settings):
        return

    cosmos = CosmosClient(settings.cosmos)
    try:
        await cosmos.initialize()
    except ConnectionError as exc:
        logger.error(str(exc))  # noqa: TRY400
        return

    event_publisher = ServiceBusPublisher(settings.servicebus)
    publisher = ScheduledPublisher(
        PostRepository(cosmos.database),
        ActivityRepository(cosmos.database),
        event_publisher,
        poll_seconds=settings.scheduler.poll_seconds,
    )
    await publisher.start()

    logger.info("Worker running")

    # Wait until terminated
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await stop_event.wait()

    logger.info("Worker shutting down")
    await publisher.stop()
    await event_publisher.close()
    await cosmos.close()
    logger.info("Worker shutdown complete")


def main() -> None:
    """Entry point for the worker process."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
