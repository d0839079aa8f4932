"""Tests for worker app startup and shutdown."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from newsdesk.worker.app import run


def _settings(connection_string: str = "") -> MagicMock:
    settings = MagicMock()
    settings.monitor.connection_string = connection_string
    settings.app.log_level = "INFO"
    settings.app.is_development = True
    settings.scheduler.poll_seconds = 30.0
    return settings


@pytest.mark.unit
async def test_run_configures_azure_monitor_when_connection_string_set() -> None:
    """Azure Monitor is configured with the scheduler's service name."""
    settings = _settings("InstrumentationKey=test-key")

    with (
        patch("newsdesk.worker.app.load_settings", return_value=settings),
        patch("newsdesk.worker.app.configure_logging"),
        patch("newsdesk.worker.app.configure_azure_monitor") as mock_configure_monitor,
        patch("newsdesk.worker.app.Resource") as mock_resource,
        patch("newsdesk.worker.app.check_emulators", return_value=False),
    ):
        await run()

    mock_resource.create.assert_called_once_with({"service.name": "newsdesk-scheduler"})
    mock_configure_monitor.assert_called_once_with(
        connection_string="InstrumentationKey=test-key",
        resource=mock_resource.create.return_value,
    )


@pytest.mark.unit
async def test_run_skips_azure_monitor_when_no_connection_string() -> None:
    with (
        patch("newsdesk.worker.app.load_settings", return_value=_settings()),
        patch("newsdesk.worker.app.configure_logging"),
        patch("newsdesk.worker.app.configure_azure_monitor") as mock_configure_monitor,
        patch("newsdesk.worker.app.check_emulators", return_value=False),
    ):
        await run()

    mock_configure_monitor.assert_not_called()


@pytest.mark.unit
async def test_run_stops_when_cosmos_is_unreachable() -> None:
    cosmos = MagicMock()
    cosmos.initialize = AsyncMock(side_effect=ConnectionError("AZURE_COSMOS_ENDPOINT is not set"))

    with (
        patch("newsdesk.worker.app.load_settings", return_value=_settings()),
        patch("newsdesk.worker.app.configure_logging"),
        patch("newsdesk.worker.app.check_emulators", return_value=True),
        patch("newsdesk.worker.app.CosmosClient", return_value=cosmos),
        patch("newsdesk.worker.app.ScheduledPublisher") as publisher_cls,
    ):
        await run()

    publisher_cls.assert_not_called()


@pytest.mark.unit
async def test_run_wires_scheduler_and_shuts_down() -> None:
    """The scheduler gets both repositories and the event publisher, and everything closes."""
    settings = _settings()
    cosmos = MagicMock()
    cosmos.initialize = AsyncMock()
    cosmos.close = AsyncMock()
    event_publisher = MagicMock()
    event_publisher.close = AsyncMock()
    scheduler = MagicMock()
    scheduler.start = AsyncMock()
    scheduler.stop = AsyncMock()
    stop_event = MagicMock()
    stop_event.wait = AsyncMock(return_value=None)
    loop = MagicMock()

    with (
        patch("newsdesk.worker.app.load_settings", return_value=settings),
        patch("newsdesk.worker.app.configure_logging"),
        patch("newsdesk.worker.app.check_emulators", return_value=True),
        patch("newsdesk.worker.app.CosmosClient", return_value=cosmos),
        patch("newsdesk.worker.app.PostRepository") as posts_cls,
        patch("newsdesk.worker.app.ActivityRepository") as activity_cls,
        patch(
            "newsdesk.worker.app.ServiceBusPublisher",
            return_value=event_publisher,
        ) as publisher_cls,
        patch(
            "newsdesk.worker.app.ScheduledPublisher",
            return_value=scheduler,
        ) as scheduler_cls,
        patch("newsdesk.worker.app.asyncio.Event", return_value=stop_event),
        patch("newsdesk.worker.app.asyncio.get_running_loop", return_value=loop),
    ):
        await run()

    publisher_cls.assert_called_once_with(settings.servicebus)
    scheduler_cls.assert_called_once_with(
        posts_cls.return_value,
        activity_cls.return_value,
        event_publisher,
        poll_seconds=30.0,
    )
    scheduler.start.assert_awaited_once()
    scheduler.stop.assert_awaited_once()
    event_publisher.close.assert_awaited_once()
    cosmos.close.assert_awaited_once()
    assert loop.add_signal_handler.call_count == 2
