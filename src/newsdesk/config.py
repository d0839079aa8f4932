"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


def _env(key: str, default: str = "") -> str:
    """Read an environment variable, falling back to a default."""
    return os.environ.get(key, default)


@dataclass(frozen=True)
class CosmosConfig:
    endpoint: str = field(default_factory=lambda: _env("AZURE_COSMOS_ENDPOINT"))
    key: str = field(default_factory=lambda: _env("AZURE_COSMOS_KEY"))
    database: str = field(default_factory=lambda: _env("AZURE_COSMOS_DATABASE", "newsdesk"))


@dataclass(frozen=True)
class ServiceBusConfig:
    connection_string: str = field(
        default_factory=lambda: _env("AZURE_SERVICEBUS_CONNECTION_STRING")
    )
    topic_name: str = field(
        default_factory=lambda: _env("AZURE_SERVICEBUS_TOPIC", "post-events")
    )


@dataclass(frozen=True)
class SchedulerConfig:
    poll_seconds: float = field(
        default_factory=lambda: float(_env("SCHEDULER_POLL_SECONDS", "60"))
    )


@dataclass(frozen=True)
class MonitorConfig:
    connection_string: str = field(
        default_factory=lambda: _env("APPLICATIONINSIGHTS_CONNECTION_STRING")
    )


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class Settings:
    cosmos: CosmosConfig = field(default_factory=CosmosConfig)
    servicebus: ServiceBusConfig = field(default_factory=ServiceBusConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    app: AppConfig = field(default_factory=AppConfig)


def load_settings() -> Settings:
    """Load `.env` (if present) and build the settings tree."""
    load_dotenv()
    return Settings()
