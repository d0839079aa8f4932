"""Development pre-flight check for the scheduler's local Cosmos DB emulator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import httpx

if TYPE_CHECKING:
    from newsdesk.config import Settings

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1"})


async def check_emulators(settings: Settings) -> bool:
    """Return False, after logging why, when a local post store is configured but down.

    Remote Cosmos accounts are not pinged; only an emulator on this machine is.
    """
    endpoint = settings.cosmos.endpoint
    if not endpoint:
        logger.error("AZURE_COSMOS_ENDPOINT is not set — add it to .env")
        return False
    if urlparse(endpoint).hostname not in _LOCAL_HOSTS:
        return True

    async with httpx.AsyncClient(timeout=3, verify=False) as client:  # noqa: S501
        try:
            await client.get(endpoint)
        except httpx.TransportError:
            logger.error(
                "Cosmos DB emulator is not reachable at %s — start it with: docker compose up -d",
                endpoint,
            )
            return False
    return True
