"""Async Cosmos DB connection shared by the newsdesk repositories."""

from __future__ import annotations

from types import TracebackType

from azure.cosmos.aio import CosmosClient as AzureCosmosClient
from azure.cosmos.aio import DatabaseProxy

from newsdesk.config import CosmosConfig


class CosmosClient:
    """Owns the account connection; repositories bind to ``database``.

    Usable directly (``initialize``/``close``) or as an async context manager.
    """

    def __init__(self, config: CosmosConfig) -> None:
        self._endpoint = config.endpoint
        self._key = config.key
        self._database_name = config.database
        self._client: AzureCosmosClient | None = None

    async def initialize(self) -> None:
        """Open the account connection. Calling it again is a no-op."""
        if not self._endpoint:
            raise ConnectionError("AZURE_COSMOS_ENDPOINT is not set — no post store to connect to")
        if self._client is None:
            self._client = AzureCosmosClient(self._endpoint, credential=self._key)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> CosmosClient:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def database(self) -> DatabaseProxy:
        """The newsdesk database holding posts, approval requests and activity."""
        if self._client is None:
            raise RuntimeError("CosmosClient not initialized — call initialize() first")
        return self._client.get_database_client(self._database_name)
