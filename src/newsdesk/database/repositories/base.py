"""Generic repository over a single Cosmos DB container."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, cast

from azure.core import MatchConditions
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from newsdesk.models.base import DocumentBase

if TYPE_CHECKING:
    from azure.cosmos.aio import DatabaseProxy

T = TypeVar("T", bound=DocumentBase)

_HTTP_PRECONDITION_FAILED = 412


class BaseRepository(Generic[T]):
    """CRUD, soft delete and ETag-guarded replace for one document type."""

    container_name: ClassVar[str]
    model_class: type[T]

    def __init__(self, database: DatabaseProxy) -> None:
        self._container = database.get_container_client(self.container_name)

    @staticmethod
    def _to_body(item: T) -> dict[str, Any]:
        return item.model_dump(mode="json", exclude_none=True)

    async def create(self, item: T) -> T:
        """Insert a new document."""
        await self._container.create_item(body=self._to_body(item))
        return item

    async def get(self, item_id: str, partition_key: str) -> T | None:
        """Fetch a live document by id, or None when missing or soft-deleted."""
        found = await self.get_with_etag(item_id, partition_key)
        return found[0] if found else None

    async def get_with_etag(self, item_id: str, partition_key: str) -> tuple[T, str] | None:
        """Fetch a live document together with its ETag for a later guarded replace."""
        try:
            data = cast(
                "dict[str, Any]",
                await self._container.read_item(item=item_id, partition_key=partition_key),
            )
        except CosmosResourceNotFoundError:
            return None
        if data.get("deleted_at") is not None:
            return None
        return self.model_class.model_validate(data), str(data.get("_etag", ""))

    async def update(self, item: T, partition_key: str) -> T:  # noqa: ARG002
        """Upsert a document unconditionally, bumping ``updated_at``."""
        item.updated_at = datetime.now(UTC)
        await self._container.upsert_item(body=self._to_body(item))
        return item

    async def replace_if_unmodified(self, item: T, etag: str) -> bool:
        """Replace a document only if its ETag still matches. Returns False on conflict."""
        try:
            await self._container.replace_item(
                item=item.id,
                body=self._to_body(item),
                etag=etag,
                match_condition=MatchConditions.IfNotModified,
            )
        except CosmosHttpResponseError as exc:
            if exc.status_code == _HTTP_PRECONDITION_FAILED:
                return False
            raise
        return True

    async def soft_delete(self, item: T, partition_key: str) -> T:
        """Mark a document deleted without removing it."""
        item.deleted_at = datetime.now(UTC)
        return await self.update(item, partition_key)

    async def delete(self, item_id: str, partition_key: str) -> None:
        """Remove a document outright. Used to withdraw a write that was never committed."""
        await self._container.delete_item(item=item_id, partition_key=partition_key)

    async def query(
        self,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
    ) -> list[T]:
        """Run a SQL query and validate every result into the model class."""
        results: list[T] = []
        async for data in self._container.query_items(
            query=query,
            parameters=parameters or [],
        ):
            results.append(self.model_class.model_validate(data))
        return results
