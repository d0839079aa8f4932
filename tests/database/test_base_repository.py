"""Tests for BaseRepository document access, exercised through PostRepository."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.core import MatchConditions
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from factories import make_post
from newsdesk.database.repositories.posts import PostRepository
from newsdesk.models.post import PostStatus

_STORED = {
    "id": "post-1",
    "author_id": "admin-1",
    "status": "draft",
    "content": {"title": "Sensex closes at record high"},
    "version": 0,
    "_etag": "etag-1",
    "created_at": "2026-03-01T00:00:00+00:00",
    "updated_at": "2026-03-01T00:00:00+00:00",
}


async def _items(*rows):
    for row in rows:
        yield row


class TestBaseRepository:
    """Test the shared repository behaviour."""

    @pytest.fixture
    def repo(self) -> PostRepository:
        mock_db = MagicMock()
        mock_container = AsyncMock()
        mock_db.get_container_client.return_value = mock_container
        return PostRepository(mock_db)

    def test_binds_to_named_container(self) -> None:
        mock_db = MagicMock()

        PostRepository(mock_db)

        mock_db.get_container_client.assert_called_once_with("posts")

    async def test_get_with_etag_returns_model_and_etag(self, repo: PostRepository) -> None:
        repo._container.read_item.return_value = dict(_STORED)  # noqa: SLF001

        found = await repo.get_with_etag("post-1", "post-1")

        assert found is not None
        post, etag = found
        assert post.id == "post-1"
        assert post.status == PostStatus.DRAFT
        assert etag == "etag-1"

    async def test_get_returns_none_when_missing(self, repo: PostRepository) -> None:
        repo._container.read_item.side_effect = CosmosResourceNotFoundError(  # noqa: SLF001
            status_code=404,
            message="Not found",
        )

        assert await repo.get("post-1", "post-1") is None

    async def test_get_returns_none_when_soft_deleted(self, repo: PostRepository) -> None:
        repo._container.read_item.return_value = {  # noqa: SLF001
            **_STORED,
            "deleted_at": "2026-03-02T00:00:00+00:00",
        }

        assert await repo.get("post-1", "post-1") is None

    async def test_create_serializes_without_nulls(self, repo: PostRepository) -> None:
        await repo.create(make_post())

        body = repo._container.create_item.call_args.kwargs["body"]  # noqa: SLF001
        assert body["id"] == "post-1"
        assert body["status"] == "draft"
        assert "publish_at" not in body

    async def test_update_bumps_updated_at(self, repo: PostRepository) -> None:
        post = make_post()
        before = post.updated_at

        await repo.update(post, "post-1")

        assert post.updated_at >= before
        repo._container.upsert_item.assert_called_once()  # noqa: SLF001

    async def test_replace_if_unmodified_uses_etag_match(self, repo: PostRepository) -> None:
        replaced = await repo.replace_if_unmodified(make_post(), "etag-1")

        assert replaced is True
        kwargs = repo._container.replace_item.call_args.kwargs  # noqa: SLF001
        assert kwargs["item"] == "post-1"
        assert kwargs["etag"] == "etag-1"
        assert kwargs["match_condition"] is MatchConditions.IfNotModified

    async def test_replace_if_unmodified_returns_false_on_conflict(
        self, repo: PostRepository
    ) -> None:
        repo._container.replace_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=412,
            message="Precondition failed",
        )

        assert await repo.replace_if_unmodified(make_post(), "etag-1") is False

    async def test_replace_if_unmodified_raises_other_errors(self, repo: PostRepository) -> None:
        repo._container.replace_item.side_effect = CosmosHttpResponseError(  # noqa: SLF001
            status_code=503,
            message="Service unavailable",
        )

        with pytest.raises(CosmosHttpResponseError):
            await repo.replace_if_unmodified(make_post(), "etag-1")

    async def test_soft_delete_sets_deleted_at(self, repo: PostRepository) -> None:
        post = make_post()

        await repo.soft_delete(post, "post-1")

        assert post.deleted_at is not None
        body = repo._container.upsert_item.call_args.kwargs["body"]  # noqa: SLF001
        assert body["deleted_at"]

    async def test_query_validates_rows(self, repo: PostRepository) -> None:
        repo._container.query_items = MagicMock(return_value=_items(dict(_STORED)))  # noqa: SLF001

        result = await repo.query("SELECT * FROM c")

        assert [post.id for post in result] == ["post-1"]
        assert repo._container.query_items.call_args.kwargs["parameters"] == []  # noqa: SLF001

    async def test_delete_removes_document(self, repo: PostRepository) -> None:
        await repo.delete("post-1", "post-1")

        repo._container.delete_item.assert_awaited_once_with(  # noqa: SLF001
            item="post-1", partition_key="post-1"
        )
