"""Cosmos DB persistence for posts, approval requests and activity."""

from newsdesk.database.client import CosmosClient

__all__ = ["CosmosClient"]
