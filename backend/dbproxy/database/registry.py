"""
Data-access layer owning the connection and accessor registries.

Built once at startup, stored on the application state and handed to routes
through a dependency.
"""
import logging
from typing import Any, Callable

from motor.motor_asyncio import AsyncIOMotorClient

from dbproxy.config import Settings
from dbproxy.database.accessors import AccessorRegistry, CollectionAccessor
from dbproxy.database.connections import ConnectionRegistry, build_connection_uri
from dbproxy.models.catalog import SchemaResolver

logger = logging.getLogger(__name__)


class DataAccessLayer:
    """Connection registry plus accessor registry, sharing one lifetime."""

    def __init__(self, connections: ConnectionRegistry, accessors: AccessorRegistry):
        self.connections = connections
        self.accessors = accessors

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ) -> "DataAccessLayer":
        connections = ConnectionRegistry(settings, client_factory=client_factory)
        schemas = SchemaResolver(settings.default_schema, settings.collection_schemas)
        accessors = AccessorRegistry(
            connections, schemas, operation_timeout=settings.operation_timeout_seconds
        )
        return cls(connections, accessors)

    async def acquire(self, database_name: str, collection_name: str) -> CollectionAccessor:
        return await self.accessors.acquire(database_name, collection_name)

    def invalidate(self, database_name: str) -> bool:
        """
        Drop a database's accessors, then close and forget its connection.

        Returns whether a connection was cached. Creations already in flight
        for the database are not stopped and still publish when they finish.
        """
        self.accessors.invalidate(database_name)
        return self.connections.invalidate(database_name)

    async def verify(self, database_name: str, collection_name: str) -> int:
        """Open the given collection and count its documents."""
        accessor = await self.accessors.acquire(database_name, collection_name)
        count = await accessor.count()
        logger.info(f"Found {count} documents in {database_name}.{collection_name}")
        return count

    async def close(self) -> None:
        """Forget every accessor and close every connection."""
        self.accessors.clear()
        await self.connections.close_all()


def check_connection_settings(settings: Settings) -> str:
    """
    Fail fast on a missing or malformed connection template.

    Returns the URI for the default database.

    Raises:
        ConfigError: the template or credential is unusable
    """
    return build_connection_uri(settings.mongo_uri, settings.mongo_pass, settings.default_database)
