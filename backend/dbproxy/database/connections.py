"""
Database connection management for MongoDB.

One Motor client per database name, opened from a URI template on first use.
"""
import asyncio
import logging
from typing import Any, Callable, Optional
from urllib.parse import quote_plus

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from dbproxy.config import Settings
from dbproxy.core.errors import ConfigError, DatabaseConnectionError
from dbproxy.database.naming import validate_database_name
from dbproxy.database.singleflight import SingleFlight

logger = logging.getLogger(__name__)

PASSWORD_PLACEHOLDER = "<PASSWORD>"
DATABASE_PLACEHOLDER = "<DATABASE>"
URI_SCHEMES = ("mongodb://", "mongodb+srv://")


def build_connection_uri(template: str, password: str, database_name: str) -> str:
    """
    Fill the connection template for one database.

    ``<PASSWORD>`` is replaced with the URL-escaped credential. The database
    goes into ``<DATABASE>`` when the template has it, otherwise into the empty
    path segment before the query string (``/?`` becomes ``/<name>?``).
    """
    if not template:
        raise ConfigError("MONGO_URI is not set")
    if not template.startswith(URI_SCHEMES):
        raise ConfigError("MONGO_URI must start with mongodb:// or mongodb+srv://")

    uri = template
    if PASSWORD_PLACEHOLDER in uri:
        if not password:
            raise ConfigError(f"MONGO_URI contains {PASSWORD_PLACEHOLDER} but MONGO_PASS is not set")
        uri = uri.replace(PASSWORD_PLACEHOLDER, quote_plus(password))

    if DATABASE_PLACEHOLDER in uri:
        return uri.replace(DATABASE_PLACEHOLDER, database_name)

    base, has_query, query = uri.partition("?")
    authority = base.split("://", 1)[1]
    hosts, _, path = authority.partition("/")
    if not hosts:
        raise ConfigError("MONGO_URI has no host")
    if path:
        raise ConfigError(
            f"MONGO_URI already names database '{path}'; leave the path empty or use {DATABASE_PLACEHOLDER}"
        )
    uri = f"{base.rstrip('/')}/{database_name}"
    if has_query:
        uri = f"{uri}?{query}"
    return uri


def mask_password(uri: str, password: str) -> str:
    """Hide the credential in a URI that is about to be logged."""
    if not password:
        return uri
    return uri.replace(quote_plus(password), "****")


class DatabaseConnection:
    """A live client bound to one named database."""

    def __init__(self, name: str, client: Any):
        self.name = name
        self.client = client
        self.database = client[name]

    def __repr__(self) -> str:
        return f"DatabaseConnection({self.name!r})"

    def collection(self, collection_name: str):
        return self.database[collection_name]

    async def ping(self) -> None:
        await self.client.admin.command("ping")

    def close(self) -> None:
        self.client.close()


class ConnectionRegistry:
    """Maps database names to one shared connection each."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self._settings = settings
        self._client_factory = client_factory
        self._connections: SingleFlight[str, DatabaseConnection] = SingleFlight("connection")

    def names(self) -> list[str]:
        return self._connections.keys()

    def get(self, database_name: str) -> Optional[DatabaseConnection]:
        return self._connections.get(database_name)

    async def acquire(
        self, database_name: str, timeout: Optional[float] = None
    ) -> DatabaseConnection:
        """
        Get the connection for a database, opening it on first use.

        Args:
            database_name: Database to connect to
            timeout: Seconds this caller is willing to wait

        Raises:
            InvalidNameError: the name is not a valid database name
            DatabaseConnectionError: the connection could not be opened
        """
        validate_database_name(database_name)
        try:
            return await self._connections.acquire(
                database_name, lambda: self._open(database_name), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise DatabaseConnectionError(
                f"Timed out after {timeout}s waiting for a connection to database '{database_name}'"
            ) from e

    async def _open(self, database_name: str) -> DatabaseConnection:
        settings = self._settings
        try:
            uri = build_connection_uri(settings.mongo_uri, settings.mongo_pass, database_name)
        except ConfigError as e:
            logger.error(f"Cannot build connection string for database '{database_name}': {e.message}")
            raise DatabaseConnectionError(
                f"Cannot connect to database '{database_name}': {e.message}"
            ) from e

        logger.info(
            f"Creating new connection for database '{database_name}': "
            f"{mask_password(uri, settings.mongo_pass)}"
        )
        timeout_ms = int(settings.connect_timeout_seconds * 1000)
        try:
            client = self._client_factory(
                uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
            )
        except PyMongoError as e:
            logger.error(f"Invalid connection string for database '{database_name}': {e}")
            raise DatabaseConnectionError(
                f"Cannot connect to database '{database_name}': {e}"
            ) from e

        connection = DatabaseConnection(database_name, client)
        try:
            await asyncio.wait_for(connection.ping(), settings.connect_timeout_seconds)
        except (PyMongoError, OSError, asyncio.TimeoutError) as e:
            connection.close()
            reason = str(e) or type(e).__name__
            logger.error(f"Connection to database '{database_name}' failed: {reason}")
            raise DatabaseConnectionError(
                f"Cannot connect to database '{database_name}': {reason}"
            ) from e

        logger.info(f"New connection created for database: {database_name}")
        return connection

    def invalidate(self, database_name: str) -> bool:
        """
        Drop and close a cached connection. Returns whether one existed.

        An attempt already in flight for the name is not stopped and still
        publishes its connection when it finishes. Accessors bound to the
        dropped connection are rebound on their next acquire.
        """
        connection = self._connections.pop(database_name)
        if connection is None:
            return False
        connection.close()
        logger.info(f"Invalidated connection for database: {database_name}")
        return True

    async def ping_all(self) -> dict[str, str]:
        """Ping every open connection and report its state."""
        checks = {}
        for name, connection in self._connections.items():
            try:
                await asyncio.wait_for(connection.ping(), self._settings.connect_timeout_seconds)
                checks[name] = "healthy"
            except Exception as e:
                checks[name] = f"unhealthy: {str(e) or type(e).__name__}"
        return checks

    async def close_all(self) -> None:
        """Close all database connections."""
        for connection in self._connections.clear():
            connection.close()
