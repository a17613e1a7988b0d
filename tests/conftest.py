"""
Global test fixtures for the Mongo CRUD proxy.

This module provides shared fixtures for all tests including:
- A fake Motor client factory backed by mongomock-motor that counts opened connections
- Settings and data-access layer factories
- Grocery document fixtures
"""

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from pymongo.errors import ServerSelectionTimeoutError

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

class FakeMotorClient:
    """
    Stands in for AsyncIOMotorClient.

    Documents live in an in-memory mongomock-motor client; ``admin.command``
    is the ping coroutine supplied by the factory.
    """

    def __init__(self, uri: str, ping, **options):
        from mongomock_motor import AsyncMongoMockClient

        self.uri = uri
        self.options = options
        self.closed = False
        self.admin = SimpleNamespace(command=ping)
        self._backend = AsyncMongoMockClient()

    def __getitem__(self, name):
        return self._backend[name]

    def close(self):
        self.closed = True


class FakeClientFactory:
    """
    Client factory passed to ConnectionRegistry.

    Attributes:
        clients: Every client created, in order
        ping_delay: Seconds each new client's ping takes
        failures: Number of upcoming clients whose ping fails
    """

    def __init__(self):
        self.clients: list[FakeMotorClient] = []
        self.ping_delay = 0.0
        self.failures = 0

    def __call__(self, uri: str, **options) -> FakeMotorClient:
        fail = self.failures > 0
        if fail:
            self.failures -= 1
        delay = self.ping_delay

        async def ping(command):
            await asyncio.sleep(delay)
            if fail:
                raise ServerSelectionTimeoutError("No servers found yet")
            return {"ok": 1.0}

        client = FakeMotorClient(uri, ping, **options)
        self.clients.append(client)
        return client

    @property
    def opened(self) -> int:
        return len(self.clients)


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


# =============================================================================
# Settings & Data Access Fixtures
# =============================================================================

MONGO_URI_TEMPLATE = "mongodb+srv://proxy:<PASSWORD>@cluster0.example.net/?retryWrites=true&w=majority"


@pytest.fixture
def settings():
    """Settings with a templated URI, independent of the environment."""
    from dbproxy.config import Settings

    return Settings(
        _env_file=None,
        mongo_uri=MONGO_URI_TEMPLATE,
        mongo_pass="s3cret",
        default_database="BigBoxStore",
        default_collection="GroceryInventory",
        connect_timeout_seconds=1.0,
        operation_timeout_seconds=1.0,
    )


@pytest.fixture
def connection_registry(settings, client_factory):
    from dbproxy.database.connections import ConnectionRegistry

    return ConnectionRegistry(settings, client_factory=client_factory)


@pytest.fixture
def data_access(settings, client_factory):
    from dbproxy.database.registry import DataAccessLayer

    return DataAccessLayer.from_settings(settings, client_factory=client_factory)


# =============================================================================
# Document Fixtures
# =============================================================================

@pytest.fixture
def apple() -> dict:
    """A valid grocery document."""
    return {
        "item": "apple",
        "food_group": "fruits",
        "price_in_usd": 1.2,
        "quantity": 10,
    }


@pytest.fixture
def salmon() -> dict:
    """A valid grocery document using optional fields."""
    return {
        "item": "salmon",
        "food_group": "proteins",
        "price_in_usd": 12.5,
        "quantity": 4,
        "calories_per_100g": 208,
        "wild_caught": True,
        "fat_content": "high",
    }
