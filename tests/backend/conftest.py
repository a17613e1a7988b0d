"""
Backend-specific test fixtures and configuration.

These fixtures extend the global fixtures with helpers for testing FastAPI
routes against the fake client factory.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "backend"))


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================

@pytest.fixture
def app(settings, data_access):
    """
    Create the FastAPI app wired to the fake client factory.
    """
    from dbproxy.main import create_app

    return create_app(settings=settings, data_access=data_access)


@pytest.fixture
def client(app):
    """
    Create a TestClient for the app, running startup and shutdown.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture
def lenient_client(app):
    """TestClient that returns 500 responses instead of raising."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# =============================================================================
# Response Assertion Helpers
# =============================================================================

@pytest.fixture
def assert_error_response():
    """Helper to assert error response structure."""
    def _assert(response, status_code: int, error_contains: str = None):
        assert response.status_code == status_code
        data = response.json()
        assert "error" in data
        if error_contains:
            assert error_contains.lower() in data["error"].lower()
    return _assert


@pytest.fixture
def insert_document(client):
    """Insert one document through the API and return its id."""
    def _insert(document: dict, database: str = "Test", collection: str = "Items") -> str:
        response = client.post(f"/insert/{database}/{collection}", json={"document": document})
        assert response.status_code == 201, response.text
        return response.json()["insertedId"]
    return _insert
