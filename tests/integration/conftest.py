"""
Integration test fixtures for Citro.

Provides a FastAPI test client wired to the in-memory collaborators from the
root conftest, so requests never touch a real database.
"""

import pytest
from fastapi.testclient import TestClient

from citro.api.main import create_app


@pytest.fixture
def api_app(services):
    """App built around the in-memory collaborators."""
    return create_app(services=services)


@pytest.fixture
def test_client(api_app):
    """Create a test client for the voice API."""
    return TestClient(api_app)
