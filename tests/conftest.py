"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient

from main import Settings, create_app
from store import GroupStore


@pytest.fixture
def store():
    """Fresh, empty store for every test"""
    return GroupStore()


@pytest.fixture
def client(store):
    """Test client bound to the per-test store"""
    app = create_app(store=store, settings=Settings())
    return TestClient(app)
