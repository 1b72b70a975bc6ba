"""
Shared fixtures: every test runs against a fresh in-memory MongoDB.
"""

import sys
from pathlib import Path

import pytest
from mongomock_motor import AsyncMongoMockClient

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from services import document_store
from services.live_state import live_state


@pytest.fixture(autouse=True)
def mock_db(monkeypatch):
    db = AsyncMongoMockClient()["nh_console_test"]
    monkeypatch.setattr(document_store, "db", db)
    document_store._subscribers.clear()
    yield db
    live_state.stop()
    document_store._subscribers.clear()
