# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Installs a NotificationClient backed by an in-memory store on the app, so API
tests run without starting the scheduler or the Discord client.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure we import from root main.py
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from main import app
from gentle_notify import NotificationClient
from gentle_notify.tests.fakes import InMemoryNotificationStore


@pytest.fixture
def store():
    """Empty in-memory notification center."""
    return InMemoryNotificationStore()


@pytest.fixture
def client(store):
    """Test client with the notification client installed on app.state.

    Not used as a context manager, so the app lifespan (scheduler, Discord)
    does not run.
    """
    app.state.notification_client = NotificationClient(store)
    yield TestClient(app)
    app.state.notification_client = None
