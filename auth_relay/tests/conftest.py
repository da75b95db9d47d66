"""
Pytest fixtures for auth_relay. Settings are built directly; tests never read the real environment.
"""
import pytest
from fastapi.testclient import TestClient

from auth_relay.config import Settings, build_allowed_origins
from auth_relay.main import create_app

FRONTEND_URL = "https://spa.example.app"


class MockResponse:
    """Stand-in for httpx.Response: status_code, is_success, json()."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def is_success(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._body is None:
            raise ValueError("not JSON")
        return self._body


@pytest.fixture
def settings():
    return Settings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        frontend_url=FRONTEND_URL,
        allowed_origins=build_allowed_origins(FRONTEND_URL),
    )


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))
