"""Shared fixtures.

Settings are read at import time, so the environment is pointed at a
throwaway SQLite database and upload directory before ``app`` is imported.
"""

import os
import tempfile
from pathlib import Path
from uuid import uuid4

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="studio-tests-"))
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'studio.db'}"
os.environ["BINARY_STORE_BACKEND"] = "local"
os.environ["LOCAL_UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["LOG_DIR"] = str(_TEST_ROOT / "logs")
os.environ["LOCAL_AUTH_SECRET"] = "test-secret"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_provider
from app.main import app
from app.services.openai_provider import GenerationProvider


class FakeProvider(GenerationProvider):
    """Records every call and returns canned results or raises ``error``."""

    name = "fake"

    def __init__(self, image_url="https://img.example/1.png", text="Generated text", error=None):
        self.image_url = image_url
        self.text = text
        self.error = error
        self.calls = []
        self.connection = (True, "fake provider healthy")

    def generate_image(self, prompt, model):
        self.calls.append(("image", prompt, model))
        if self.error is not None:
            raise self.error
        return self.image_url

    def generate_text(self, prompt, model):
        self.calls.append(("text", prompt, model))
        if self.error is not None:
            raise self.error
        return self.text

    def check_connection(self):
        return self.connection


@pytest.fixture
def provider_factory():
    return FakeProvider


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def client(fake_provider):
    app.dependency_overrides[get_provider] = lambda: fake_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    """Register a fresh account and return its bearer headers."""

    def _register(email=None, password="correct-horse-battery"):
        email = email or f"user-{uuid4().hex[:12]}@example.com"
        response = client.post("/v1/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture
def auth_headers(register_user):
    return register_user()


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'service.db'}"
