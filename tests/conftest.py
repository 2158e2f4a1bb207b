"""Shared pytest fixtures for Thumblify tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from thumblify.core.config import ThumblifyConfig
from thumblify.core.thumbnail_store import ThumbnailStore

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


class FakeGenerator:
    """Stands in for ThumbnailGenerator; records every call."""

    def __init__(self, image_bytes: bytes = PNG_BYTES, error: Exception | None = None):
        self.image_bytes = image_bytes
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.on_generate = None

    def generate(self, prompt: str, aspect_ratio: str) -> bytes:
        self.calls.append((prompt, aspect_ratio))
        if self.on_generate is not None:
            self.on_generate()
        if self.error is not None:
            raise self.error
        return self.image_bytes


class FakeMediaHost:
    """Stands in for MediaHost; returns Cloudinary-shaped URLs."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.uploads: list[bytes] = []

    def upload(self, image_bytes: bytes) -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append(image_bytes)
        return (
            "https://res.cloudinary.com/demo/image/upload/"
            f"v1700000000/thumbnails/thumb{len(self.uploads)}.png"
        )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ThumblifyConfig:
    """Create a test configuration backed by a temporary data directory."""
    return ThumblifyConfig(
        _env_file=None,
        environment="development",
        data_dir=temp_dir / "data",
        gemini_api_key="test-key",
        cloudinary_cloud_name="demo",
        generation_timeout_seconds=300,
    )


@pytest.fixture
def thumbnail_store(test_config: ThumblifyConfig) -> ThumbnailStore:
    """A record store in the temporary data directory."""
    return ThumbnailStore(test_config.database_path)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def fake_media_host() -> FakeMediaHost:
    return FakeMediaHost()


@pytest.fixture
def test_client(
    monkeypatch, test_config, fake_generator, fake_media_host
) -> Generator[TestClient, None, None]:
    """A TestClient for the app, wired to the test config and fakes.

    The lifespan runs against the temporary database; the provider and
    media host on ``app.state`` are then swapped for fakes.
    """
    from thumblify.api import main

    monkeypatch.setattr(main, "config", test_config)
    with TestClient(main.app) as client:
        main.app.state.generator = fake_generator
        main.app.state.media_host = fake_media_host
        yield client


@pytest.fixture
def make_client(test_client):
    """Factory for extra clients with their own cookie jar.

    The app is already started by ``test_client``, so these share its state.
    """
    from thumblify.api import main

    def _make() -> TestClient:
        return TestClient(main.app)

    return _make


def register(client: TestClient, email: str = "alice@example.com") -> dict:
    """Register (and thereby log in) a user on ``client``."""
    resp = client.post(
        "/api/auth/register",
        json={"name": email.split("@")[0], "email": email, "password": "secret123"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]


@pytest.fixture
def auth_client(test_client) -> TestClient:
    """The ``test_client`` logged in as alice@example.com."""
    register(test_client)
    return test_client
