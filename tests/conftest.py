"""Shared fixtures: every test gets its own app bound to a temporary upload directory."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from imghost.config import Settings
from imghost.main import create_app

from .helpers import png_bytes


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def app_settings(upload_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        upload_dir=str(upload_dir),
        max_file_size=4096,
        max_files=3,
        public_base_url=None,
        production_domain=None,
    )


@pytest.fixture
def client(app_settings: Settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def upload_png(client: TestClient):
    def _upload(name: str = "cat.png", size: int = 2048):
        response = client.post("/api/upload", files={"image": (name, png_bytes(size), "image/png")})
        assert response.status_code == 201, response.text
        return response.json()["file"]

    return _upload
