"""
Shared fixtures: a temporary SQLite database and storage root per test.
"""
from __future__ import annotations

import io
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Make the blog_api package importable when running from a checkout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings read at import time (module-level app, Celery app) must never touch real services.
_IMPORT_DIR = tempfile.mkdtemp(prefix="blog_api_tests_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(_IMPORT_DIR) / 'import.db'}")
os.environ.setdefault("STORAGE_ROOT", str(Path(_IMPORT_DIR) / "storage"))
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("WEATHER_API_KEY", "test-key")

from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402

from blog_api.app import create_app  # noqa: E402
from blog_api.core import config as core_config  # noqa: E402
from blog_api.core import storage as core_storage  # noqa: E402
from blog_api.core.rate_limiter import reset_limits  # noqa: E402
from blog_api.db import create_tables, session as db_session  # noqa: E402
from blog_api.services import notifications  # noqa: E402
from blog_api.services import weather_service  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    core_storage.get_storage.cache_clear()
    weather_service.get_weather_service.cache_clear()


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file and storage dir, and drop everything afterwards."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setenv("WEATHER_API_KEY", "test-key")
    monkeypatch.setenv("TOKEN_TTL_SECONDS", "0")
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://localhost:8000")
    monkeypatch.setenv("APP_NAME", "Blog API")
    monkeypatch.setenv("SMTP_HOST", "")
    _clear_caches()
    reset_limits()

    engine = db_session.get_engine()
    create_tables.drop_all()
    create_tables.create_all()

    yield db_file

    create_tables.drop_all()
    engine.dispose()
    _clear_caches()
    reset_limits()


@pytest.fixture()
def welcome_mails(monkeypatch):
    """Record welcome mails instead of queueing them."""
    sent: list[tuple[str, str]] = []

    def _record(email: str, name: str) -> bool:
        sent.append((email, name))
        return True

    monkeypatch.setattr(notifications, "dispatch_welcome_email", _record)
    return sent


@pytest.fixture()
def client(temp_db, welcome_mails):
    with TestClient(create_app()) as test_client:
        yield test_client


def register(client, *, name="John Doe", email="johndoe@example.com", password="password"):
    return client.post(
        "/register",
        json={"name": name, "email": email, "password": password, "password_confirmation": password},
    )


@pytest.fixture()
def auth_headers(client):
    response = register(client)
    assert response.status_code == 201
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


def png_bytes(color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()
