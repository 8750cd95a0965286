"""
Storefront Backend - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that needs the API gets a fresh app from
       create_app(test_settings), backed by its own in-memory SQLite
       database (sqlite+aiosqlite with a StaticPool) and tmp_path for the
       category registry and upload staging.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings with test secrets and tmp paths
    ├── storefront_app: FastAPI app with tables created
    ├── client: HTTPX AsyncClient over ASGITransport
    ├── db_session: AsyncSession on the same database, for direct checks
    ├── codec / tokens: crypto collaborators from the app
    └── sample_image_bytes / product_payload: request data
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Importing app.main builds a module-level app from the environment; point
# it at throwaway locations before that happens.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("UPLOAD_TMP_DIR", tempfile.mkdtemp(prefix="storefront_test_"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        aes_password="test-passphrase",
        aes_salt="test-salt",
        aes_counter="5",
        jwt_secret="test-jwt-secret",
        jwt_expires_in="1h",
        categories_file=str(tmp_path / "data" / "categories.json"),
        upload_tmp_dir=str(tmp_path / "uploads"),
        cloudinary_cloud_name="demo-cloud",
        cloudinary_api_key="123456",
        cloudinary_api_secret="cloud-secret",
        retry_max_attempts=3,
        retry_min_wait=0,
        retry_max_wait=0,
        rate_limit_requests=1000,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def storefront_app(test_settings):
    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(storefront_app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=storefront_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(storefront_app):
    """A session on the app's database, for asserting on stored rows."""
    async with storefront_app.state.database.session_factory() as session:
        yield session


@pytest.fixture
def codec(storefront_app):
    return storefront_app.state.codec


@pytest.fixture
def tokens(storefront_app):
    return storefront_app.state.tokens


@pytest.fixture
def sample_image_bytes():
    """PNG-signed bytes for upload tests; contents are never decoded."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
        b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N"
        b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )


@pytest.fixture
def product_payload():
    """Factory for valid POST /product bodies."""

    def make(name: str = "Widget", **overrides):
        body = {
            "name": name,
            "category": "gadgets",
            "price": 9.99,
            "stock": 5,
            "images": ["https://img.example.com/widget.png"],
            "description": "A useful widget",
            "tags": ["tools"],
        }
        body.update(overrides)
        return body

    return make
