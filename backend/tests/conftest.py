"""Root test fixtures shared across all test types.

Every fixture builds its own store/app against tmp_path — nothing
touches the developer's data/ or uploads/ directories. Store and app
fixtures are parametrized over both catalog backends so each contract
test runs against the snapshot file and the SQL database.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from catalog.core.config import Settings
from catalog.main import create_app
from catalog.services.assets import AssetManager
from catalog.services.catalog_store import CatalogStore
from catalog.storage.base import CatalogBackend
from catalog.storage.snapshot import SnapshotBackend
from catalog.storage.sql import SqlBackend

BACKENDS = ["snapshot", "sql"]

ADMIN = {"username": "admin", "password": "password"}


# --- Core fixtures ---


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def asset_manager(uploads_dir: Path) -> AssetManager:
    assets = AssetManager(uploads_dir, "/uploads", max_bytes=64 * 1024)
    assets.ensure_root()
    return assets


@pytest.fixture(params=BACKENDS)
async def backend(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncGenerator[CatalogBackend]:
    """Each catalog backend, initialized on a fresh location."""
    if request.param == "sql":
        engine: CatalogBackend = SqlBackend(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    else:
        engine = SnapshotBackend(tmp_path / "data" / "db.json")
    await engine.initialize()
    yield engine
    await engine.close()


@pytest.fixture
def store(backend: CatalogBackend, asset_manager: AssetManager) -> CatalogStore:
    return CatalogStore(backend, asset_manager)


# --- App fixtures ---


@pytest.fixture(params=BACKENDS)
def app_settings(request: pytest.FixtureRequest, tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        CATALOG_BACKEND=request.param,
        DATA_DIR=tmp_path / "data",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        ASSETS_DIR=tmp_path / "uploads",
        MAX_IMAGE_BYTES=64 * 1024,
        ADMIN_USERNAME=ADMIN["username"],
        ADMIN_PASSWORD=ADMIN["password"],
    )


@pytest.fixture
async def app(app_settings: Settings) -> AsyncGenerator[FastAPI]:
    """A fully wired app with its lifespan running."""
    application = create_app(app_settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
async def admin_client(client: AsyncClient) -> AsyncClient:
    """The same client, logged in as the catalog admin."""
    response = await client.post("/api/login", json=ADMIN)
    assert response.status_code == 200
    return client
