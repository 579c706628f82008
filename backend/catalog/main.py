"""
FastAPI application entrypoint.

create_app() builds one fully wired app from a Settings object: the
storage backend, AssetManager, CatalogStore and SessionGate are
constructed here and stored on `app.state` — there are no module-level
singletons for the core.

Lifespan:
  • On startup: create the data/asset directories and initialize the
    backend (SQL schema for the sql backend).
  • On shutdown: wait for outstanding asset releases, close the backend.

Routers (under API_PREFIX, default /api):
  • /projects      — catalog CRUD
  • /login, /logout, /auth/status — admin session
  • /health        — shallow liveness probe
Uploaded images are served read-only at ASSETS_URL_PREFIX.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from catalog.auth.session_gate import SessionGate
from catalog.core.config import Settings, settings as default_settings
from catalog.core.error_handlers import register_error_handlers
from catalog.routers.auth import router as auth_router
from catalog.routers.projects import router as projects_router
from catalog.services.assets import AssetManager
from catalog.services.catalog_store import CatalogStore
from catalog.storage.base import CatalogBackend
from catalog.storage.snapshot import SnapshotBackend
from catalog.storage.sql import SqlBackend

logging.basicConfig(
    level=logging.DEBUG if default_settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def build_backend(cfg: Settings) -> CatalogBackend:
    if cfg.CATALOG_BACKEND == "sql":
        return SqlBackend(cfg.DATABASE_URL, echo=cfg.DEBUG)
    return SnapshotBackend(cfg.snapshot_path)


def build_store(cfg: Settings) -> CatalogStore:
    assets = AssetManager(
        cfg.ASSETS_DIR,
        cfg.ASSETS_URL_PREFIX,
        max_bytes=cfg.MAX_IMAGE_BYTES,
    )
    return CatalogStore(build_backend(cfg), assets)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    cfg: Settings = app.state.settings
    store: CatalogStore = app.state.store

    cfg.DATA_DIR.mkdir(parents=True, exist_ok=True)
    store.assets.ensure_root()
    await store.backend.initialize()
    logger.info(
        "Catalog ready ✓ (backend=%s, assets=%s)",
        store.backend.name,
        store.assets.root,
    )

    yield  # ← application runs here

    await store.assets.drain()
    await store.backend.close()
    logger.info("Catalog shut down ✓")


# ── App ─────────────────────────────────────────────────────
def create_app(cfg: Settings | None = None) -> FastAPI:
    cfg = cfg or default_settings

    app = FastAPI(
        title=cfg.APP_NAME,
        version="0.1.0",
        description="Project catalog with admin-gated mutations.",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.store = build_store(cfg)
    app.state.session_gate = SessionGate(
        cfg.ADMIN_USERNAME,
        cfg.ADMIN_PASSWORD,
        ttl_seconds=cfg.SESSION_TTL_SECONDS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Mount routers
    app.include_router(projects_router, prefix=f"{cfg.API_PREFIX}/projects")
    app.include_router(auth_router, prefix=cfg.API_PREFIX)

    # ── Health check ────────────────────────────────────────
    @app.get(
        "/health",
        tags=["System"],
        summary="Liveness probe",
    )
    async def health_check() -> dict[str, str]:
        """Shallow health check — confirms the process is alive."""
        return {"status": "healthy"}

    app.mount(
        cfg.ASSETS_URL_PREFIX,
        StaticFiles(directory=cfg.ASSETS_DIR, check_dir=False),
        name="assets",
    )
    return app


app = create_app()
