"""
Application settings loaded from environment variables.

Uses pydantic-settings so that every config value is validated at startup.
Credentials stay in .env on the server — never in frontend code.
"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration.

    CATALOG_BACKEND picks the persistence engine:
        snapshot — one JSON document under DATA_DIR (default)
        sql      — SQLAlchemy async engine at DATABASE_URL
                   (sqlite+aiosqlite:///... for an embedded store)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── General ─────────────────────────────────────────────
    APP_NAME: str = "Project Catalog"
    DEBUG: bool = False
    ENVIRONMENT: str = "dev"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list[str] = ["*"]

    # ── Storage ─────────────────────────────────────────────
    CATALOG_BACKEND: Literal["snapshot", "sql"] = "snapshot"
    DATA_DIR: Path = Path("data")
    SNAPSHOT_FILE: str = "db.json"
    DATABASE_URL: str = "sqlite+aiosqlite:///data/catalog.db"

    # ── Assets ──────────────────────────────────────────────
    ASSETS_DIR: Path = Path("uploads")
    ASSETS_URL_PREFIX: str = "/uploads"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # ── Admin session ───────────────────────────────────────
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "password"
    SESSION_COOKIE_NAME: str = "catalog_session"
    SESSION_TTL_SECONDS: int = 24 * 60 * 60
    SESSION_COOKIE_SECURE: bool = False

    @property
    def snapshot_path(self) -> Path:
        return self.DATA_DIR / self.SNAPSHOT_FILE


# Default instance — create_app() accepts an explicit one for tests
settings = Settings()
