"""
Async database engine factory and ORM base for the SQL catalog backend.

Rules enforced:
  • Every DB call goes through AsyncSession.
  • The engine is built per app instance by create_app(), not at import,
    so tests can point each app at its own database.
  • The declarative Base is shared across all models so Alembic can
    auto-detect schema changes from a single metadata object.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


# ── ORM Base ────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Shared declarative base for all SQLAlchemy models."""


# ── Engine ──────────────────────────────────────────────────
def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    # pool_pre_ping: drop stale connections before reuse
    # echo: SQL logging — only in debug mode
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


# ── Session factory ─────────────────────────────────────────
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # avoid lazy-load issues after commit
    )
