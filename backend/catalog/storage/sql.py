"""
SQL backend — the catalog in a transactional database via SQLAlchemy.

Intended for an embedded SQLite file (sqlite+aiosqlite:///...), but any
async SQLAlchemy URL works. Each mutation is one transaction, so a
failed write rolls back cleanly and readers never see partial state.

Driver errors are logged here and surfaced as StorageError; callers
never handle SQLAlchemy exceptions directly.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import Base, build_engine, build_session_factory
from catalog.core.errors import StorageError
from catalog.models.project import IdWatermark, ProjectRow
from catalog.schemas.project import Project
from catalog.storage.base import CatalogBackend, CatalogState

logger = logging.getLogger(__name__)

_WATERMARK_SLOT = 1

# Signed 64-bit range of the BigInteger id column
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1


def _storable(project_id: int) -> bool:
    return _MIN_ID <= project_id <= _MAX_ID


def _to_project(row: ProjectRow) -> Project:
    created_at = row.created_at
    # SQLite hands back naive datetimes; everything is stored as UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=datetime.timezone.utc)
    return Project(
        id=row.id,
        title=row.title,
        category=row.category,
        description=row.description,
        tech=list(row.tech or []),
        url=row.url,
        image=row.image,
        created_at=created_at,
    )


class SqlBackend(CatalogBackend):
    """Catalog persisted in the `projects` and `id_watermark` tables."""

    name = "sql"

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self.engine = build_engine(database_url, echo=echo)
        self._session_factory = build_session_factory(self.engine)

    async def initialize(self) -> None:
        """Create missing tables. Alembic owns migrations beyond that."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            logger.exception("Could not initialize the catalog database")
            raise StorageError("Failed to initialize the catalog") from exc

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed ✓")

    @asynccontextmanager
    async def _session(self, *, write: bool) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                if write:
                    async with session.begin():
                        yield session
                else:
                    yield session
        except SQLAlchemyError as exc:
            logger.exception("Catalog database %s failed", "write" if write else "read")
            raise StorageError(
                "Failed to save the catalog" if write else "Failed to read the catalog"
            ) from exc

    # ── Reads ───────────────────────────────────────────────
    async def load(self) -> CatalogState:
        async with self._session(write=False) as session:
            rows = await session.scalars(
                select(ProjectRow).order_by(ProjectRow.position.asc())
            )
            projects = [_to_project(row) for row in rows]
            last_id = await session.scalar(
                select(IdWatermark.last_id).where(IdWatermark.slot == _WATERMARK_SLOT)
            )
        return CatalogState(last_id=last_id or 0, projects=projects)

    async def find(self, project_id: int) -> Project | None:
        if not _storable(project_id):
            return None
        async with self._session(write=False) as session:
            row = await session.get(ProjectRow, project_id)
            return _to_project(row) if row is not None else None

    # ── Writes ──────────────────────────────────────────────
    async def insert(self, project: Project) -> None:
        async with self._session(write=True) as session:
            last_position = await session.scalar(
                select(func.coalesce(func.max(ProjectRow.position), 0))
            )
            session.add(
                ProjectRow(
                    id=project.id,
                    position=last_position + 1,
                    title=project.title,
                    category=project.category,
                    description=project.description,
                    tech=list(project.tech),
                    url=project.url,
                    image=project.image,
                    created_at=project.created_at,
                )
            )

            mark = await session.get(IdWatermark, _WATERMARK_SLOT)
            if mark is None:
                session.add(IdWatermark(slot=_WATERMARK_SLOT, last_id=project.id))
            else:
                mark.last_id = max(mark.last_id, project.id)

    async def replace(self, project: Project) -> None:
        async with self._session(write=True) as session:
            row = await session.get(ProjectRow, project.id)
            if row is None:
                raise StorageError(f"Project {project.id} vanished during update")
            row.title = project.title
            row.category = project.category
            row.description = project.description
            row.tech = list(project.tech)
            row.url = project.url
            row.image = project.image

    async def delete(self, project_id: int) -> None:
        if not _storable(project_id):
            return
        async with self._session(write=True) as session:
            await session.execute(
                delete(ProjectRow).where(ProjectRow.id == project_id)
            )
