"""
Snapshot-file backend — the whole catalog as one JSON document.

Layout (compatible with legacy db.json files, which have no lastId):

    {
      "lastId": 1718000000123,
      "projects": [ {id, title, category, description, tech, url,
                     image, createdAt}, ... ]
    }

Every mutation is read-entire → apply → write-entire. Writes go to a
temp file in the same directory, are fsync'ed, then swapped in with
os.replace, so readers see either the old or the new snapshot and a
failed write leaves the old one intact.

A missing or blank file is an empty catalog. A corrupt file is a StorageError,
never "empty": treating it as empty would let the next write wipe it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from catalog.core.errors import StorageError
from catalog.schemas.project import Project
from catalog.storage.base import CatalogBackend, CatalogState

logger = logging.getLogger(__name__)


class SnapshotDocument(BaseModel):
    """On-disk shape of the snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    last_id: int = Field(default=0, alias="lastId")
    projects: list[Project] = Field(default_factory=list)


class SnapshotBackend(CatalogBackend):
    """JSON snapshot at `path`."""

    name = "snapshot"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def initialize(self) -> None:
        await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)

    # ── Reads ───────────────────────────────────────────────
    async def load(self) -> CatalogState:
        return await asyncio.to_thread(self._read)

    def _read(self) -> CatalogState:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return CatalogState()
        except OSError as exc:
            logger.exception("Error reading catalog snapshot %s", self.path)
            raise StorageError("Failed to read the catalog") from exc

        if not raw.strip():
            return CatalogState()

        try:
            doc = SnapshotDocument.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.error("Catalog snapshot %s is corrupt: %s", self.path, exc)
            raise StorageError("The catalog snapshot is unreadable") from exc

        # Files written before lastId existed: derive it from the records
        last_id = max([doc.last_id, *(p.id for p in doc.projects)])
        return CatalogState(last_id=last_id, projects=doc.projects)

    # ── Writes ──────────────────────────────────────────────
    async def insert(self, project: Project) -> None:
        def apply(state: CatalogState) -> CatalogState:
            return CatalogState(
                last_id=max(state.last_id, project.id),
                projects=[*state.projects, project],
            )

        await asyncio.to_thread(self._mutate, apply)

    async def replace(self, project: Project) -> None:
        def apply(state: CatalogState) -> CatalogState:
            return CatalogState(
                last_id=state.last_id,
                projects=[project if p.id == project.id else p for p in state.projects],
            )

        await asyncio.to_thread(self._mutate, apply)

    async def delete(self, project_id: int) -> None:
        def apply(state: CatalogState) -> CatalogState:
            return CatalogState(
                last_id=state.last_id,
                projects=[p for p in state.projects if p.id != project_id],
            )

        await asyncio.to_thread(self._mutate, apply)

    def _mutate(self, apply: Callable[[CatalogState], CatalogState]) -> None:
        self._write(apply(self._read()))

    def _write(self, state: CatalogState) -> None:
        payload = SnapshotDocument(
            last_id=state.last_id, projects=state.projects,
        ).model_dump_json(by_alias=True, indent=2)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent,
            )
        except OSError as exc:
            logger.exception("Error preparing catalog snapshot write")
            raise StorageError("Failed to save the catalog") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.exception("Error writing catalog snapshot %s", self.path)
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise StorageError("Failed to save the catalog") from exc

        self._fsync_dir()

    def _fsync_dir(self) -> None:
        """Persist the rename itself; POSIX only."""
        if os.name != "posix":
            return
        try:
            dir_fd = os.open(self.path.parent, os.O_RDONLY)
        except OSError:
            logger.exception("Could not open %s to sync it", self.path.parent)
            return
        # The new snapshot is already visible, so a sync failure is logged, not raised
        try:
            os.fsync(dir_fd)
        except OSError:
            logger.exception("Could not sync directory %s", self.path.parent)
        finally:
            os.close(dir_fd)
