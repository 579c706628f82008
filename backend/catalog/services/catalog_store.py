"""
CatalogStore — the authoritative project collection.

CONSISTENCY:
  Every mutation runs read → apply → write inside one asyncio.Lock owned
  by this instance, so concurrent creates can't lose each other's
  records and mutations apply in a single total order. Reads skip the
  lock; backends guarantee they never see a half-written state.

ASSETS:
  New images are written BEFORE the record is persisted and old images
  are released only AFTER the replacing write succeeded, so a stored
  `image` always points at an existing file. If the write fails, the
  freshly stored image is released instead and the error propagates.

IDS:
  Derived from the wall clock in milliseconds, forced above the
  persisted watermark, and bumped past any id still present. Allocation
  happens under the same lock as the insert.

Authorization is NOT checked here — routers gate mutations through
SessionGate before calling in.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from catalog.core.errors import ProjectNotFound, ValidationError
from catalog.schemas.project import Project, ProjectFields, ProjectPatch
from catalog.services.assets import AssetManager
from catalog.services.validation import check_fields
from catalog.storage.base import CatalogBackend, CatalogState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """Raw bytes of an uploaded image plus the client's filename."""

    data: bytes
    filename: str | None = None


class CatalogStore:
    """Serialized CRUD over a CatalogBackend, with asset bookkeeping."""

    def __init__(
        self,
        backend: CatalogBackend,
        assets: AssetManager,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.assets = assets
        self.lock = asyncio.Lock()
        self._clock = clock

    # ── Reads ───────────────────────────────────────────────
    async def list(self) -> list[Project]:
        """All projects in insertion order."""
        return (await self.backend.load()).projects

    async def get(self, project_id: int) -> Project:
        project = await self.backend.find(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    # ── Mutations ───────────────────────────────────────────
    async def create(
        self,
        fields: ProjectFields,
        image: UploadedImage | None = None,
    ) -> Project:
        check_fields(fields)
        image_ref = await self._store_image(image)

        try:
            async with self.lock:
                state = await self.backend.load()
                project = Project(
                    id=self._allocate_id(state),
                    **fields.model_dump(),
                    image=image_ref,
                    created_at=datetime.datetime.now(datetime.timezone.utc),
                )
                await self.backend.insert(project)
        except Exception:
            self._discard(image_ref)
            raise

        logger.info("Created project %s (%r)", project.id, project.title)
        return project

    async def update(
        self,
        project_id: int,
        patch: ProjectPatch,
        image: UploadedImage | None = None,
    ) -> Project:
        """
        Apply only the supplied fields. A new image replaces the old one,
        which is released once the update is persisted.
        """
        if patch.is_empty() and image is None:
            raise ValidationError("Nothing to update")

        # Unknown ids fail before any image hits the disk
        await self.get(project_id)
        image_ref = await self._store_image(image)

        try:
            async with self.lock:
                current = await self.backend.find(project_id)
                if current is None:
                    raise ProjectNotFound(project_id)

                changes = patch.supplied()
                if image_ref is not None:
                    changes["image"] = image_ref
                updated = current.model_copy(update=changes)
                await self.backend.replace(updated)
        except Exception:
            self._discard(image_ref)
            raise

        if image_ref is not None and current.image and current.image != image_ref:
            self.assets.schedule_release(current.image)

        logger.info("Updated project %s: %s", project_id, sorted(changes))
        return updated

    async def remove(self, project_id: int) -> None:
        async with self.lock:
            current = await self.backend.find(project_id)
            if current is None:
                raise ProjectNotFound(project_id)
            await self.backend.delete(project_id)

        if current.image:
            self.assets.schedule_release(current.image)
        logger.info("Deleted project %s", project_id)

    # ── Helpers ─────────────────────────────────────────────
    def _allocate_id(self, state: CatalogState) -> int:
        candidate = max(int(self._clock() * 1000), state.last_id + 1)
        taken = {p.id for p in state.projects}
        while candidate in taken:
            candidate += 1
        return candidate

    async def _store_image(self, image: UploadedImage | None) -> str | None:
        if image is None:
            return None
        return await self.assets.store_new(image.data, image.filename)

    def _discard(self, image_ref: str | None) -> None:
        if image_ref is not None:
            logger.warning("Discarding unattached asset %s", image_ref)
            self.assets.schedule_release(image_ref)
