"""
Storage backend contract for CatalogStore.

A backend persists the whole project collection plus the id watermark
(the highest id ever issued). Mutating methods are NOT safe to call
concurrently — CatalogStore serializes them under its lock. Read
methods may run at any time and must never observe a half-applied
write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from catalog.schemas.project import Project


@dataclass(frozen=True, slots=True)
class CatalogState:
    """One consistent read of the catalog."""

    last_id: int = 0
    projects: list[Project] = field(default_factory=list)


class CatalogBackend(ABC):
    """Persistence engine behind CatalogStore."""

    name: str = "abstract"

    async def initialize(self) -> None:
        """Prepare storage (create files/schema). Idempotent."""

    async def close(self) -> None:
        """Release connections/handles."""

    @abstractmethod
    async def load(self) -> CatalogState:
        """Read the entire catalog in insertion order."""

    async def find(self, project_id: int) -> Project | None:
        for project in (await self.load()).projects:
            if project.id == project_id:
                return project
        return None

    @abstractmethod
    async def insert(self, project: Project) -> None:
        """Append `project` and raise the watermark to its id."""

    @abstractmethod
    async def replace(self, project: Project) -> None:
        """Overwrite the stored record with the same id, keeping its position."""

    @abstractmethod
    async def delete(self, project_id: int) -> None:
        """Drop the record. The watermark is left untouched."""
