"""
Pydantic v2 schemas for catalog projects.

Separation:
  • ProjectFields — normalized create input (what Validation produces).
  • ProjectPatch  — normalized update input; None means "not supplied".
  • Project       — the stored record, as persisted and as returned.

The wire/snapshot form uses camelCase `createdAt`, matching the
legacy db.json layout so existing files load unchanged.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


# ── Input schemas ───────────────────────────────────────────
class ProjectFields(BaseModel):
    """Normalized fields for a new project. Never carries id/image."""

    model_config = ConfigDict(frozen=True)

    title: str
    category: str
    description: str
    tech: list[str] = Field(default_factory=list)
    url: str = ""


class ProjectPatch(BaseModel):
    """Normalized partial update. Only non-None fields are applied."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    category: str | None = None
    description: str | None = None
    tech: list[str] | None = None
    url: str | None = None

    def supplied(self) -> dict[str, object]:
        """Fields the caller actually sent."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.supplied()


# ── Stored record ───────────────────────────────────────────
class Project(BaseModel):
    """
    Full project record.

    `id` and `created_at` are assigned by the store; `image` is an
    AssetRef owned by AssetManager, or None when no asset is attached.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    id: int
    title: str
    category: str
    description: str
    tech: list[str] = Field(default_factory=list)
    url: str = ""
    image: str | None = None
    created_at: datetime.datetime = Field(alias="createdAt")

    def to_wire(self) -> dict[str, object]:
        """JSON-ready dict in the public/snapshot shape."""
        return self.model_dump(mode="json", by_alias=True)
