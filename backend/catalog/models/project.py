"""
Project model — one catalog entry in the SQL backend.

Rows mirror the snapshot record field-for-field so either backend
round-trips a Project losslessly.

Notes:
  • `id` is assigned by CatalogStore (time-derived), never autoincrement.
  • `position` preserves insertion order independent of id.
  • `tech` is stored as a JSON array.
"""

import datetime

from sqlalchemy import JSON, BigInteger, Integer, String, Text
from sqlalchemy.types import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.database import Base


class ProjectRow(Base):
    """One catalog project."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    position: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tech: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list,
    )
    url: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    image: Mapped[str | None] = mapped_column(
        String(255), nullable=True,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProjectRow id={self.id} title={self.title!r}>"


class IdWatermark(Base):
    """
    Single-row table holding the highest id ever issued.

    Deleting the newest project must not free its id for reuse.
    """

    __tablename__ = "id_watermark"

    slot: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    last_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
