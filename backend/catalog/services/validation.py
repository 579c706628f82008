"""
Project field normalization.

Pure functions — no I/O, no clock, deterministic. Routers call these on
raw form input before touching the store; CatalogStore re-checks the
required-field invariant on ProjectFields it receives.

Rules:
  • title / category / description are trimmed and must be non-empty.
  • tech is a comma list → trimmed tokens, empty tokens dropped.
  • url is trimmed, defaults to "".
"""

from __future__ import annotations

from collections.abc import Mapping

from catalog.core.errors import ValidationError
from catalog.schemas.project import ProjectFields, ProjectPatch

REQUIRED_FIELDS = ("title", "category", "description")


def _clean(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def split_tech(raw: object) -> list[str]:
    """Split a comma-separated tag list, dropping blank tokens."""
    if isinstance(raw, (list, tuple)):
        tokens = [_clean(t) for t in raw]
    else:
        tokens = [t.strip() for t in _clean(raw).split(",")]
    return [t for t in tokens if t]


def _reject_missing(missing: list[str]) -> None:
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def normalize_project(raw: Mapping[str, object]) -> ProjectFields:
    """
    Normalize create input.

    Raises ValidationError naming every required field that is absent or
    blank after trimming.
    """
    cleaned = {name: _clean(raw.get(name)) for name in REQUIRED_FIELDS}
    _reject_missing([name for name, value in cleaned.items() if not value])

    return ProjectFields(
        **cleaned,
        tech=split_tech(raw.get("tech")),
        url=_clean(raw.get("url")),
    )


def normalize_patch(raw: Mapping[str, object]) -> ProjectPatch:
    """
    Normalize update input.

    A field is supplied when its key maps to a non-None value. Supplied
    required fields must stay non-empty; supplied url/tech replace the
    stored value, so a blank value clears them.
    """
    changes: dict[str, object] = {}

    blank: list[str] = []
    for name in REQUIRED_FIELDS:
        if raw.get(name) is None:
            continue
        value = _clean(raw[name])
        if not value:
            blank.append(name)
        changes[name] = value
    _reject_missing(blank)

    if raw.get("tech") is not None:
        changes["tech"] = split_tech(raw["tech"])
    if raw.get("url") is not None:
        changes["url"] = _clean(raw["url"])

    return ProjectPatch(**changes)


def check_fields(fields: ProjectFields) -> None:
    """Re-assert the non-empty invariant on already-normalized fields."""
    _reject_missing(
        [name for name in REQUIRED_FIELDS if not getattr(fields, name).strip()]
    )
