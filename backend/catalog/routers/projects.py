"""
Projects router — the public catalog and its admin mutations.

GET    /projects          — list, no auth
GET    /projects/{id}     — one record, no auth
POST   /projects          — create (multipart), admin session
PUT    /projects/{id}     — partial update (multipart), admin session
DELETE /projects/{id}     — delete + release image, admin session

Each handler: auth (mutations) → normalize input → exactly one
CatalogStore call. Domain errors bubble to the global handlers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Response, UploadFile, status

from catalog.auth.dependencies import AdminSession, Store
from catalog.schemas.project import Project
from catalog.services.assets import AssetManager
from catalog.services.catalog_store import UploadedImage
from catalog.services.validation import normalize_patch, normalize_project

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Projects"])

# Multipart text fields; None means the form did not carry the field
OptionalText = Annotated[str | None, Form()]
OptionalImage = Annotated[UploadFile | None, File()]


async def _read_image(upload: UploadFile | None, assets: AssetManager) -> UploadedImage | None:
    """
    Pull an uploaded file into memory, reading at most one byte past the
    size limit so AssetManager can reject oversized uploads.
    """
    if upload is None or not upload.filename:
        return None
    limit = assets.max_bytes
    data = await upload.read(limit + 1 if limit is not None else -1)
    return UploadedImage(data=data, filename=upload.filename)


# ── Reads ───────────────────────────────────────────────────
@router.get(
    "",
    response_model=list[Project],
    summary="List all projects",
)
async def list_projects(store: Store) -> list[Project]:
    return await store.list()


@router.get(
    "/{project_id}",
    response_model=Project,
    summary="Fetch one project",
)
async def get_project(project_id: int, store: Store) -> Project:
    return await store.get(project_id)


# ── Mutations ───────────────────────────────────────────────
@router.post(
    "",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    description=(
        "Multipart form with title, category, description (required), "
        "tech (comma list), url and an optional image file."
    ),
)
async def create_project(
    store: Store,
    admin: AdminSession,
    title: OptionalText = None,
    category: OptionalText = None,
    description: OptionalText = None,
    tech: OptionalText = None,
    url: OptionalText = None,
    image: OptionalImage = None,
) -> Project:
    fields = normalize_project(
        {
            "title": title,
            "category": category,
            "description": description,
            "tech": tech,
            "url": url,
        }
    )
    upload = await _read_image(image, store.assets)

    project = await store.create(fields, upload)
    logger.info("%s created project %s", admin.username, project.id)
    return project


@router.put(
    "/{project_id}",
    response_model=Project,
    summary="Update a project",
    description=(
        "Only the fields present in the form change. A new image "
        "replaces the old one, which is deleted afterwards."
    ),
)
async def update_project(
    project_id: int,
    store: Store,
    admin: AdminSession,
    title: OptionalText = None,
    category: OptionalText = None,
    description: OptionalText = None,
    tech: OptionalText = None,
    url: OptionalText = None,
    image: OptionalImage = None,
) -> Project:
    patch = normalize_patch(
        {
            "title": title,
            "category": category,
            "description": description,
            "tech": tech,
            "url": url,
        }
    )
    upload = await _read_image(image, store.assets)

    project = await store.update(project_id, patch, upload)
    logger.info("%s updated project %s", admin.username, project_id)
    return project


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a project",
)
async def delete_project(project_id: int, store: Store, admin: AdminSession) -> Response:
    await store.remove(project_id)
    logger.info("%s deleted project %s", admin.username, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
