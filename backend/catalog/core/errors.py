"""
Catalog error taxonomy.

Every error the core raises derives from CatalogError and carries the
HTTP status the routing layer answers with. The message is safe to show
to clients; internal details go to the log only.
"""

from fastapi import status


class CatalogError(Exception):
    """Base class for all catalog errors."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Required field missing/empty or otherwise malformed input."""

    http_status = status.HTTP_400_BAD_REQUEST


class InvalidAssetRef(ValidationError):
    """An asset reference or filename points outside the asset area."""


class ProjectNotFound(CatalogError):
    """The operation referenced an id the catalog does not hold."""

    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, project_id: int) -> None:
        super().__init__("Project not found")
        self.project_id = project_id


class AuthFailure(CatalogError):
    """Login attempted with bad credentials."""

    http_status = status.HTTP_401_UNAUTHORIZED


class Unauthorized(CatalogError):
    """Mutating call without a live session."""

    http_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized: You must be logged in.") -> None:
        super().__init__(message)


class StorageError(CatalogError):
    """Snapshot or asset read/write failed.

    The prior persisted state is intact when this is raised.
    """
