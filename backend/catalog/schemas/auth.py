"""
Pydantic v2 schemas for the admin session endpoints.

Response shapes follow the catalog frontend contract:
`{success, message}` for login/logout and `{loggedIn, username?}` for
status.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials posted to /login."""

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=1024)


class AuthResult(BaseModel):
    success: bool
    message: str


class AuthStatus(BaseModel):
    """Whether the caller holds a live session."""

    model_config = ConfigDict(populate_by_name=True)

    logged_in: bool = Field(serialization_alias="loggedIn")
    username: str | None = None
