"""
FastAPI dependencies wiring requests to the app's core objects.

The store, asset manager and session gate are built once per app by
create_app() and live on `app.state`; handlers reach them only through
these dependencies, never through module globals.

Auth flow for mutating routes:
  1. Read the session cookie
  2. Ask SessionGate for the live session
  3. Missing/expired → Unauthorized (401), before the body is acted on
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from catalog.auth.session_gate import Session, SessionGate
from catalog.core.config import Settings
from catalog.core.errors import Unauthorized
from catalog.services.catalog_store import CatalogStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_session_gate(request: Request) -> SessionGate:
    return request.app.state.session_gate


def get_session_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def require_session(
    token: Annotated[str | None, Depends(get_session_token)],
    gate: Annotated[SessionGate, Depends(get_session_gate)],
) -> Session:
    """
    Dependency for every mutating route.

    Usage in routers:
        AdminSession = Annotated[Session, Depends(require_session)]
    """
    session = gate.current(token)
    if session is None:
        raise Unauthorized()
    return session


# Type aliases for cleaner signatures
Store = Annotated[CatalogStore, Depends(get_store)]
Gate = Annotated[SessionGate, Depends(get_session_gate)]
SessionToken = Annotated[str | None, Depends(get_session_token)]
AppSettings = Annotated[Settings, Depends(get_settings)]
AdminSession = Annotated[Session, Depends(require_session)]
