"""
Auth router — admin login/logout backed by SessionGate.

GET  /auth/status — {loggedIn, username?}
POST /login       — JSON {username, password}; sets the session cookie
POST /logout      — destroys the session; tolerant of a missing one

Response bodies keep the frontend's {success, message} shape.
"""

import logging

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from catalog.auth.dependencies import AppSettings, Gate, SessionToken
from catalog.core.errors import AuthFailure
from catalog.schemas.auth import AuthResult, AuthStatus, LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.get(
    "/auth/status",
    summary="Whether the caller is logged in",
)
async def auth_status(gate: Gate, token: SessionToken) -> dict[str, object]:
    session = gate.current(token)
    body = AuthStatus(
        logged_in=session is not None,
        username=session.username if session else None,
    )
    return body.model_dump(by_alias=True, exclude_none=True)


@router.post(
    "/login",
    response_model=AuthResult,
    summary="Log in as the catalog admin",
    responses={status.HTTP_401_UNAUTHORIZED: {"model": AuthResult}},
)
async def login(
    payload: LoginRequest,
    response: Response,
    gate: Gate,
    token: SessionToken,
    settings: AppSettings,
) -> AuthResult | JSONResponse:
    try:
        raw_token, _session = gate.authenticate(payload.username, payload.password)
    except AuthFailure as exc:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=AuthResult(success=False, message=exc.message).model_dump(),
        )

    # Never carry a pre-login session id across the privilege change
    gate.destroy(token)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=raw_token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return AuthResult(success=True, message="Login successful")


@router.post(
    "/logout",
    response_model=AuthResult,
    summary="Log out",
)
async def logout(
    response: Response,
    gate: Gate,
    token: SessionToken,
    settings: AppSettings,
) -> AuthResult | JSONResponse:
    try:
        gate.destroy(token)
    except Exception:
        logger.exception("Session destroy failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Could not log out."},
        )

    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return AuthResult(success=True, message="Logged out successfully")
