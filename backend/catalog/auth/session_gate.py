"""
SessionGate — who may mutate the catalog.

One configured admin credential; each successful login mints a session
token that the transport (an HttpOnly cookie) carries back on later
requests. The gate keeps only the token's hash, so a dump of its state
can't be replayed.

Sessions expire `ttl_seconds` after login and are pruned lazily on
access. destroy() is idempotent.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from catalog.auth.hashing import (
    constant_time_equals,
    generate_session_token,
    hash_session_token,
)
from catalog.core.errors import AuthFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Session:
    """An authenticated principal bound to one client session."""

    username: str
    expires_at: float


class SessionGate:
    def __init__(
        self,
        username: str,
        password: str,
        *,
        ttl_seconds: int = 24 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._username = username
        self._password = password
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def authenticate(self, username: str, password: str) -> tuple[str, Session]:
        """
        Check credentials and open a session.

        Returns (raw_token, session). Raises AuthFailure on mismatch;
        both fields are always compared so timing doesn't reveal which
        one was wrong.
        """
        user_ok = constant_time_equals(username, self._username)
        password_ok = constant_time_equals(password, self._password)
        if not (user_ok and password_ok):
            logger.warning("Failed login attempt for user %r", username)
            raise AuthFailure("Invalid credentials")

        raw_token, token_hash = generate_session_token()
        session = Session(username=self._username, expires_at=self._clock() + self._ttl)
        self._prune_expired()
        self._sessions[token_hash] = session
        logger.info("User %r logged in", session.username)
        return raw_token, session

    def current(self, token: str | None) -> Session | None:
        """The live session for `token`, or None if absent/expired."""
        if not token:
            return None
        token_hash = hash_session_token(token)
        session = self._sessions.get(token_hash)
        if session is None:
            return None
        if session.expires_at <= self._clock():
            self._sessions.pop(token_hash, None)
            logger.info("Session for %r expired", session.username)
            return None
        return session

    def _prune_expired(self) -> None:
        now = self._clock()
        expired = [h for h, s in self._sessions.items() if s.expires_at <= now]
        for token_hash in expired:
            del self._sessions[token_hash]
        if expired:
            logger.info("Pruned %d expired session(s)", len(expired))

    def is_authenticated(self, token: str | None) -> bool:
        return self.current(token) is not None

    def destroy(self, token: str | None) -> None:
        if not token:
            return
        session = self._sessions.pop(hash_session_token(token), None)
        if session is not None:
            logger.info("User %r logged out", session.username)

