"""
Session token utilities.

Security notes:
  • Tokens are 256-bit random URL-safe strings, so a plain SHA-256 is
    enough for server-side lookup; bcrypt/argon2 would only add latency.
  • generate_session_token() returns the raw token exactly once — it goes
    into the client's cookie and is never stored server-side.
"""

import hashlib
import hmac
import secrets


def hash_session_token(raw_token: str) -> str:
    """SHA-256 hex digest used as the session table key."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_session_token() -> tuple[str, str]:
    """
    Generate a new session token.

    Returns:
        (raw_token, token_hash) — raw_token goes to the client,
        token_hash is kept by SessionGate.
    """
    raw_token = secrets.token_urlsafe(32)
    return raw_token, hash_session_token(raw_token)


def constant_time_equals(supplied: str, expected: str) -> bool:
    """Compare credentials without leaking a timing side channel."""
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
