"""
Project Library Backend - Password Hashing and Session Tokens
==============================================================

What:  Password hashing (passlib) and signed session tokens (python-jose).
How:   A session token is an HS256 JWT:
           {"sub": "<user uuid>", "active_owner_id": "<owner uuid>" | absent,
            "iat": ..., "exp": ...}
       It is delivered as an HTTP-only cookie, and also returned in the login
       body so API clients can send it as `Authorization: Bearer <token>`.
Who:   AuthService (hash/verify), auth/session routes (issue, cookie helpers),
       dependencies.py (decode).

Switching the active owner re-issues the token with a new claim; the claim is
only a hint and is re-validated on every request.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Response
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from project_library.config import settings
from project_library.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# pbkdf2_sha256 is pure-python in passlib and needs no native backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison; malformed hashes count as a mismatch."""
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


@dataclass(frozen=True)
class SessionClaims:
    """Decoded contents of a session token."""

    user_id: uuid.UUID
    active_owner_id: Optional[uuid.UUID] = None


def issue_session_token(
    user_id: uuid.UUID,
    active_owner_id: Optional[uuid.UUID] = None,
) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.session_ttl_minutes),
    }
    if active_owner_id is not None:
        claims["active_owner_id"] = str(active_owner_id)
    return jwt.encode(claims, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> SessionClaims:
    """
    Verify signature and expiry and return the claims.

    Raises:
        UnauthorizedError: Expired, tampered, or structurally invalid token
    """
    try:
        payload = jwt.decode(
            token, settings.session_secret, algorithms=[settings.session_algorithm]
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Session expired. Please log in again.")
    except JWTError as e:
        logger.info("Rejected session token: %s", str(e))
        raise UnauthorizedError("Invalid session token")

    try:
        user_id = uuid.UUID(payload["sub"])
        raw_owner = payload.get("active_owner_id")
        active_owner_id = uuid.UUID(raw_owner) if raw_owner else None
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid session token")

    return SessionClaims(user_id=user_id, active_owner_id=active_owner_id)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name, path="/")
