"""
Project Library Backend - Request Dependencies
===============================================

What:  FastAPI dependencies that turn the incoming session token into the
       current User and the Owner the request acts as.
How:   Token lookup order: `Authorization: Bearer <token>` header, then the
       session cookie. The token's active_owner_id claim is re-resolved on
       every request through OwnerService.resolve_active_owner().

Fallback Rule:
    If the claimed owner no longer resolves (role revoked, owner suspended or
    gone), the request silently acts as the user's personal owner and a
    warning is logged. The client sees the effective owner in GET /api/me.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.config import settings
from project_library.database import get_db_session
from project_library.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from project_library.models.owner import Owner
from project_library.models.user import User
from project_library.security import SessionClaims, decode_session_token
from project_library.services.owner_service import owner_service

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """The authenticated user and the owner they act as for this request."""

    user: User
    active_owner: Owner
    claims: SessionClaims


def _extract_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return request.cookies.get(settings.session_cookie_name) or None


async def get_session_claims(request: Request) -> SessionClaims:
    token = _extract_token(request)
    if not token:
        raise UnauthorizedError()
    claims = decode_session_token(token)
    request.state.user_id = claims.user_id
    return claims


async def get_current_user(
    claims: SessionClaims = Depends(get_session_claims),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    user = await db.get(User, claims.user_id)
    if user is None:
        raise UnauthorizedError("Session user no longer exists")
    return user


async def get_session_context(
    request: Request,
    claims: SessionClaims = Depends(get_session_claims),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SessionContext:
    try:
        owner = await owner_service.resolve_active_owner(db, user.id, claims.active_owner_id)
    except (ForbiddenError, NotFoundError) as e:
        if claims.active_owner_id is None:
            raise
        logger.warning(
            "Active owner %s no longer valid for user %s (%s); using personal owner",
            claims.active_owner_id,
            user.id,
            e.message,
        )
        owner = await owner_service.resolve_active_owner(db, user.id, None)
    request.state.active_owner_id = owner.id
    return SessionContext(user=user, active_owner=owner, claims=claims)


async def get_optional_session_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[SessionContext]:
    """Like get_session_context, but None for anonymous requests."""
    if not _extract_token(request):
        return None
    claims = await get_session_claims(request)
    user = await get_current_user(claims, db)
    return await get_session_context(request, claims, user, db)
