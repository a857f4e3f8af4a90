"""
Project Library Backend - Auth Routes
======================================

What:  POST /api/auth/signup, /api/auth/login and /api/auth/logout.
How:   Signup and login both start a session: the token is set as an
       HTTP-only cookie and also returned in the body for API clients.
       Logout only clears the cookie (tokens are stateless).
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.owner import OwnerSummary
from project_library.schemas.user import LoginRequest, SessionResponse, SignupRequest
from project_library.security import (
    clear_session_cookie,
    issue_session_token,
    set_session_cookie,
)
from project_library.services.auth_service import auth_service
from project_library.services.owner_service import owner_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


async def _start_session(db: AsyncSession, response: Response, user_id) -> SessionResponse:
    owner = await owner_service.get_personal_owner(db, user_id)
    token = issue_session_token(user_id)
    set_session_cookie(response, token)
    return SessionResponse(
        access_token=token,
        user_id=user_id,
        active_owner=OwnerSummary.model_validate(owner),
    )


@router.post(
    "/signup",
    response_model=Envelope[SessionResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create an account and start a session",
)
async def signup(
    body: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    user = await auth_service.signup(db, body.email, body.username, body.password)
    return ok(await _start_session(db, response, user.id))


@router.post(
    "/login",
    response_model=Envelope[SessionResponse],
    responses=ERROR_RESPONSES,
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    user = await auth_service.authenticate(db, body.email, body.password)
    logger.info("User %s logged in", user.id)
    return ok(await _start_session(db, response, user.id))


@router.post("/logout", response_model=Envelope[dict], summary="End the session")
async def logout(response: Response):
    clear_session_cookie(response)
    return ok({"logged_out": True})
