"""
Public user profiles.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.database import get_db_session
from project_library.schemas.common import ERROR_RESPONSES, Envelope, ok
from project_library.schemas.user import PublicUserProfile
from project_library.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/by-username/{username}",
    response_model=Envelope[PublicUserProfile],
    responses=ERROR_RESPONSES,
    summary="Public profile (no email)",
)
async def get_user_by_username(username: str, db: AsyncSession = Depends(get_db_session)):
    user, owner = await user_service.get_public_profile(db, username)
    return ok(
        PublicUserProfile(
            id=user.id,
            username=user.username,
            owner_id=owner.id,
            display_name=user.display_name,
            first_name=user.first_name,
            last_name=user.last_name,
            headline=user.headline,
            bio=user.bio,
            interests=list(user.interests or []),
            location=user.location,
            avatar_image_id=user.avatar_image_id,
            created_at=user.created_at,
        )
    )
