"""
Project Library Backend - User Profile Service
===============================================

What:  Reads and partial updates of user profiles.
Who:   GET/PUT /api/me/user and GET /api/users/by-username/{username}.
"""

import logging
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import DatabaseError, NotFoundError
from project_library.models.owner import Owner
from project_library.models.user import User
from project_library.schemas.user import UserProfileUpdate

logger = logging.getLogger(__name__)

# Columns that may not hold NULL; an explicit null in the body clears them to []
LIST_FIELDS = {"interests"}


class UserService:
    async def update_profile(
        self, db: AsyncSession, user: User, update: UserProfileUpdate
    ) -> User:
        """
        Apply only the fields present in the request body.

        Returns:
            The updated user (flushed, not yet committed)
        """
        changes = update.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field in LIST_FIELDS and value is None:
                value = []
            setattr(user, field, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating profile of %s: %s", user.id, str(e))
            raise DatabaseError(context={"user_id": str(user.id)})

        logger.info("Profile updated for user %s: %s", user.id, sorted(changes))
        return user

    async def get_public_profile(self, db: AsyncSession, username: str) -> Tuple[User, Owner]:
        """
        Look a user up by username for the public profile page.

        Raises:
            NotFoundError: No such username
        """
        try:
            result = await db.execute(
                select(User, Owner)
                .join(Owner, Owner.user_id == User.id)
                .where(User.username == username)
            )
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

        if row is None:
            raise NotFoundError(resource="user", resource_id=username)
        return row[0], row[1]


user_service = UserService()
