"""
Project Library Backend - Follow Service
=========================================

What:  Creates follow edges between owners and lists/counts them.
How:   The unique (follower, following) constraint is the final guard against
       duplicates; the pre-check only exists to give a clear message in the
       common, non-racing case.
Who:   POST /api/follows and the /api/owners/{id}/followers|following|
       follow-stats routes.

Follows are never deleted; there is no unfollow operation.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import (
    DatabaseError,
    DuplicateError,
    ValidationError,
)
from project_library.models.follow import Follow
from project_library.models.owner import Owner
from project_library.services.owner_service import owner_service

logger = logging.getLogger(__name__)

# (other owner, followed_at)
FollowEntry = Tuple[Owner, datetime]


class FollowService:
    async def follow(
        self, db: AsyncSession, actor: Owner, target_owner_id: uuid.UUID
    ) -> Follow:
        """
        Make `actor` follow the target owner.

        Raises:
            ValidationError: actor == target
            NotFoundError: target owner does not exist
            DuplicateError: the edge already exists
        """
        if actor.id == target_owner_id:
            raise ValidationError("Cannot follow yourself", field="following_owner_id")

        target = await owner_service.get_owner(db, target_owner_id)

        if await self.is_following(db, actor.id, target.id):
            raise DuplicateError("Already following this owner", field="following_owner_id")

        follow = Follow(follower=actor, following=target)
        db.add(follow)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateError("Already following this owner", field="following_owner_id")
        except SQLAlchemyError as e:
            logger.error("Database error creating follow %s -> %s: %s", actor.id, target.id, str(e))
            raise DatabaseError(context={"follower": str(actor.id), "following": str(target.id)})

        logger.info("Owner %s now follows %s", actor.id, target.id)
        return follow

    async def is_following(
        self, db: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
    ) -> bool:
        try:
            result = await db.execute(
                select(Follow.id).where(
                    Follow.follower_owner_id == follower_id,
                    Follow.following_owner_id == following_id,
                )
            )
            return result.first() is not None
        except SQLAlchemyError as e:
            logger.error("Database error checking follow: %s", str(e))
            raise DatabaseError()

    async def list_followers(self, db: AsyncSession, owner_id: uuid.UUID) -> List[FollowEntry]:
        """Owners following `owner_id`, newest edge first."""
        await owner_service.get_owner(db, owner_id)
        follows = await self._list_edges(db, Follow.following_owner_id == owner_id)
        return [(f.follower, f.created_at) for f in follows]

    async def list_following(self, db: AsyncSession, owner_id: uuid.UUID) -> List[FollowEntry]:
        """Owners that `owner_id` follows, newest edge first."""
        await owner_service.get_owner(db, owner_id)
        follows = await self._list_edges(db, Follow.follower_owner_id == owner_id)
        return [(f.following, f.created_at) for f in follows]

    async def follow_stats(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        viewer_owner_id: Optional[uuid.UUID] = None,
    ) -> Tuple[int, int, Optional[bool]]:
        """
        Returns:
            (followers, following, is_following). is_following is None when
            there is no viewer.
        """
        await owner_service.get_owner(db, owner_id)
        try:
            followers = await db.scalar(
                select(func.count()).select_from(Follow).where(Follow.following_owner_id == owner_id)
            )
            following = await db.scalar(
                select(func.count()).select_from(Follow).where(Follow.follower_owner_id == owner_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error counting follows of %s: %s", owner_id, str(e))
            raise DatabaseError(context={"owner_id": str(owner_id)})

        is_following = None
        if viewer_owner_id is not None:
            is_following = await self.is_following(db, viewer_owner_id, owner_id)
        return followers or 0, following or 0, is_following

    async def _list_edges(self, db: AsyncSession, condition) -> List[Follow]:
        try:
            result = await db.execute(
                select(Follow).where(condition).order_by(Follow.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing follows: %s", str(e))
            raise DatabaseError()


follow_service = FollowService()
