"""
Project Library Backend - Owner Service (Actor Identity Resolution)
====================================================================

What:  Decides which Owner a signed-in user is acting as, and whether they
       are allowed to act as a given Owner.
How:   Pure reads: owners, and org memberships for ORG owners. No writes.
Who:   The session dependency (every authenticated request), the
       active-owner switch route, GET /api/me, and the other services when
       they need to look an owner up by id.

Resolution Rules:
    requested owner   │ outcome
    ──────────────────┼──────────────────────────────────────────────
    none              │ the user's personal owner (404 if missing)
    unknown id        │ NotFoundError
    personal owner    │ allowed
    org owner, role   │ allowed when role is OWNER or ADMIN
    anything else     │ ForbiddenError
    allowed but not   │ ForbiddenError (suspended owners cannot act)
    ACTIVE            │
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
)
from project_library.models.org import ACTING_ROLES, OrgMembership, OrgRole
from project_library.models.owner import Owner, OwnerStatus, OwnerType

logger = logging.getLogger(__name__)


class OwnerService:
    """
    Owner lookups and permission gating.

    Error Handling Strategy:
        Domain outcomes (not found, forbidden) raise the matching application
        exception. Driver failures are logged and wrapped in DatabaseError.
    """

    async def get_owner(self, db: AsyncSession, owner_id: uuid.UUID) -> Owner:
        try:
            result = await db.execute(select(Owner).where(Owner.id == owner_id))
            owner = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching owner %s: %s", owner_id, str(e))
            raise DatabaseError(context={"owner_id": str(owner_id)})

        if owner is None:
            raise NotFoundError(resource="owner", resource_id=str(owner_id))
        return owner

    async def get_personal_owner(self, db: AsyncSession, user_id: uuid.UUID) -> Owner:
        try:
            result = await db.execute(select(Owner).where(Owner.user_id == user_id))
            owner = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching personal owner of %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

        if owner is None:
            raise NotFoundError(resource="personal owner", resource_id=str(user_id))
        return owner

    async def get_org_owner(self, db: AsyncSession, org_id: uuid.UUID) -> Owner:
        try:
            result = await db.execute(select(Owner).where(Owner.org_id == org_id))
            owner = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching owner of org %s: %s", org_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id)})

        if owner is None:
            raise NotFoundError(resource="org owner", resource_id=str(org_id))
        return owner

    async def get_membership_role(
        self, db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[OrgRole]:
        """Return the user's role in the org, or None when not a member."""
        try:
            result = await db.execute(
                select(OrgMembership.role).where(
                    OrgMembership.org_id == org_id,
                    OrgMembership.user_id == user_id,
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching membership %s/%s: %s", org_id, user_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id), "user_id": str(user_id)})

    async def can_act_as(self, db: AsyncSession, user_id: uuid.UUID, owner: Owner) -> bool:
        """Whether the user may act as the owner, ignoring its status."""
        if owner.type == OwnerType.USER:
            return owner.user_id == user_id
        role = await self.get_membership_role(db, owner.org_id, user_id)
        return role in ACTING_ROLES

    async def resolve_active_owner(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        requested_owner_id: Optional[uuid.UUID] = None,
    ) -> Owner:
        """
        Resolve the Owner the user acts as for this request.

        Args:
            db: Async database session
            user_id: The authenticated user
            requested_owner_id: Owner the caller asked for (session claim or
                switch request); None means the personal owner

        Returns:
            The permitted, ACTIVE Owner

        Raises:
            NotFoundError: Unknown requested owner, or the user has no
                personal owner
            ForbiddenError: The user may not act as the owner, or the owner
                is suspended
        """
        if requested_owner_id is None:
            return await self.get_personal_owner(db, user_id)

        owner = await self.get_owner(db, requested_owner_id)

        if not await self.can_act_as(db, user_id, owner):
            logger.warning(
                "User %s denied acting as owner %s (%s)", user_id, owner.id, owner.type.value
            )
            raise ForbiddenError(
                "You cannot act as this owner",
                context={"owner_id": str(owner.id)},
            )

        if owner.status != OwnerStatus.ACTIVE:
            logger.warning("User %s tried to act as suspended owner %s", user_id, owner.id)
            raise ForbiddenError(
                "This owner is suspended",
                context={"owner_id": str(owner.id), "status": owner.status.value},
            )

        return owner

    async def list_owners_for_user(self, db: AsyncSession, user_id: uuid.UUID) -> List[Owner]:
        """
        Every owner the user may act as: personal owner first, then org owners
        where the user is OWNER or ADMIN, oldest first. Suspended org owners
        are left out.
        """
        personal = await self.get_personal_owner(db, user_id)
        try:
            result = await db.execute(
                select(Owner)
                .join(OrgMembership, OrgMembership.org_id == Owner.org_id)
                .where(
                    OrgMembership.user_id == user_id,
                    OrgMembership.role.in_(list(ACTING_ROLES)),
                    Owner.status == OwnerStatus.ACTIVE,
                )
                .order_by(Owner.created_at.asc())
            )
            org_owners = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing owners for %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

        return [personal, *org_owners]


# ── Module-level singleton ───────────────────────────────────────────────
owner_service = OwnerService()
