"""
Project Library Backend - Org Service
======================================

What:  Organization creation, lookup, membership management and the org
       profile.
How:   create_org() writes Org + its Owner + the creator's OWNER membership
       in one flush. Membership changes are gated on the requester holding
       an acting role (OWNER or ADMIN) in that org.
Who:   The /api/orgs routes and PUT /api/me/org.

Membership Rules:
    - exactly one OWNER per org, assigned at creation
    - the OWNER membership cannot be changed or removed
    - nobody can be granted OWNER through the API
"""

import logging
import uuid
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import (
    DatabaseError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from project_library.models.org import ACTING_ROLES, ROLE_RANK, Org, OrgMembership, OrgRole
from project_library.models.owner import Owner, OwnerType
from project_library.models.user import User
from project_library.schemas.org import OrgCreate, OrgProfileUpdate
from project_library.services.owner_service import owner_service

logger = logging.getLogger(__name__)


class OrgService:
    async def create_org(self, db: AsyncSession, user: User, data: OrgCreate) -> Tuple[Org, Owner]:
        """
        Create an org owned by `user`.

        Raises:
            DuplicateError: Slug already in use
        """
        try:
            existing = await db.scalar(select(Org.id).where(Org.slug == data.slug))
        except SQLAlchemyError as e:
            logger.error("Database error checking org slug %s: %s", data.slug, str(e))
            raise DatabaseError(context={"slug": data.slug})
        if existing is not None:
            raise DuplicateError("An organization with this slug already exists", field="slug")

        org = Org(
            slug=data.slug,
            name=data.name,
            headline=data.headline,
            bio=data.bio,
            interests=data.interests,
            location=data.location,
            is_public=data.is_public,
        )
        owner = Owner(type=OwnerType.ORG, org=org)
        membership = OrgMembership(org=org, user=user, role=OrgRole.OWNER)
        db.add_all([org, owner, membership])

        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateError("An organization with this slug already exists", field="slug")
        except SQLAlchemyError as e:
            logger.error("Database error creating org %s: %s", data.slug, str(e))
            raise DatabaseError(context={"slug": data.slug})

        logger.info("Org created: %s (%s) by user %s", org.id, org.slug, user.id)
        return org, owner

    async def get_org(self, db: AsyncSession, org_id: uuid.UUID) -> Org:
        try:
            org = await db.get(Org, org_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching org %s: %s", org_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id)})
        if org is None:
            raise NotFoundError(resource="org", resource_id=str(org_id))
        return org

    async def get_org_by_slug(self, db: AsyncSession, slug: str) -> Org:
        try:
            result = await db.execute(select(Org).where(Org.slug == slug))
            org = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching org %s: %s", slug, str(e))
            raise DatabaseError(context={"slug": slug})
        if org is None:
            raise NotFoundError(resource="org", resource_id=slug)
        return org

    async def list_members(self, db: AsyncSession, org_id: uuid.UUID) -> List[OrgMembership]:
        """Members ordered OWNER, ADMIN, MEMBER, then by join time."""
        await self.get_org(db, org_id)
        try:
            result = await db.execute(
                select(OrgMembership)
                .where(OrgMembership.org_id == org_id)
                .order_by(OrgMembership.created_at.asc())
            )
            memberships = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing members of %s: %s", org_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id)})

        # Stable sort keeps join order within a role
        return sorted(memberships, key=lambda m: ROLE_RANK[m.role])

    async def add_member(
        self,
        db: AsyncSession,
        requesting_user_id: uuid.UUID,
        org_id: uuid.UUID,
        user_id: uuid.UUID,
        role: OrgRole = OrgRole.MEMBER,
    ) -> OrgMembership:
        """
        Raises:
            NotFoundError: Unknown org or user
            ForbiddenError: Requester is not OWNER/ADMIN of the org
            ValidationError: role is OWNER
            DuplicateError: User is already a member
        """
        org = await self.get_org(db, org_id)
        await self._require_manager(db, org_id, requesting_user_id)

        if role == OrgRole.OWNER:
            raise ValidationError("An org has exactly one owner", field="role")

        try:
            target = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})
        if target is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))

        if await owner_service.get_membership_role(db, org_id, user_id) is not None:
            raise DuplicateError("User is already a member of this org", field="user_id")

        membership = OrgMembership(org=org, user=target, role=role)
        db.add(membership)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateError("User is already a member of this org", field="user_id")
        except SQLAlchemyError as e:
            logger.error("Database error adding member %s to %s: %s", user_id, org_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id), "user_id": str(user_id)})

        logger.info("User %s added to org %s as %s", user_id, org_id, role.value)
        return membership

    async def change_member_role(
        self,
        db: AsyncSession,
        requesting_user_id: uuid.UUID,
        org_id: uuid.UUID,
        user_id: uuid.UUID,
        role: OrgRole,
    ) -> OrgMembership:
        await self.get_org(db, org_id)
        await self._require_manager(db, org_id, requesting_user_id)

        if role == OrgRole.OWNER:
            raise ValidationError("An org has exactly one owner", field="role")

        membership = await self._get_membership(db, org_id, user_id)
        if membership.role == OrgRole.OWNER:
            raise ValidationError("The org owner's role cannot be changed", field="user_id")

        membership.role = role
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error changing role of %s in %s: %s", user_id, org_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id), "user_id": str(user_id)})
        logger.info("User %s in org %s is now %s", user_id, org_id, role.value)
        return membership

    async def remove_member(
        self,
        db: AsyncSession,
        requesting_user_id: uuid.UUID,
        org_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> None:
        await self.get_org(db, org_id)
        await self._require_manager(db, org_id, requesting_user_id)

        membership = await self._get_membership(db, org_id, user_id)
        if membership.role == OrgRole.OWNER:
            raise ValidationError("The org owner cannot be removed", field="user_id")

        try:
            await db.delete(membership)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error removing %s from %s: %s", user_id, org_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id), "user_id": str(user_id)})
        logger.info("User %s removed from org %s", user_id, org_id)

    async def update_org_profile(
        self, db: AsyncSession, active_owner: Owner, update: OrgProfileUpdate
    ) -> Org:
        """
        Update the profile of the org the session is acting as.

        Raises:
            ForbiddenError: The active owner is not an org
        """
        if active_owner.type != OwnerType.ORG or active_owner.org is None:
            raise ForbiddenError("Switch to the organization to edit its profile")

        org = active_owner.org
        changes = update.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field == "interests" and value is None:
                value = []
            elif field in ("name", "is_public") and value is None:
                continue
            setattr(org, field, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating org %s: %s", org.id, str(e))
            raise DatabaseError(context={"org_id": str(org.id)})

        logger.info("Org profile updated: %s %s", org.id, sorted(changes))
        return org

    async def _require_manager(
        self, db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        role = await owner_service.get_membership_role(db, org_id, user_id)
        if role not in ACTING_ROLES:
            logger.warning("User %s denied managing org %s (role=%s)", user_id, org_id, role)
            raise ForbiddenError("Only org owners and admins can manage members")

    async def _get_membership(
        self, db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> OrgMembership:
        try:
            result = await db.execute(
                select(OrgMembership).where(
                    OrgMembership.org_id == org_id,
                    OrgMembership.user_id == user_id,
                )
            )
            membership = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching membership %s/%s: %s", org_id, user_id, str(e))
            raise DatabaseError(context={"org_id": str(org_id), "user_id": str(user_id)})
        if membership is None:
            raise NotFoundError(resource="membership", resource_id=str(user_id))
        return membership


org_service = OrgService()
