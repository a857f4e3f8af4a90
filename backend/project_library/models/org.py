"""
Project Library Backend - Org and OrgMembership Models
=======================================================

What:  `orgs` (organizations) and `org_memberships` (user ↔ org with a role).
How:   A membership row is the only thing that lets a user act as an org's
       Owner. Roles are ordered OWNER < ADMIN < MEMBER for listing.

Acting Roles:
    OWNER and ADMIN may act as the org (switch their session to the org
    Owner, update the org profile, manage members). MEMBER may not.
"""

import enum
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from project_library.database import Base
from project_library.models.user import User, utcnow


class OrgRole(str, enum.Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


# Roles that may act as the org's Owner
ACTING_ROLES = frozenset({OrgRole.OWNER, OrgRole.ADMIN})

# Listing order: OWNER first, then ADMIN, then MEMBER
ROLE_RANK = {OrgRole.OWNER: 0, OrgRole.ADMIN: 1, OrgRole.MEMBER: 2}


class Org(Base):
    """An organization profile. Has exactly one Owner (see models/owner.py)."""

    __tablename__ = "orgs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    headline: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    interests: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    avatar_image_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Org(id={self.id}, slug='{self.slug}')>"


class OrgMembership(Base):
    """
    A user's role inside an org.

    Invariants:
        - at most one membership per (org_id, user_id)
        - exactly one OWNER membership per org (created with the org, never
          changed or removed through the API)
    """

    __tablename__ = "org_memberships"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orgs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[OrgRole] = mapped_column(
        Enum(OrgRole, name="org_role", native_enum=False, length=20),
        nullable=False,
        default=OrgRole.MEMBER,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Loaded with the row so member listings can render user data
    user: Mapped[User] = relationship(lazy="joined")
    org: Mapped[Org] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),
    )

    def __repr__(self) -> str:
        return f"<OrgMembership(org_id={self.org_id}, user_id={self.user_id}, role={self.role})>"
