"""
Project Library Backend - Owner Model
======================================

What:  `owners`: the polymorphic actor identity used for follows, messages and
       content ownership.
How:   Each row is backed by exactly one User or exactly one Org. The CHECK
       constraints below enforce `user_id XOR org_id` and that `type` agrees
       with whichever column is set.

Lifecycle:
    - USER owner: created with its User at signup
    - ORG owner:  created with its Org
    - Never reassigned to a different backing entity
    - status may move to SUSPENDED; a suspended owner cannot be acted as
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from project_library.database import Base
from project_library.models.org import Org
from project_library.models.user import User, utcnow


class OwnerType(str, enum.Enum):
    USER = "USER"
    ORG = "ORG"


class OwnerStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class Owner(Base):
    """
    Actor identity for a User or an Org.

    Query Patterns:
        - personal owner of a user: WHERE user_id = :uid (unique)
        - owner of an org:          WHERE org_id = :oid (unique)
    """

    __tablename__ = "owners"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type: Mapped[OwnerType] = mapped_column(
        Enum(OwnerType, name="owner_type", native_enum=False, length=10),
        nullable=False,
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    org_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("orgs.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    status: Mapped[OwnerStatus] = mapped_column(
        Enum(OwnerStatus, name="owner_status", native_enum=False, length=20),
        nullable=False,
        default=OwnerStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Display data travels with the owner on every load
    user: Mapped[Optional[User]] = relationship(lazy="joined")
    org: Mapped[Optional[Org]] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (org_id IS NULL)",
            name="ck_owners_exactly_one_backing",
        ),
        CheckConstraint(
            "(type = 'USER' AND user_id IS NOT NULL) OR (type = 'ORG' AND org_id IS NOT NULL)",
            name="ck_owners_type_matches_backing",
        ),
    )

    @property
    def display_name(self) -> str:
        """Human-facing label: the org name, or the user's best available name."""
        if self.org is not None:
            return self.org.name
        if self.user is not None:
            user = self.user
            if user.display_name:
                return user.display_name
            full = " ".join(p for p in (user.first_name, user.last_name) if p)
            return full or user.username
        return str(self.id)

    def __repr__(self) -> str:
        return f"<Owner(id={self.id}, type={self.type}, status={self.status})>"
