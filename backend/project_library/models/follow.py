"""
Project Library Backend - Follow Model
=======================================

What:  `follows`: a directed edge "follower owner → following owner".
How:   One row per ordered pair (unique constraint), never a self-loop
       (check constraint). Edges are only ever inserted.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from project_library.database import Base
from project_library.models.owner import Owner
from project_library.models.user import utcnow


class Follow(Base):
    """
    Directed follow relationship between two owners.

    Query Patterns:
        - followers of X:  WHERE following_owner_id = X ORDER BY created_at DESC
        - following of X:  WHERE follower_owner_id = X ORDER BY created_at DESC
    """

    __tablename__ = "follows"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    following_owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    follower: Mapped[Owner] = relationship(foreign_keys=[follower_owner_id], lazy="joined")
    following: Mapped[Owner] = relationship(foreign_keys=[following_owner_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "follower_owner_id", "following_owner_id", name="uq_follows_pair"
        ),
        CheckConstraint(
            "follower_owner_id <> following_owner_id", name="ck_follows_not_self"
        ),
    )

    def __repr__(self) -> str:
        return f"<Follow({self.follower_owner_id} -> {self.following_owner_id})>"
