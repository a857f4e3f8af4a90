"""
Project Library Backend - Message Model
========================================

What:  `messages`: a direct message from one owner to another.
How:   sender_org_id / receiver_org_id are copied from the owners at write
       time so org inboxes can be queried without joining owners.

Lifecycle:
    1. Inserted by MessageService.send_message() with read_at = NULL
    2. read_at set once by the receiver (mark_read is idempotent)
    3. Never deleted
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from project_library.database import Base
from project_library.models.owner import Owner
from project_library.models.user import utcnow


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False
    )
    receiver_owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False
    )
    sender_org_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("orgs.id", ondelete="SET NULL"), nullable=True
    )
    receiver_org_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("orgs.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    sender: Mapped[Owner] = relationship(foreign_keys=[sender_owner_id], lazy="joined")
    receiver: Mapped[Owner] = relationship(foreign_keys=[receiver_owner_id], lazy="joined")

    __table_args__ = (
        Index("idx_messages_receiver_created", "receiver_owner_id", "created_at"),
        Index("idx_messages_sender_created", "sender_owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, {self.sender_owner_id} -> {self.receiver_owner_id})>"
