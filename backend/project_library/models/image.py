"""
Project Library Backend - Image and ImageAttachment Models
===========================================================

What:  `images` holds metadata for files living in external storage;
       `image_attachments` links an image to a project, event or post.
Who:   ImageService writes both; the content services read
       attachments to render galleries.

Attachment targets are polymorphic (target_type + target_id), so target_id
carries no foreign key. Deleting a project, event or post removes its attachments
in the service layer.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from project_library.database import Base
from project_library.models.user import utcnow


class AttachmentTarget(str, enum.Enum):
    PROJECT = "PROJECT"
    EVENT = "EVENT"
    POST = "POST"


class Image(Base):
    __tablename__ = "images"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    path: Mapped[str] = mapped_column(String(1024), nullable=False)
    alt_text: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    uploaded_by_owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, path='{self.path}')>"


class ImageAttachment(Base):
    __tablename__ = "image_attachments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    image_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("images.id", ondelete="CASCADE"), nullable=False
    )
    target_type: Mapped[AttachmentTarget] = mapped_column(
        Enum(AttachmentTarget, name="attachment_target", native_enum=False, length=20),
        nullable=False,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    image: Mapped[Image] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_image_attachments_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<ImageAttachment(id={self.id}, {self.target_type}:{self.target_id})>"
