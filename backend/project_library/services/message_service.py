"""
Project Library Backend - Message Service
==========================================

What:  Direct messages between owners: send, read receipts, inbox, sent box,
       one-to-one conversation threads and the conversation overview.
How:   Messages are append-only rows. The only mutation is setting read_at,
       once, by the receiver.
Who:   The /api/messages routes.

Validation Order (send):
    1. content stripped; empty → ValidationError
    2. longer than MESSAGE_MAX_LENGTH → ValidationError
    3. sender == receiver → ValidationError
    4. unknown receiver → NotFoundError
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.config import settings
from project_library.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from project_library.models.message import Message
from project_library.models.owner import Owner
from project_library.models.user import utcnow
from project_library.services.owner_service import owner_service

logger = logging.getLogger(__name__)


@dataclass
class Conversation:
    other_owner: Owner
    last_message: Message
    unread_count: int = 0


class MessageService:
    async def send_message(
        self,
        db: AsyncSession,
        sender: Owner,
        receiver_owner_id: uuid.UUID,
        content: str,
    ) -> Message:
        """
        Send a message from the active owner to another owner.

        The org ids of both parties are copied onto the row.

        Raises:
            ValidationError: Empty or oversized content, or self-send
            NotFoundError: Receiver does not exist
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError("Message content cannot be empty", field="content")
        if len(text) > settings.message_max_length:
            raise ValidationError(
                f"Message content must be {settings.message_max_length} characters or less",
                field="content",
            )
        if sender.id == receiver_owner_id:
            raise ValidationError("Cannot send a message to yourself", field="receiver_owner_id")

        receiver = await owner_service.get_owner(db, receiver_owner_id)

        message = Message(
            sender=sender,
            receiver=receiver,
            sender_org_id=sender.org_id,
            receiver_org_id=receiver.org_id,
            content=text,
        )
        db.add(message)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error sending message %s -> %s: %s", sender.id, receiver.id, str(e))
            raise DatabaseError(context={"sender": str(sender.id), "receiver": str(receiver.id)})

        logger.info("Message %s sent: %s -> %s", message.id, sender.id, receiver.id)
        return message

    async def mark_read(self, db: AsyncSession, message_id: uuid.UUID, owner: Owner) -> Message:
        """
        Mark a message read. Idempotent: a second call keeps the first read_at.

        Raises:
            NotFoundError: Unknown message
            ForbiddenError: `owner` is not the receiver
        """
        try:
            result = await db.execute(select(Message).where(Message.id == message_id))
            message = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching message %s: %s", message_id, str(e))
            raise DatabaseError(context={"message_id": str(message_id)})

        if message is None:
            raise NotFoundError(resource="message", resource_id=str(message_id))

        if message.receiver_owner_id != owner.id:
            logger.warning("Owner %s tried to mark message %s read", owner.id, message_id)
            raise ForbiddenError("Only the receiver can mark a message as read")

        if message.read_at is None:
            message.read_at = utcnow()
            try:
                await db.flush()
            except SQLAlchemyError as e:
                logger.error("Database error marking message %s read: %s", message_id, str(e))
                raise DatabaseError(context={"message_id": str(message_id)})

        return message

    async def inbox(
        self,
        db: AsyncSession,
        owner: Owner,
        limit: int = 50,
        unread_only: bool = False,
    ) -> List[Message]:
        """Messages received by the owner, newest first."""
        query = select(Message).where(Message.receiver_owner_id == owner.id)
        if unread_only:
            query = query.where(Message.read_at.is_(None))
        query = query.order_by(Message.created_at.desc()).limit(limit)
        return await self._fetch(db, query)

    async def sent(self, db: AsyncSession, owner: Owner, limit: int = 50) -> List[Message]:
        """Messages sent by the owner, newest first."""
        query = (
            select(Message)
            .where(Message.sender_owner_id == owner.id)
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        return await self._fetch(db, query)

    async def conversation(
        self, db: AsyncSession, owner: Owner, other_owner_id: uuid.UUID
    ) -> List[Message]:
        """
        Both directions between the owner and another owner, oldest first.

        Raises:
            NotFoundError: The other owner does not exist
        """
        await owner_service.get_owner(db, other_owner_id)
        query = (
            select(Message)
            .where(
                or_(
                    and_(
                        Message.sender_owner_id == owner.id,
                        Message.receiver_owner_id == other_owner_id,
                    ),
                    and_(
                        Message.sender_owner_id == other_owner_id,
                        Message.receiver_owner_id == owner.id,
                    ),
                )
            )
            .order_by(Message.created_at.asc())
        )
        return await self._fetch(db, query)

    async def conversations(self, db: AsyncSession, owner: Owner) -> List[Conversation]:
        """
        One entry per counterpart: latest message and unread count,
        most recent conversation first.
        """
        query = (
            select(Message)
            .where(
                or_(
                    Message.sender_owner_id == owner.id,
                    Message.receiver_owner_id == owner.id,
                )
            )
            .order_by(Message.created_at.desc())
        )
        messages = await self._fetch(db, query)

        threads: Dict[uuid.UUID, Conversation] = {}
        for message in messages:
            incoming = message.receiver_owner_id == owner.id
            other = message.sender if incoming else message.receiver
            thread = threads.get(other.id)
            if thread is None:
                # Rows arrive newest first, so the first one seen is the latest
                thread = Conversation(other_owner=other, last_message=message)
                threads[other.id] = thread
            if incoming and message.read_at is None:
                thread.unread_count += 1

        return list(threads.values())

    async def _fetch(self, db: AsyncSession, query) -> List[Message]:
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing messages: %s", str(e))
            raise DatabaseError()


message_service = MessageService()
