"""
Project Library Backend - Content Services
===========================================

What:  Owner-scoped CRUD for projects, events and posts, plus the entries
       (progress updates) written on a project or event.
How:   Projects, events and posts share OwnedContentService; subclasses only
       name their model, the attachment target type and the columns used by
       free-text search. EntryService sits beside them since entries have
       no owner of their own and inherit it from their collection.
Who:   The /api/projects, /api/events and /api/posts routes; ImageService
       looks targets up through `get()` when attaching images.

Permission Model:
    Anyone may read. Only the owning Owner (the session's active owner) may
    update or delete; anything else is ForbiddenError. Posts and entries on
    a project or event may only be written by that project's or event's
    owner.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from project_library.models.content import Entry, Event, Post, Project
from project_library.models.image import AttachmentTarget, ImageAttachment
from project_library.models.owner import Owner

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def _attachments_for(
    db: AsyncSession, target_type: AttachmentTarget, target_id: uuid.UUID
) -> List[ImageAttachment]:
    try:
        result = await db.execute(
            select(ImageAttachment)
            .where(
                ImageAttachment.target_type == target_type,
                ImageAttachment.target_id == target_id,
            )
            .order_by(ImageAttachment.sort_order.asc(), ImageAttachment.created_at.asc())
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(
            "Database error listing attachments of %s %s: %s", target_type.value, target_id, str(e)
        )
        raise DatabaseError(context={"target_id": str(target_id)})


class OwnedContentService:
    model: Type[Any]
    target_type: AttachmentTarget
    resource_name: str = "content"
    # Columns searched by the `q` filter (case-insensitive substring)
    search_columns: Tuple[str, ...] = ("title", "description")
    # Explicit nulls in an update skip required columns and empty list columns
    required_fields: Tuple[str, ...] = ("title",)
    list_fields: Tuple[str, ...] = ()
    # Post column that points at this kind of content, if posts can hang off it
    post_parent_column: Optional[str] = None

    async def create(self, db: AsyncSession, owner: Owner, data: Dict[str, Any]):
        item = self.model(owner=owner, **data)
        db.add(item)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating %s for %s: %s", self.resource_name, owner.id, str(e))
            raise DatabaseError(context={"owner_id": str(owner.id)})

        logger.info("%s created: %s by owner %s", self.resource_name.capitalize(), item.id, owner.id)
        return item

    async def get(self, db: AsyncSession, item_id: uuid.UUID):
        try:
            result = await db.execute(select(self.model).where(self.model.id == item_id))
            item = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching %s %s: %s", self.resource_name, item_id, str(e))
            raise DatabaseError(context={"id": str(item_id)})

        if item is None:
            raise NotFoundError(resource=self.resource_name, resource_id=str(item_id))
        return item

    async def get_with_images(
        self, db: AsyncSession, item_id: uuid.UUID
    ) -> Tuple[Any, List[ImageAttachment]]:
        item = await self.get(db, item_id)
        attachments = await self.list_attachments(db, item_id)
        return item, attachments

    async def list_items(
        self,
        db: AsyncSession,
        q: Optional[str] = None,
        owner_id: Optional[uuid.UUID] = None,
        limit: int = 50,
        offset: int = 0,
        **filters: Optional[uuid.UUID],
    ) -> List[Any]:
        """
        Newest first. `q` matches the search columns case-insensitively;
        extra keyword filters are equality checks on model columns and are
        skipped when None.
        """
        query = select(self.model)
        if owner_id is not None:
            query = query.where(self.model.owner_id == owner_id)
        for column, value in filters.items():
            if value is not None:
                query = query.where(getattr(self.model, column) == value)
        if q and q.strip():
            pattern = f"%{_escape_like(q.strip())}%"
            query = query.where(
                or_(
                    *(
                        getattr(self.model, col).ilike(pattern, escape="\\")
                        for col in self.search_columns
                    )
                )
            )
        query = query.order_by(self.model.created_at.desc()).offset(offset).limit(limit)

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing %ss: %s", self.resource_name, str(e))
            raise DatabaseError()

    async def update(
        self, db: AsyncSession, owner: Owner, item_id: uuid.UUID, changes: Dict[str, Any]
    ):
        item = await self.get(db, item_id)
        self._require_owner(item, owner)
        self.validate_changes(item, changes)

        for field, value in changes.items():
            if value is None and field in self.required_fields:
                continue
            if value is None and field in self.list_fields:
                value = []
            setattr(item, field, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating %s %s: %s", self.resource_name, item_id, str(e))
            raise DatabaseError(context={"id": str(item_id)})

        logger.info("%s updated: %s %s", self.resource_name.capitalize(), item_id, sorted(changes))
        return item

    async def delete(self, db: AsyncSession, owner: Owner, item_id: uuid.UUID) -> None:
        """Delete the item with its image attachments, child posts and entries."""
        item = await self.get(db, item_id)
        self._require_owner(item, owner)

        await self._delete_dependents(db, item)
        try:
            await db.delete(item)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting %s %s: %s", self.resource_name, item_id, str(e))
            raise DatabaseError(context={"id": str(item_id)})

        logger.info("%s deleted: %s by owner %s", self.resource_name.capitalize(), item_id, owner.id)

    async def list_attachments(self, db: AsyncSession, item_id: uuid.UUID) -> List[ImageAttachment]:
        return await _attachments_for(db, self.target_type, item_id)

    def validate_changes(self, item: Any, changes: Dict[str, Any]) -> None:
        """Cross-field checks on the merged state; subclasses override."""

    async def _delete_dependents(self, db: AsyncSession, item: Any) -> None:
        attachments = await self.list_attachments(db, item.id)
        try:
            for attachment in attachments:
                await db.delete(attachment)
            if self.post_parent_column is None:
                return

            posts = await db.execute(
                select(Post).where(getattr(Post, self.post_parent_column) == item.id)
            )
            for post in posts.scalars().all():
                for attachment in await _attachments_for(db, AttachmentTarget.POST, post.id):
                    await db.delete(attachment)
                await db.delete(post)

            entries = await db.execute(
                select(Entry).where(
                    Entry.collection_type == self.target_type,
                    Entry.collection_id == item.id,
                )
            )
            for entry in entries.scalars().all():
                await db.delete(entry)
        except SQLAlchemyError as e:
            logger.error("Database error clearing %s %s: %s", self.resource_name, item.id, str(e))
            raise DatabaseError(context={"id": str(item.id)})

    def _require_owner(self, item: Any, owner: Owner) -> None:
        if item.owner_id != owner.id:
            logger.warning(
                "Owner %s denied modifying %s %s", owner.id, self.resource_name, item.id
            )
            raise ForbiddenError(f"Only the owner can modify this {self.resource_name}")


class ProjectService(OwnedContentService):
    model = Project
    target_type = AttachmentTarget.PROJECT
    resource_name = "project"
    list_fields = ("tags",)
    post_parent_column = "project_id"


class EventService(OwnedContentService):
    model = Event
    target_type = AttachmentTarget.EVENT
    resource_name = "event"
    search_columns = ("title", "description", "location")
    post_parent_column = "event_id"

    def validate_changes(self, item: Event, changes: Dict[str, Any]) -> None:
        starts_at = _as_utc(changes.get("starts_at", item.starts_at))
        ends_at = _as_utc(changes.get("ends_at", item.ends_at))
        if starts_at and ends_at and ends_at < starts_at:
            raise ValidationError("ends_at must not be before starts_at", field="ends_at")


class PostService(OwnedContentService):
    model = Post
    target_type = AttachmentTarget.POST
    resource_name = "post"
    search_columns = ("title", "content")
    required_fields = ("content",)
    list_fields = ("tags", "topics")

    async def create(self, db: AsyncSession, owner: Owner, data: Dict[str, Any]) -> Post:
        """
        Create a standalone post, or one on a project or event the owner owns.

        Raises:
            ValidationError: Both project_id and event_id are set
            NotFoundError: The parent project or event does not exist
            ForbiddenError: The parent belongs to another owner
        """
        data = dict(data)
        project_id = data.pop("project_id", None)
        event_id = data.pop("event_id", None)
        if project_id is not None and event_id is not None:
            raise ValidationError(
                "A post can belong to at most one project or event", field="event_id"
            )

        data["project"] = (
            await _owned_parent(project_service, db, owner, project_id) if project_id else None
        )
        data["event"] = (
            await _owned_parent(event_service, db, owner, event_id) if event_id else None
        )
        return await super().create(db, owner, data)


class EntryService:
    """Progress entries on projects and events, newest first."""

    async def list_entries(
        self, db: AsyncSession, collection_type: AttachmentTarget, collection_id: uuid.UUID
    ) -> List[Entry]:
        await ENTRY_COLLECTIONS[collection_type].get(db, collection_id)
        try:
            result = await db.execute(
                select(Entry)
                .where(
                    Entry.collection_type == collection_type,
                    Entry.collection_id == collection_id,
                )
                .order_by(Entry.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing entries of %s: %s", collection_id, str(e))
            raise DatabaseError(context={"collection_id": str(collection_id)})

    async def create_entry(
        self,
        db: AsyncSession,
        owner: Owner,
        collection_type: AttachmentTarget,
        collection_id: uuid.UUID,
        data: Dict[str, Any],
    ) -> Entry:
        """
        Raises:
            NotFoundError: The project or event does not exist
            ForbiddenError: It belongs to another owner
        """
        await _owned_parent(ENTRY_COLLECTIONS[collection_type], db, owner, collection_id)

        entry = Entry(collection_type=collection_type, collection_id=collection_id, **data)
        db.add(entry)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating entry on %s: %s", collection_id, str(e))
            raise DatabaseError(context={"collection_id": str(collection_id)})

        logger.info("Entry created: %s on %s %s", entry.id, collection_type.value, collection_id)
        return entry


async def _owned_parent(
    service: OwnedContentService, db: AsyncSession, owner: Owner, parent_id: uuid.UUID
):
    parent = await service.get(db, parent_id)
    if parent.owner_id != owner.id:
        logger.warning(
            "Owner %s denied writing to %s %s", owner.id, service.resource_name, parent_id
        )
        raise ForbiddenError(f"Only the {service.resource_name} owner can add to it")
    return parent


project_service = ProjectService()
event_service = EventService()
post_service = PostService()
entry_service = EntryService()

SERVICES_BY_TARGET = {
    AttachmentTarget.PROJECT: project_service,
    AttachmentTarget.EVENT: event_service,
    AttachmentTarget.POST: post_service,
}

ENTRY_COLLECTIONS = {
    AttachmentTarget.PROJECT: project_service,
    AttachmentTarget.EVENT: event_service,
}
