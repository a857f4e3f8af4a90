"""
Project Library Backend - Post and Entry Service Tests
=======================================================

What we test:
    ✅ Posts are standalone or hang off one of the owner's projects/events
    ✅ Writing on someone else's project or event is forbidden
    ✅ Listing filters by project, event and paging
    ✅ Deleting a project takes its posts and entries with it
    ✅ Entries are owner-written and read newest first
    ✅ PostCreate trims and bounds its fields
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, select

from project_library.exceptions import ForbiddenError, NotFoundError, ValidationError
from project_library.models.content import Entry, Post
from project_library.models.image import AttachmentTarget
from project_library.schemas.content import PostCreate
from project_library.services.content_service import (
    EntryService,
    EventService,
    PostService,
    ProjectService,
)


class TestPostService:

    def setup_method(self):
        self.service = PostService()
        self.projects = ProjectService()
        self.events = EventService()

    @pytest.mark.asyncio
    async def test_create_standalone(self, db_session, make_user):
        _, alice = await make_user("alice")

        post = await self.service.create(
            db_session, alice, {"title": None, "content": "Hello", "tags": [], "topics": []}
        )
        fetched = await self.service.get(db_session, post.id)

        assert fetched.owner_id == alice.id
        assert fetched.project_id is None
        assert fetched.event_id is None

    @pytest.mark.asyncio
    async def test_create_on_own_project(self, db_session, make_user):
        _, alice = await make_user("alice")
        project = await self.projects.create(db_session, alice, {"title": "Rover", "tags": []})

        post = await self.service.create(
            db_session, alice, {"content": "Wheels on", "project_id": project.id}
        )

        assert post.project_id == project.id
        assert post.project.title == "Rover"

    @pytest.mark.asyncio
    async def test_create_on_foreign_project_forbidden(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        project = await self.projects.create(db_session, alice, {"title": "Rover", "tags": []})

        with pytest.raises(ForbiddenError):
            await self.service.create(
                db_session, bob, {"content": "Mine now", "project_id": project.id}
            )

    @pytest.mark.asyncio
    async def test_create_on_unknown_parent(self, db_session, make_user):
        _, alice = await make_user("alice")

        with pytest.raises(NotFoundError):
            await self.service.create(db_session, alice, {"content": "x", "event_id": uuid4()})

    @pytest.mark.asyncio
    async def test_create_with_two_parents_rejected(self, db_session, make_user):
        _, alice = await make_user("alice")

        with pytest.raises(ValidationError):
            await self.service.create(
                db_session, alice, {"content": "x", "project_id": uuid4(), "event_id": uuid4()}
            )

    @pytest.mark.asyncio
    async def test_list_filters(self, db_session, make_user):
        _, alice = await make_user("alice")
        start = datetime.now(timezone.utc)
        project = await self.projects.create(db_session, alice, {"title": "Rover", "tags": []})
        event = await self.events.create(
            db_session,
            alice,
            {"title": "Meetup", "starts_at": start, "ends_at": start + timedelta(hours=2)},
        )
        await self.service.create(db_session, alice, {"content": "standalone"})
        await self.service.create(db_session, alice, {"content": "rover 1", "project_id": project.id})
        await self.service.create(db_session, alice, {"content": "rover 2", "project_id": project.id})
        await self.service.create(db_session, alice, {"content": "meetup", "event_id": event.id})

        on_project = await self.service.list_items(db_session, project_id=project.id)
        on_event = await self.service.list_items(db_session, event_id=event.id)
        second_page = await self.service.list_items(db_session, limit=2, offset=2)

        assert [p.content for p in on_project] == ["rover 2", "rover 1"]
        assert [p.content for p in on_event] == ["meetup"]
        assert [p.content for p in second_page] == ["rover 1", "standalone"]

    @pytest.mark.asyncio
    async def test_update_by_owner(self, db_session, make_user):
        _, alice = await make_user("alice")
        post = await self.service.create(
            db_session, alice, {"title": "Draft", "content": "Hello", "tags": ["a"]}
        )

        updated = await self.service.update(
            db_session, alice, post.id, {"title": "Final", "content": None, "tags": None}
        )

        assert updated.title == "Final"
        assert updated.content == "Hello"
        assert updated.tags == []

    @pytest.mark.asyncio
    async def test_update_and_delete_by_other_owner_forbidden(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        post = await self.service.create(db_session, alice, {"content": "Hello"})

        with pytest.raises(ForbiddenError):
            await self.service.update(db_session, bob, post.id, {"content": "Hijacked"})
        with pytest.raises(ForbiddenError):
            await self.service.delete(db_session, bob, post.id)

    @pytest.mark.asyncio
    async def test_deleting_project_removes_posts_and_entries(self, db_session, make_user):
        _, alice = await make_user("alice")
        project = await self.projects.create(db_session, alice, {"title": "Rover", "tags": []})
        post = await self.service.create(
            db_session, alice, {"content": "Wheels on", "project_id": project.id}
        )
        await EntryService().create_entry(
            db_session, alice, AttachmentTarget.PROJECT, project.id, {"content": "Week 1"}
        )

        await self.projects.delete(db_session, alice, project.id)

        with pytest.raises(NotFoundError):
            await self.service.get(db_session, post.id)
        assert await db_session.scalar(select(func.count()).select_from(Post)) == 0
        assert await db_session.scalar(select(func.count()).select_from(Entry)) == 0


class TestEntryService:

    def setup_method(self):
        self.service = EntryService()
        self.projects = ProjectService()

    @pytest.mark.asyncio
    async def test_entries_newest_first(self, db_session, make_user):
        _, alice = await make_user("alice")
        project = await self.projects.create(db_session, alice, {"title": "Rover", "tags": []})
        for content in ("Week 1", "Week 2"):
            await self.service.create_entry(
                db_session, alice, AttachmentTarget.PROJECT, project.id, {"content": content}
            )

        entries = await self.service.list_entries(db_session, AttachmentTarget.PROJECT, project.id)

        assert [e.content for e in entries] == ["Week 2", "Week 1"]
        assert all(e.collection_type == AttachmentTarget.PROJECT for e in entries)

    @pytest.mark.asyncio
    async def test_only_collection_owner_writes(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        project = await self.projects.create(db_session, alice, {"title": "Rover", "tags": []})

        with pytest.raises(ForbiddenError):
            await self.service.create_entry(
                db_session, bob, AttachmentTarget.PROJECT, project.id, {"content": "Spam"}
            )

    @pytest.mark.asyncio
    async def test_unknown_collection(self, db_session, make_user):
        _, alice = await make_user("alice")

        with pytest.raises(NotFoundError):
            await self.service.list_entries(db_session, AttachmentTarget.EVENT, uuid4())
        with pytest.raises(NotFoundError):
            await self.service.create_entry(
                db_session, alice, AttachmentTarget.EVENT, uuid4(), {"content": "x"}
            )


class TestPostSchema:

    def test_trims_and_splits_tags(self):
        body = PostCreate(title="  ", content="  Hello  ", tags="robots, ,space")

        assert body.title is None
        assert body.content == "Hello"
        assert body.tags == ["robots", "space"]

    @pytest.mark.parametrize(
        "fields",
        [
            {"content": "x" * 10_001},
            {"content": "   "},
            {"content": "ok", "title": "t" * 201},
            {"content": "ok", "project_id": str(uuid4()), "event_id": str(uuid4())},
        ],
    )
    def test_rejects(self, fields):
        with pytest.raises(SchemaValidationError):
            PostCreate(**fields)
