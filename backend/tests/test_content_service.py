"""
Project Library Backend - Project, Event and Image Service Tests
=================================================================

What we test:
    ✅ Create/get/list/update/delete projects scoped to the owning owner
    ✅ Search is case-insensitive over title and description
    ✅ Event time range is checked on update
    ✅ Images attach only to the acting owner's own content, in sort order
    ✅ Deleting content removes its attachments
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from project_library.exceptions import ForbiddenError, NotFoundError, ValidationError
from project_library.models.image import AttachmentTarget
from project_library.schemas.image import AttachmentCreate, ImageCreate
from project_library.services.content_service import EventService, ProjectService
from project_library.services.image_service import ImageService


class TestProjectService:

    def setup_method(self):
        self.service = ProjectService()

    @pytest.mark.asyncio
    async def test_create_and_get(self, db_session, make_user):
        _, alice = await make_user("alice")

        project = await self.service.create(
            db_session, alice, {"title": "Solar car", "description": None, "tags": ["energy"]}
        )
        fetched, images = await self.service.get_with_images(db_session, project.id)

        assert fetched.id == project.id
        assert fetched.owner_id == alice.id
        assert fetched.tags == ["energy"]
        assert images == []

    @pytest.mark.asyncio
    async def test_get_unknown_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get(db_session, uuid4())

    @pytest.mark.asyncio
    async def test_list_filters(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        await self.service.create(db_session, alice, {"title": "Solar Car", "tags": []})
        await self.service.create(
            db_session, alice, {"title": "Garden", "description": "Uses SOLAR pumps", "tags": []}
        )
        await self.service.create(db_session, bob, {"title": "Chess club", "tags": []})

        solar = await self.service.list_items(db_session, q="solar")
        bobs = await self.service.list_items(db_session, owner_id=bob.id)
        everything = await self.service.list_items(db_session, limit=2)

        assert {p.title for p in solar} == {"Solar Car", "Garden"}
        assert [p.title for p in bobs] == ["Chess club"]
        assert [p.title for p in everything] == ["Chess club", "Garden"]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, db_session, make_user):
        _, alice = await make_user("alice")
        await self.service.create(db_session, alice, {"title": "snake_case parser", "tags": []})
        await self.service.create(db_session, alice, {"title": "snakeXcase parser", "tags": []})
        await self.service.create(db_session, alice, {"title": "100% solar", "tags": []})
        await self.service.create(db_session, alice, {"title": "1000 solar panels", "tags": []})

        underscore = await self.service.list_items(db_session, q="snake_case")
        percent = await self.service.list_items(db_session, q="100%")

        assert [p.title for p in underscore] == ["snake_case parser"]
        assert [p.title for p in percent] == ["100% solar"]

    @pytest.mark.asyncio
    async def test_update_by_owner(self, db_session, make_user):
        _, alice = await make_user("alice")
        project = await self.service.create(db_session, alice, {"title": "Draft", "tags": ["a"]})

        updated = await self.service.update(
            db_session, alice, project.id, {"title": None, "tags": None, "description": "Now live"}
        )

        assert updated.title == "Draft"
        assert updated.tags == []
        assert updated.description == "Now live"

    @pytest.mark.asyncio
    async def test_update_by_other_owner_forbidden(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        project = await self.service.create(db_session, alice, {"title": "Mine", "tags": []})

        with pytest.raises(ForbiddenError):
            await self.service.update(db_session, bob, project.id, {"title": "Stolen"})
        with pytest.raises(ForbiddenError):
            await self.service.delete(db_session, bob, project.id)


class TestEventService:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_update_rejects_inverted_range(self, db_session, make_user):
        _, alice = await make_user("alice")
        start = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)
        event = await self.service.create(
            db_session,
            alice,
            {"title": "Meetup", "starts_at": start, "ends_at": start + timedelta(hours=2)},
        )

        with pytest.raises(ValidationError):
            await self.service.update(
                db_session, alice, event.id, {"ends_at": start - timedelta(hours=1)}
            )

    @pytest.mark.asyncio
    async def test_search_includes_location(self, db_session, make_user):
        _, alice = await make_user("alice")
        await self.service.create(db_session, alice, {"title": "Meetup", "location": "Berlin"})

        found = await self.service.list_items(db_session, q="berlin")

        assert [e.title for e in found] == ["Meetup"]


class TestImageService:

    def setup_method(self):
        self.images = ImageService()
        self.projects = ProjectService()

    async def _image(self, db_session, owner, path="a.png"):
        return await self.images.create_image(
            db_session, owner, ImageCreate(url=f"https://cdn.example.com/{path}", path=path)
        )

    @pytest.mark.asyncio
    async def test_attach_in_sort_order(self, db_session, make_user):
        _, alice = await make_user("alice")
        project = await self.projects.create(db_session, alice, {"title": "Robot", "tags": []})
        first = await self._image(db_session, alice, "first.png")
        second = await self._image(db_session, alice, "second.png")

        await self.images.attach_image(
            db_session,
            alice,
            AttachmentCreate(
                image_id=second.id, target_type=AttachmentTarget.PROJECT,
                target_id=project.id, sort_order=1,
            ),
        )
        await self.images.attach_image(
            db_session,
            alice,
            AttachmentCreate(
                image_id=first.id, target_type=AttachmentTarget.PROJECT,
                target_id=project.id, sort_order=0,
            ),
        )

        _, attachments = await self.projects.get_with_images(db_session, project.id)
        assert [a.image.path for a in attachments] == ["first.png", "second.png"]

    @pytest.mark.asyncio
    async def test_cannot_attach_to_others_content(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        project = await self.projects.create(db_session, alice, {"title": "Robot", "tags": []})
        bobs_image = await self._image(db_session, bob)

        with pytest.raises(ForbiddenError):
            await self.images.attach_image(
                db_session,
                bob,
                AttachmentCreate(
                    image_id=bobs_image.id, target_type=AttachmentTarget.PROJECT,
                    target_id=project.id,
                ),
            )

    @pytest.mark.asyncio
    async def test_cannot_attach_others_image(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        project = await self.projects.create(db_session, alice, {"title": "Robot", "tags": []})
        bobs_image = await self._image(db_session, bob)

        with pytest.raises(ForbiddenError):
            await self.images.attach_image(
                db_session,
                alice,
                AttachmentCreate(
                    image_id=bobs_image.id, target_type=AttachmentTarget.PROJECT,
                    target_id=project.id,
                ),
            )

    @pytest.mark.asyncio
    async def test_attach_to_missing_target(self, db_session, make_user):
        _, alice = await make_user("alice")
        image = await self._image(db_session, alice)

        with pytest.raises(NotFoundError):
            await self.images.attach_image(
                db_session,
                alice,
                AttachmentCreate(
                    image_id=image.id, target_type=AttachmentTarget.EVENT, target_id=uuid4()
                ),
            )

    @pytest.mark.asyncio
    async def test_deleting_project_removes_attachments(self, db_session, make_user):
        _, alice = await make_user("alice")
        project = await self.projects.create(db_session, alice, {"title": "Robot", "tags": []})
        image = await self._image(db_session, alice)
        attachment = await self.images.attach_image(
            db_session,
            alice,
            AttachmentCreate(
                image_id=image.id, target_type=AttachmentTarget.PROJECT, target_id=project.id
            ),
        )

        await self.projects.delete(db_session, alice, project.id)

        with pytest.raises(NotFoundError):
            await self.projects.get(db_session, project.id)
        with pytest.raises(NotFoundError):
            await self.images.delete_attachment(db_session, alice, attachment.id)
        # The image itself stays in the owner's library
        assert [i.id for i in await self.images.list_images(db_session, alice)] == [image.id]
