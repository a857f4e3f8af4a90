"""
Project Library Backend - Follow Service Tests
===============================================

What we test:
    ✅ Following creates one directed edge
    ✅ Self-follow → ValidationError, duplicate → DuplicateError
    ✅ Unknown target → NotFoundError
    ✅ Followers/following lists return the *other* owner, newest first
    ✅ Stats count both directions and report is_following for a viewer
"""

from uuid import uuid4

import pytest

from project_library.exceptions import DuplicateError, NotFoundError, ValidationError
from project_library.schemas.org import OrgCreate
from project_library.services.follow_service import FollowService
from project_library.services.org_service import org_service


class TestFollow:

    def setup_method(self):
        self.service = FollowService()

    @pytest.mark.asyncio
    async def test_follow_creates_edge(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")

        follow = await self.service.follow(db_session, alice, bob.id)

        assert follow.follower_owner_id == alice.id
        assert follow.following_owner_id == bob.id
        assert await self.service.is_following(db_session, alice.id, bob.id)
        assert not await self.service.is_following(db_session, bob.id, alice.id)

    @pytest.mark.asyncio
    async def test_cannot_follow_self(self, db_session, make_user):
        _, alice = await make_user("alice")

        with pytest.raises(ValidationError) as exc_info:
            await self.service.follow(db_session, alice, alice.id)

        assert exc_info.value.field == "following_owner_id"

    @pytest.mark.asyncio
    async def test_duplicate_follow_rejected(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        await self.service.follow(db_session, alice, bob.id)

        with pytest.raises(DuplicateError):
            await self.service.follow(db_session, alice, bob.id)

    @pytest.mark.asyncio
    async def test_unknown_target_raises_not_found(self, db_session, make_user):
        _, alice = await make_user("alice")

        with pytest.raises(NotFoundError):
            await self.service.follow(db_session, alice, uuid4())

    @pytest.mark.asyncio
    async def test_user_can_follow_org(self, db_session, make_user):
        _, alice = await make_user("alice")
        bob_user, _ = await make_user("bob")
        _, org_owner = await org_service.create_org(
            db_session, bob_user, OrgCreate(name="Acme", slug="acme")
        )

        await self.service.follow(db_session, alice, org_owner.id)

        followers = await self.service.list_followers(db_session, org_owner.id)
        assert [owner.id for owner, _ in followers] == [alice.id]


class TestFollowLists:

    def setup_method(self):
        self.service = FollowService()

    @pytest.mark.asyncio
    async def test_lists_are_newest_first(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        _, carol = await make_user("carol")
        await self.service.follow(db_session, bob, alice.id)
        await self.service.follow(db_session, carol, alice.id)
        await self.service.follow(db_session, alice, bob.id)
        await self.service.follow(db_session, alice, carol.id)

        followers = await self.service.list_followers(db_session, alice.id)
        following = await self.service.list_following(db_session, alice.id)

        assert [owner.id for owner, _ in followers] == [carol.id, bob.id]
        assert [owner.id for owner, _ in following] == [carol.id, bob.id]
        assert followers[0][1] >= followers[1][1]

    @pytest.mark.asyncio
    async def test_list_for_unknown_owner_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_followers(db_session, uuid4())


class TestFollowStats:

    def setup_method(self):
        self.service = FollowService()

    @pytest.mark.asyncio
    async def test_counts_and_viewer_flag(self, db_session, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        _, carol = await make_user("carol")
        await self.service.follow(db_session, bob, alice.id)
        await self.service.follow(db_session, carol, alice.id)
        await self.service.follow(db_session, alice, bob.id)

        followers, following, is_following = await self.service.follow_stats(
            db_session, alice.id, viewer_owner_id=bob.id
        )

        assert (followers, following, is_following) == (2, 1, True)

    @pytest.mark.asyncio
    async def test_anonymous_viewer_gets_none(self, db_session, make_user):
        _, alice = await make_user("alice")

        followers, following, is_following = await self.service.follow_stats(
            db_session, alice.id
        )

        assert (followers, following, is_following) == (0, 0, None)
