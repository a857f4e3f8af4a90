"""
Project Library Backend - Owner Service Tests
==============================================

What:  Active-owner resolution and the owner list behind GET /api/me.
How:   Real SQLite session for the rules, a mock session for driver errors.

What we test:
    ✅ No requested owner resolves to the personal owner
    ✅ OWNER/ADMIN may act as the org, MEMBER and strangers may not
    ✅ Unknown owner → NotFoundError, suspended owner → ForbiddenError
    ✅ Owner listing: personal first, then managed active orgs
    ✅ Driver failures surface as DatabaseError
"""

from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from project_library.exceptions import DatabaseError, ForbiddenError, NotFoundError
from project_library.models.org import OrgRole
from project_library.models.owner import OwnerStatus, OwnerType
from project_library.schemas.org import OrgCreate
from project_library.services.org_service import org_service
from project_library.services.owner_service import OwnerService


class TestResolveActiveOwner:

    def setup_method(self):
        self.service = OwnerService()

    @pytest.mark.asyncio
    async def test_defaults_to_personal_owner(self, db_session, make_user):
        alice, alice_owner = await make_user("alice")

        owner = await self.service.resolve_active_owner(db_session, alice.id)

        assert owner.id == alice_owner.id
        assert owner.type == OwnerType.USER
        assert owner.user_id == alice.id

    @pytest.mark.asyncio
    async def test_personal_owner_requested_explicitly(self, db_session, make_user):
        alice, alice_owner = await make_user("alice")

        owner = await self.service.resolve_active_owner(db_session, alice.id, alice_owner.id)

        assert owner.id == alice_owner.id

    @pytest.mark.asyncio
    async def test_org_owner_can_act_as_org(self, db_session, make_user):
        alice, _ = await make_user("alice")
        _, org_owner = await org_service.create_org(
            db_session, alice, OrgCreate(name="Acme", slug="acme")
        )

        owner = await self.service.resolve_active_owner(db_session, alice.id, org_owner.id)

        assert owner.id == org_owner.id
        assert owner.type == OwnerType.ORG

    @pytest.mark.asyncio
    async def test_admin_can_act_as_org(self, db_session, make_user):
        alice, _ = await make_user("alice")
        bob, _ = await make_user("bob")
        org, org_owner = await org_service.create_org(
            db_session, alice, OrgCreate(name="Acme", slug="acme")
        )
        await org_service.add_member(db_session, alice.id, org.id, bob.id, OrgRole.ADMIN)

        owner = await self.service.resolve_active_owner(db_session, bob.id, org_owner.id)

        assert owner.id == org_owner.id

    @pytest.mark.asyncio
    async def test_plain_member_cannot_act_as_org(self, db_session, make_user):
        alice, _ = await make_user("alice")
        bob, _ = await make_user("bob")
        org, org_owner = await org_service.create_org(
            db_session, alice, OrgCreate(name="Acme", slug="acme")
        )
        await org_service.add_member(db_session, alice.id, org.id, bob.id, OrgRole.MEMBER)

        with pytest.raises(ForbiddenError):
            await self.service.resolve_active_owner(db_session, bob.id, org_owner.id)

    @pytest.mark.asyncio
    async def test_cannot_act_as_another_users_personal_owner(self, db_session, make_user):
        _, alice_owner = await make_user("alice")
        bob, _ = await make_user("bob")

        with pytest.raises(ForbiddenError):
            await self.service.resolve_active_owner(db_session, bob.id, alice_owner.id)

    @pytest.mark.asyncio
    async def test_unknown_owner_raises_not_found(self, db_session, make_user):
        alice, _ = await make_user("alice")

        with pytest.raises(NotFoundError):
            await self.service.resolve_active_owner(db_session, alice.id, uuid4())

    @pytest.mark.asyncio
    async def test_suspended_owner_is_forbidden(self, db_session, make_user):
        alice, _ = await make_user("alice")
        _, org_owner = await org_service.create_org(
            db_session, alice, OrgCreate(name="Acme", slug="acme")
        )
        org_owner.status = OwnerStatus.SUSPENDED
        await db_session.flush()

        with pytest.raises(ForbiddenError) as exc_info:
            await self.service.resolve_active_owner(db_session, alice.id, org_owner.id)

        assert exc_info.value.context["status"] == "SUSPENDED"


class TestListOwnersForUser:

    def setup_method(self):
        self.service = OwnerService()

    @pytest.mark.asyncio
    async def test_personal_owner_first_then_managed_orgs(self, db_session, make_user):
        alice, alice_owner = await make_user("alice")
        bob, _ = await make_user("bob")
        _, acme_owner = await org_service.create_org(
            db_session, alice, OrgCreate(name="Acme", slug="acme")
        )
        globex, _ = await org_service.create_org(
            db_session, bob, OrgCreate(name="Globex", slug="globex")
        )
        # Plain membership does not grant acting rights
        await org_service.add_member(db_session, bob.id, globex.id, alice.id, OrgRole.MEMBER)

        owners = await self.service.list_owners_for_user(db_session, alice.id)

        assert [o.id for o in owners] == [alice_owner.id, acme_owner.id]

    @pytest.mark.asyncio
    async def test_user_without_orgs_has_only_personal_owner(self, db_session, make_user):
        alice, alice_owner = await make_user("alice")

        owners = await self.service.list_owners_for_user(db_session, alice.id)

        assert [o.id for o in owners] == [alice_owner.id]

    @pytest.mark.asyncio
    async def test_suspended_org_owner_is_not_listed(self, db_session, make_user):
        alice, alice_owner = await make_user("alice")
        _, org_owner = await org_service.create_org(
            db_session, alice, OrgCreate(name="Acme", slug="acme")
        )
        org_owner.status = OwnerStatus.SUSPENDED
        await db_session.flush()

        owners = await self.service.list_owners_for_user(db_session, alice.id)

        assert [o.id for o in owners] == [alice_owner.id]
        with pytest.raises(ForbiddenError):
            await self.service.resolve_active_owner(db_session, alice.id, org_owner.id)


class TestOwnerServiceErrors:

    def setup_method(self):
        self.service = OwnerService()

    @pytest.mark.asyncio
    async def test_driver_error_becomes_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection lost")

        with pytest.raises(DatabaseError):
            await self.service.get_owner(mock_db_session, uuid4())

    @pytest.mark.asyncio
    async def test_missing_personal_owner_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_personal_owner(db_session, uuid4())
