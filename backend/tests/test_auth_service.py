"""
Project Library Backend - Auth and User Profile Service Tests
==============================================================

What we test:
    ✅ Signup creates the user and its personal owner, email lowercased
    ✅ Format rules for email, username and password
    ✅ Duplicate email/username → DuplicateError
    ✅ Login succeeds with the right password only
    ✅ Partial profile updates and the public profile lookup
"""

import pytest
from pydantic import ValidationError as SchemaValidationError

from project_library.exceptions import (
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from project_library.models.owner import OwnerType
from project_library.schemas.user import UserProfileUpdate
from project_library.services.auth_service import AuthService
from project_library.services.owner_service import owner_service
from project_library.services.user_service import UserService


class TestSignup:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_signup_creates_personal_owner(self, db_session):
        user = await self.service.signup(db_session, "  Alice@Example.COM ", "alice", "s3cret-pass")

        owner = await owner_service.get_personal_owner(db_session, user.id)

        assert user.email == "alice@example.com"
        assert user.password_hash != "s3cret-pass"
        assert owner.type == OwnerType.USER
        assert owner.display_name == "alice"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,username,password,field",
        [
            ("not-an-email", "alice", "s3cret-pass", "email"),
            ("a@example.com", "al", "s3cret-pass", "username"),
            ("a@example.com", "has space", "s3cret-pass", "username"),
            ("a@example.com", "alice", "short", "password"),
        ],
    )
    async def test_signup_validation(self, db_session, email, username, password, field):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.signup(db_session, email, username, password)

        assert exc_info.value.field == field

    @pytest.mark.asyncio
    async def test_duplicate_email_and_username(self, db_session):
        await self.service.signup(db_session, "alice@example.com", "alice", "s3cret-pass")

        with pytest.raises(DuplicateError) as by_email:
            await self.service.signup(db_session, "ALICE@example.com", "alice2", "s3cret-pass")
        with pytest.raises(DuplicateError) as by_username:
            await self.service.signup(db_session, "other@example.com", "alice", "s3cret-pass")

        assert by_email.value.field == "email"
        assert by_username.value.field == "username"


class TestAuthenticate:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, db_session):
        created = await self.service.signup(db_session, "alice@example.com", "alice", "s3cret-pass")

        user = await self.service.authenticate(db_session, "Alice@example.com", "s3cret-pass")

        assert user.id == created.id

    @pytest.mark.asyncio
    async def test_wrong_password_or_unknown_email(self, db_session):
        await self.service.signup(db_session, "alice@example.com", "alice", "s3cret-pass")

        with pytest.raises(UnauthorizedError):
            await self.service.authenticate(db_session, "alice@example.com", "wrong-pass")
        with pytest.raises(UnauthorizedError):
            await self.service.authenticate(db_session, "nobody@example.com", "s3cret-pass")


class TestUserProfile:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_partial_update_only_touches_sent_fields(self, db_session, make_user):
        alice, _ = await make_user("alice")
        await self.service.update_profile(
            db_session, alice, UserProfileUpdate(headline="Maker", interests=[" robotics "])
        )

        updated = await self.service.update_profile(
            db_session, alice, UserProfileUpdate(bio="Builds robots")
        )

        assert updated.headline == "Maker"
        assert updated.bio == "Builds robots"
        assert updated.interests == ["robotics"]

    @pytest.mark.asyncio
    async def test_null_interests_clear_the_list(self, db_session, make_user):
        alice, _ = await make_user("alice")
        await self.service.update_profile(db_session, alice, UserProfileUpdate(interests=["a"]))

        updated = await self.service.update_profile(
            db_session, alice, UserProfileUpdate(interests=None)
        )

        assert updated.interests == []

    def test_interest_rules(self):
        with pytest.raises(SchemaValidationError):
            UserProfileUpdate(interests=["   "])
        with pytest.raises(SchemaValidationError):
            UserProfileUpdate(interests=["x" * 51])
        with pytest.raises(SchemaValidationError):
            UserProfileUpdate(headline="h" * 201)

    @pytest.mark.asyncio
    async def test_public_profile_lookup(self, db_session, make_user):
        alice, alice_owner = await make_user("alice")

        user, owner = await self.service.get_public_profile(db_session, "alice")

        assert user.id == alice.id
        assert owner.id == alice_owner.id
        with pytest.raises(NotFoundError):
            await self.service.get_public_profile(db_session, "nobody")
