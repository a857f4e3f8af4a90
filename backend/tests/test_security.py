"""
Project Library Backend - Password and Session Token Tests
===========================================================
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from project_library.config import settings
from project_library.exceptions import UnauthorizedError
from project_library.security import (
    decode_session_token,
    hash_password,
    issue_session_token,
    verify_password,
)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("correct-horse-1")

        assert hashed != "correct-horse-1"
        assert verify_password("correct-horse-1", hashed)
        assert not verify_password("wrong-horse-1", hashed)

    def test_malformed_hash_is_a_mismatch(self):
        assert not verify_password("anything", "not-a-passlib-hash")


class TestSessionTokens:

    def test_round_trip_with_active_owner(self):
        user_id, owner_id = uuid.uuid4(), uuid.uuid4()

        claims = decode_session_token(issue_session_token(user_id, owner_id))

        assert claims.user_id == user_id
        assert claims.active_owner_id == owner_id

    def test_personal_session_has_no_owner_claim(self):
        claims = decode_session_token(issue_session_token(uuid.uuid4()))
        assert claims.active_owner_id is None

    def test_tampered_token_rejected(self):
        token = issue_session_token(uuid.uuid4())
        forged = jwt.encode({"sub": str(uuid.uuid4())}, "some-other-key", algorithm="HS256")

        with pytest.raises(UnauthorizedError):
            decode_session_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))
        with pytest.raises(UnauthorizedError):
            decode_session_token(forged)

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "iat": past - timedelta(hours=1), "exp": past},
            settings.session_secret,
            algorithm=settings.session_algorithm,
        )

        with pytest.raises(UnauthorizedError) as exc_info:
            decode_session_token(token)

        assert "expired" in exc_info.value.message.lower()

    def test_non_uuid_subject_rejected(self):
        token = jwt.encode(
            {"sub": "not-a-uuid"}, settings.session_secret, algorithm=settings.session_algorithm
        )

        with pytest.raises(UnauthorizedError):
            decode_session_token(token)
