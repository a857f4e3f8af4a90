"""
Project Library Backend - Request ID and Access Log Tests
==========================================================

What we test:
    ✅ Safe client request IDs are kept, unsafe ones replaced
    ✅ The access log line names the session user, acting owner and client
    ✅ Anonymous requests log without an identity
"""

import logging

import pytest

from project_library.middleware.request_id import new_request_id


class TestRequestId:

    def test_safe_client_id_is_kept(self):
        assert new_request_id("req-001") == "req-001"
        assert new_request_id("trace.AB_12") == "trace.AB_12"

    def test_unsafe_or_missing_id_is_replaced(self):
        for value in ("", "has space", "line\nbreak", "x" * 65):
            rid = new_request_id(value)
            assert rid != value
            assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_unsafe_header_is_not_echoed(self, client):
        response = await client.get("/api/me", headers={"X-Request-ID": "bad id"})

        rid = response.headers["X-Request-ID"]
        assert rid != "bad id"
        assert response.json()["error"]["request_id"] == rid


class TestAccessLog:

    @staticmethod
    def _access_records(caplog):
        return [r for r in caplog.records if r.name == "project_library.access"]

    @pytest.mark.asyncio
    async def test_names_user_and_acting_owner(self, client, signup, caplog):
        caplog.set_level(logging.INFO, logger="project_library.access")
        alice = await signup("alice")
        caplog.clear()

        await client.get(
            "/api/me",
            headers={
                "Authorization": f"Bearer {alice['access_token']}",
                "X-Forwarded-For": "203.0.113.7",
            },
        )

        records = self._access_records(caplog)
        assert len(records) == 1
        record = records[0]
        assert record.levelno == logging.INFO
        assert record.status == 200
        assert record.user_id == alice["user_id"]
        assert record.active_owner_id == alice["active_owner"]["id"]
        assert record.client_ip == "203.0.113.7"

    @pytest.mark.asyncio
    async def test_anonymous_request_has_no_identity(self, client, caplog):
        caplog.set_level(logging.INFO, logger="project_library.access")

        await client.get("/api/me")

        records = self._access_records(caplog)
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].user_id is None
        assert "user=- as=-" in records[0].getMessage()
