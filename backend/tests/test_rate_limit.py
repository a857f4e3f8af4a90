"""
Project Library Backend - Rate Limiter Tests
=============================================

What:  The fixed-window InMemoryRateLimiter, client key extraction, and the
       middleware's 429 envelope.
How:   A fake clock drives time; the store is a plain dict we can inspect.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from project_library.main import create_app
from project_library.middleware.rate_limit import InMemoryRateLimiter, client_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _request(headers=None, client=("10.0.0.1", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestInMemoryRateLimiter:

    def test_allows_up_to_limit_then_refuses(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(limit=3, window_seconds=60, clock=clock)

        decisions = [limiter.hit("1.2.3.4") for _ in range(4)]

        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert [d.remaining for d in decisions[:3]] == [2, 1, 0]
        assert decisions[3].retry_after == 60

    def test_retry_after_counts_down_and_window_resets(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(limit=1, window_seconds=60, clock=clock)
        limiter.hit("k")

        clock.advance(45.5)
        refused = limiter.hit("k")
        clock.advance(15)
        allowed = limiter.hit("k")

        assert not refused.allowed
        assert refused.retry_after == 15
        assert allowed.allowed

    def test_keys_are_independent(self):
        limiter = InMemoryRateLimiter(limit=1, window_seconds=60, clock=FakeClock())

        assert limiter.hit("a").allowed
        assert limiter.hit("b").allowed
        assert not limiter.hit("a").allowed

    def test_sweep_drops_expired_entries(self):
        clock = FakeClock()
        store = {}
        limiter = InMemoryRateLimiter(
            limit=5, window_seconds=10, sweep_interval=30, store=store, clock=clock
        )
        limiter.hit("old")
        clock.advance(20)
        limiter.hit("fresh")

        removed = limiter.sweep()

        assert removed == 1
        assert set(store) == {"fresh"}

    def test_periodic_sweep_runs_on_hit(self):
        clock = FakeClock()
        store = {}
        limiter = InMemoryRateLimiter(
            limit=5, window_seconds=10, sweep_interval=30, store=store, clock=clock
        )
        limiter.hit("idle")
        clock.advance(31)

        limiter.hit("active")

        assert "idle" not in store

    def test_rejects_bad_configuration(self):
        with pytest.raises(ValueError):
            InMemoryRateLimiter(limit=0, window_seconds=60)
        with pytest.raises(ValueError):
            InMemoryRateLimiter(limit=1, window_seconds=0)


class TestClientKey:

    def test_forwarded_for_first_hop_wins(self):
        request = _request({"X-Forwarded-For": "203.0.113.5, 10.0.0.2", "X-Real-IP": "198.51.100.1"})
        assert client_key(request) == "203.0.113.5"

    def test_real_ip_then_peer(self):
        assert client_key(_request({"X-Real-IP": "198.51.100.1"})) == "198.51.100.1"
        assert client_key(_request()) == "10.0.0.1"
        assert client_key(_request(client=None)) == "unknown"


class TestRateLimitMiddleware:

    @pytest.mark.asyncio
    async def test_429_envelope_with_retry_after(self):
        limiter = InMemoryRateLimiter(limit=2, window_seconds=60, clock=FakeClock())
        app = create_app(rate_limiter=limiter)
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            headers = {"X-Forwarded-For": "203.0.113.9"}
            for _ in range(2):
                response = await client.get("/api/topics/none", headers=headers)
                assert response.status_code != 429
            limited = await client.get("/api/auth/logout", headers=headers)

        assert limited.status_code == 429
        assert limited.headers["Retry-After"] == "60"
        assert limited.headers["X-Request-ID"]
        body = limited.json()
        assert body["data"] is None
        assert body["error"]["code"] == "RATE_LIMITED"
        assert body["error"]["details"]["retry_after"] == 60
        assert body["error"]["request_id"] == limited.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_health_is_not_limited(self):
        limiter = InMemoryRateLimiter(limit=1, window_seconds=60, clock=FakeClock())
        app = create_app(rate_limiter=limiter)
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            statuses = [(await client.get("/health")).status_code for _ in range(3)]

        assert 429 not in statuses
