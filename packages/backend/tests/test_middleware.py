"""Tests for HTTP middleware — security headers, request IDs, rate limits.

Learn: Redis is never initialized in tests, so the rate limiter lets
everything through by default. The limiter tests swap in a tiny
in-memory stand-in for the two Redis calls it makes.
"""

import pytest

from hireboard.middleware import rate_limit


class CountingRedis:
    """Just enough of redis.asyncio.Redis for the fixed-window counter."""

    def __init__(self):
        self.counts: dict[str, int] = {}
        self.expiries: dict[str, int] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.expiries[key] = seconds


class OverLimit(dict):
    """Counter store where every key is already far past any limit."""

    def get(self, key, default=None):
        return 10_000


class BrokenRedis:
    async def incr(self, key):
        raise ConnectionError("redis down")


# ═══════════════════════════════════════════════════════════
# Security headers + request id
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    """Health endpoint returns security headers."""
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    assert r.headers["Cross-Origin-Opener-Policy"] == "same-origin"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get("/api/v1/health", headers={"X-Request-ID": custom_id})
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_hsts_on_https(client):
    r = await client.get("https://test/api/v1/health")
    assert r.headers["Strict-Transport-Security"].startswith("max-age=")


# ═══════════════════════════════════════════════════════════
# Rate limiting
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_rate_limit_auth_bucket(client, monkeypatch):
    from hireboard.config import settings

    fake = CountingRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    body = {"email": "nobody@example.com", "password": "password_123"}
    statuses = [
        (await client.post("/api/v1/auth/login", json=body)).status_code
        for _ in range(settings.rate_limit_auth_rpm + 1)
    ]
    assert statuses[:-1] == [401] * settings.rate_limit_auth_rpm
    assert statuses[-1] == 429

    # Other routes use their own bucket
    r = await client.get("/api/v1/jobs")
    assert r.status_code == 200
    assert r.headers["X-RateLimit-Limit"] == str(settings.rate_limit_rpm)


@pytest.mark.asyncio
async def test_rate_limit_429_has_retry_after(client, monkeypatch):
    fake = CountingRedis()
    fake.counts = OverLimit()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    r = await client.get("/api/v1/jobs")
    assert r.status_code == 429
    assert r.headers["Retry-After"] == "60"


@pytest.mark.asyncio
async def test_rate_limit_exempts_health(client, monkeypatch):
    fake = CountingRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)
    await client.get("/api/v1/health")
    assert fake.counts == {}


@pytest.mark.asyncio
async def test_rate_limit_fails_open_on_redis_error(client, monkeypatch):
    monkeypatch.setattr(rate_limit, "get_redis", lambda: BrokenRedis())
    r = await client.get("/api/v1/jobs")
    assert r.status_code == 200
