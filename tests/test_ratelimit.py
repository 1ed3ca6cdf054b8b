import httpx
import pytest

from bookstore.app import create_app
from bookstore.ratelimit import SlidingWindowLimiter


def test_limiter_blocks_after_max_requests(monkeypatch):
    monkeypatch.setattr("time.time", lambda: 100.0)
    limiter = SlidingWindowLimiter(max_requests=2, window_seconds=60)
    assert limiter.allow("client")
    assert limiter.allow("client")
    assert not limiter.allow("client")
    assert limiter.allow("other")


def test_limiter_forgets_requests_outside_window(monkeypatch):
    now = [100.0]
    monkeypatch.setattr("time.time", lambda: now[0])
    limiter = SlidingWindowLimiter(max_requests=1, window_seconds=10)
    assert limiter.allow("client")
    assert not limiter.allow("client")
    now[0] = 111.0
    assert limiter.allow("client")


@pytest.mark.anyio
async def test_rate_limited_requests_get_429(settings, database, anyio_backend):
    app = create_app(settings.model_copy(update={"rate_limit_max_requests": 2}), database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        statuses = [(await client.get("/health")).status_code for _ in range(3)]
        blocked = await client.get("/books")
    assert statuses == [200, 200, 429]
    assert blocked.json() == {"error": {"message": "Rate limit exceeded", "status": 429}}


def test_limiter_drops_idle_clients(monkeypatch):
    now = [100.0]
    monkeypatch.setattr("time.time", lambda: now[0])
    limiter = SlidingWindowLimiter(max_requests=5, window_seconds=10)
    for host in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
        assert limiter.allow(host)
    assert len(limiter.buckets) == 3

    now[0] = 120.0
    assert limiter.allow("10.0.0.4")
    assert list(limiter.buckets) == ["10.0.0.4"]
