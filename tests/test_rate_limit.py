"""Tests for rate limiting."""

import fakeredis
import pytest
import redis.asyncio as redis
from fastapi.testclient import TestClient

from temperature_service.main import create_app
from temperature_service.rate_limiter import RateLimiter


class FakeLimiter:
    """Allows the first ``max_requests`` calls per client."""

    def __init__(self, scope: str, max_requests: int, retry_after: int = 60):
        self.scope = scope
        self.max_requests = max_requests
        self.window_size = 900
        self.retry_after = retry_after
        self.counts = {}
        self.closed = False

    async def is_allowed(self, client_id: str) -> tuple[bool, int]:
        self.counts[client_id] = self.counts.get(client_id, 0) + 1
        if self.counts[client_id] > self.max_requests:
            return False, self.retry_after
        return True, 0

    async def close(self):
        self.closed = True


def app_with_rules(service, rules):
    return create_app(service=service, rate_limit_enabled=True, rate_limit_rules=rules)


class TestRateLimitMiddleware:
    """Tests for the per-route limits."""

    def test_blocks_after_limit(self, service) -> None:
        api = FakeLimiter("api", 2, retry_after=42)
        with TestClient(app_with_rules(service, [("/api", api)])) as client:
            assert client.get("/api/temperature").status_code == 200
            assert client.get("/api/temperature").status_code == 200
            response = client.get("/api/temperature")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "42"
        assert response.json()["retry_after"] == 42

    def test_adds_limit_headers(self, service) -> None:
        with TestClient(app_with_rules(service, [("/api", FakeLimiter("api", 100))])) as client:
            response = client.get("/api/docs")

        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Window"] == "900"

    def test_search_has_its_own_stricter_limit(self, service) -> None:
        api = FakeLimiter("api", 100)
        search = FakeLimiter("search", 1)
        rules = [("/api", api), ("/api/search", search)]

        with TestClient(app_with_rules(service, rules)) as client:
            assert client.get("/api/search", params={"q": "Paris"}).status_code == 200
            assert client.get("/api/search", params={"q": "Paris"}).status_code == 429
            assert client.get("/api/temperature").status_code == 200

    def test_non_api_paths_are_not_limited(self, service) -> None:
        api = FakeLimiter("api", 0)
        with TestClient(app_with_rules(service, [("/api", api)])) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/").status_code == 200

        assert api.counts == {}

    def test_rejection_carries_cors_headers(self, service) -> None:
        api = FakeLimiter("api", 0)
        with TestClient(app_with_rules(service, [("/api", api)])) as client:
            response = client.get("/api/temperature", headers={"Origin": "http://example.com"})

        assert response.status_code == 429
        assert "access-control-allow-origin" in response.headers

    def test_shutdown_closes_limiters(self, service) -> None:
        api = FakeLimiter("api", 100)
        search = FakeLimiter("search", 30)
        with TestClient(app_with_rules(service, [("/api", api), ("/api/search", search)])):
            pass

        assert api.closed
        assert search.closed


class TestRateLimiter:
    """Tests for the Redis-backed limiter."""

    async def test_allows_when_redis_unavailable(self) -> None:
        client = redis.from_url("redis://127.0.0.1:1", socket_connect_timeout=0.5)
        limiter = RateLimiter("api", 1, window_seconds=60, redis_client=client)

        assert await limiter.is_allowed("127.0.0.1") == (True, 0)
        await limiter.close()

    def test_retry_after_from_oldest_request(self) -> None:
        limiter = RateLimiter("api", 1, window_seconds=60, redis_client=redis.Redis())
        oldest = [(b"1", 1000 * 1000000)]

        assert limiter._retry_after(oldest, current_time=1030.0) == 30
        assert limiter._retry_after(oldest, current_time=1060.5) == 1
        assert limiter._retry_after([], current_time=1030.0) == 60


class FakeTime:
    """Controllable Unix time source."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def redis_client():
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


class TestRateLimiterWindow:
    """Tests for the sliding window kept in Redis."""

    async def test_allows_up_to_max_then_blocks(self, redis_client, fake_time) -> None:
        limiter = RateLimiter("api", 2, window_seconds=60, redis_client=redis_client, time_func=fake_time)

        assert await limiter.is_allowed("10.0.0.1") == (True, 0)
        fake_time.now += 1
        assert await limiter.is_allowed("10.0.0.1") == (True, 0)
        fake_time.now += 1
        assert await limiter.is_allowed("10.0.0.1") == (False, 58)

    async def test_allowed_again_after_retry_after(self, redis_client, fake_time) -> None:
        limiter = RateLimiter("api", 2, window_seconds=60, redis_client=redis_client, time_func=fake_time)
        await limiter.is_allowed("10.0.0.1")
        fake_time.now = 1001.0
        await limiter.is_allowed("10.0.0.1")

        # Retrying while blocked does not extend the block
        for now in (1011.0, 1021.0, 1031.0, 1041.0, 1051.0):
            fake_time.now = now
            assert await limiter.is_allowed("10.0.0.1") == (False, int(1060 - now))

        fake_time.now = 1060.0
        assert await limiter.is_allowed("10.0.0.1") == (True, 0)

    async def test_rejected_requests_are_not_recorded(self, redis_client, fake_time) -> None:
        limiter = RateLimiter("api", 1, window_seconds=60, redis_client=redis_client, time_func=fake_time)
        await limiter.is_allowed("10.0.0.1")
        for _ in range(3):
            fake_time.now += 5
            await limiter.is_allowed("10.0.0.1")

        assert await redis_client.zcard(f"{limiter.key_prefix}:10.0.0.1") == 1

    async def test_clients_are_counted_separately(self, redis_client, fake_time) -> None:
        limiter = RateLimiter("api", 1, window_seconds=60, redis_client=redis_client, time_func=fake_time)

        assert (await limiter.is_allowed("10.0.0.1"))[0] is True
        assert (await limiter.is_allowed("10.0.0.1"))[0] is False
        assert (await limiter.is_allowed("10.0.0.2"))[0] is True

    async def test_scopes_are_counted_separately(self, redis_client, fake_time) -> None:
        api = RateLimiter("api", 1, window_seconds=60, redis_client=redis_client, time_func=fake_time)
        search = RateLimiter("search", 1, window_seconds=60, redis_client=redis_client, time_func=fake_time)

        assert (await api.is_allowed("10.0.0.1"))[0] is True
        assert (await api.is_allowed("10.0.0.1"))[0] is False
        assert (await search.is_allowed("10.0.0.1"))[0] is True

    async def test_key_expires_with_window(self, redis_client, fake_time) -> None:
        limiter = RateLimiter("api", 5, window_seconds=90, redis_client=redis_client, time_func=fake_time)
        await limiter.is_allowed("10.0.0.1")

        assert await redis_client.ttl(f"{limiter.key_prefix}:10.0.0.1") == 90
