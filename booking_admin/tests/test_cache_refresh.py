import json
import httpx
import pytest

from booking_admin.services import cache_refresh
from booking_admin.services.cache_refresh import PricingCacheRefresher, PRICING_TABLES_CACHE_KEY
from booking_admin.api import pricing as pricing_api


class FakeRedis:

    def __init__(self, fail: bool = False):
        self.store = {}
        self.fail = fail

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def delete(self, key):
        if self.fail:
            raise ConnectionError("redis went away")
        self.store.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch):
    redis = FakeRedis()
    monkeypatch.setattr(cache_refresh, "get_redis", lambda: redis)
    monkeypatch.setattr(pricing_api, "get_redis", lambda: redis)
    return redis


@pytest.fixture
def downstream(monkeypatch):
    """Routes the refresher's outgoing requests to an in-process handler."""
    calls = []
    status = {"code": 200}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status["code"], json={"ok": status["code"] == 200})

    def client_factory(*args, **kwargs):
        return real_client(*args, transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(cache_refresh.httpx, "AsyncClient", client_factory)
    return calls, status


class TestPricingCacheRefresher:

    @pytest.mark.asyncio
    async def test_nothing_configured(self):
        assert await PricingCacheRefresher().refresh() is True

    @pytest.mark.asyncio
    async def test_drops_local_snapshot(self, fake_redis):
        fake_redis.store[PRICING_TABLES_CACHE_KEY] = b"{}"
        assert await PricingCacheRefresher().refresh() is True
        assert PRICING_TABLES_CACHE_KEY not in fake_redis.store

    @pytest.mark.asyncio
    async def test_redis_failure_reported(self, fake_redis):
        fake_redis.fail = True
        assert await PricingCacheRefresher().refresh() is False

    @pytest.mark.asyncio
    async def test_forwards_caller_token(self, downstream):
        calls, _ = downstream
        refresher = PricingCacheRefresher(url="http://refresh.test/refresh", auth_token="abc123")

        assert await refresher.refresh() is True
        assert len(calls) == 1
        assert calls[0].method == "POST"
        assert calls[0].headers["authorization"] == "Bearer abc123"

    @pytest.mark.asyncio
    async def test_retries_then_gives_up(self, downstream, monkeypatch):
        calls, status = downstream
        status["code"] = 503

        async def no_sleep(_):
            return None

        monkeypatch.setattr(cache_refresh.asyncio, "sleep", no_sleep)
        refresher = PricingCacheRefresher(url="http://refresh.test/refresh", retries=3)

        assert await refresher.refresh() is False
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self):
        refresher = PricingCacheRefresher(url="http://127.0.0.1:9/refresh", timeout=1.0, retries=1)
        assert await refresher.refresh() is False


class TestPricingTablesCache:

    @pytest.mark.asyncio
    async def test_tables_cached_after_first_read(self, test_client, admin_headers, pricing_seed, fake_redis):
        response = await test_client.get("/pricing", headers=admin_headers)
        assert response.status_code == 200

        cached = json.loads(fake_redis.store[PRICING_TABLES_CACHE_KEY])
        assert cached == response.json()

    @pytest.mark.asyncio
    async def test_cached_tables_served(self, test_client, admin_headers, fake_redis):
        fake_redis.store[PRICING_TABLES_CACHE_KEY] = json.dumps({
            "vehiclePrices": [{"id": "v1", "vehicle_type": "cached", "base_price_per_km": 9.99}],
            "zoneMultipliers": [],
            "fixedRoutes": [],
        })

        response = await test_client.get("/pricing", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["vehiclePrices"][0]["vehicle_type"] == "cached"
