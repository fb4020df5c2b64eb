from starlette.requests import Request

from content.dedup import RecentHitCache, client_address


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _request(headers=None, client=("10.0.0.1", 1234)):
    scope = {
        "type": "http",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_second_like_is_denied_for_same_key():
    cache = RecentHitCache(None)
    key = RecentHitCache.key("1.2.3.4", "content-1")

    assert cache.allows(key)
    cache.record(key)
    assert not cache.allows(key)
    assert cache.allows(RecentHitCache.key("1.2.3.4", "content-2"))
    assert cache.allows(RecentHitCache.key("5.6.7.8", "content-1"))


def test_cold_cache_allows_again():
    cache = RecentHitCache(None)
    key = RecentHitCache.key("1.2.3.4", "content-1")
    cache.record(key)
    cache.clear()
    assert cache.allows(key)


def test_view_window_expires():
    clock = FakeClock()
    cache = RecentHitCache(300, 600, clock=clock)
    key = RecentHitCache.key("1.2.3.4", "content-1")
    cache.record(key)

    clock.now += 299
    assert not cache.allows(key)
    clock.now += 1
    assert cache.allows(key)


def test_stale_entries_are_evicted_on_record():
    clock = FakeClock()
    cache = RecentHitCache(300, 600, clock=clock)
    cache.record("a-1")
    clock.now += 601
    cache.record("b-1")
    assert len(cache) == 1


def test_client_address_prefers_first_forwarded_hop():
    request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2", "X-Real-IP": "10.0.0.3"})
    assert client_address(request) == "203.0.113.7"


def test_client_address_fallbacks():
    assert client_address(_request({"X-Real-IP": "10.0.0.3"})) == "10.0.0.3"
    assert client_address(_request({"CF-Connecting-IP": "10.0.0.4"})) == "10.0.0.4"
    assert client_address(_request()) == "10.0.0.1"
    assert client_address(_request(client=None)) == "unknown"
