from app.core import cache as cache_module
from app.core.cache import RedisCache, _InMemoryCache


class _Clock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_in_memory_cache_expires_after_ttl(monkeypatch):
    clock = _Clock()
    monkeypatch.setattr(cache_module.time, "monotonic", clock)
    store = _InMemoryCache()

    store.set("schedule:u1", {"timezone": "UTC"}, ex=60)
    clock.now += 59
    assert store.get("schedule:u1") == {"timezone": "UTC"}

    clock.now += 1
    assert store.get("schedule:u1") is None


def test_in_memory_cache_without_ttl_keeps_values(monkeypatch):
    clock = _Clock()
    monkeypatch.setattr(cache_module.time, "monotonic", clock)
    store = _InMemoryCache()

    store.set("schedule:u1", {"timezone": "UTC"})
    clock.now += 10_000

    assert store.get("schedule:u1") == {"timezone": "UTC"}


def test_fallback_cache_applies_default_ttl(monkeypatch):
    clock = _Clock()
    monkeypatch.setattr(cache_module.time, "monotonic", clock)
    cache = RedisCache(default_ttl=300)

    cache.set("schedule:u1", {"timezone": "Europe/Berlin"})
    assert cache.get("schedule:u1") == {"timezone": "Europe/Berlin"}

    clock.now += 300
    assert cache.get("schedule:u1") is None
