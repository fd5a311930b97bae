import json

import pytest
import redis

import flashdeck.storage.text_store as ts_mod
from flashdeck.storage import TextStore, TextStoreError


def test_in_memory_store_and_retrieve(fake_clock):
    store = TextStore(clock=fake_clock)
    assert store.backend == 'memory'
    token = store.store('lecture text')
    assert store.retrieve(token) == 'lecture text'
    assert store.retrieve('unknown-token') is None
    assert store.retrieve('') is None


def test_blank_text_rejected():
    with pytest.raises(TextStoreError):
        TextStore().store('   ')


def test_idle_entries_expire(fake_clock):
    store = TextStore(ttl=1800, sliding_ttl=600, clock=fake_clock)
    token = store.store('slides')
    fake_clock.advance(601)
    assert store.retrieve(token) is None
    # expired entries are gone for good
    fake_clock.advance(-601)
    assert store.retrieve(token) is None


def test_access_extends_until_absolute_deadline(fake_clock):
    store = TextStore(ttl=1800, sliding_ttl=600, clock=fake_clock)
    token = store.store('slides')
    for _ in range(3):
        fake_clock.advance(500)
        assert store.retrieve(token) == 'slides'
    fake_clock.advance(299)
    assert store.retrieve(token) == 'slides'
    fake_clock.advance(1)
    assert store.retrieve(token) is None


def test_delete(fake_clock):
    store = TextStore(clock=fake_clock)
    token = store.store('text')
    store.delete(token)
    assert store.retrieve(token) is None


def test_redis_backend(mock_redis_client, fake_clock):
    store = TextStore(ttl=1800, sliding_ttl=600, clock=fake_clock)
    assert store.backend == 'redis'
    token = store.store('from redis')
    key = f'text:{token}'
    assert json.loads(mock_redis_client.store[key])['text'] == 'from redis'
    assert mock_redis_client.expirations[key] == 600

    fake_clock.advance(1500)
    assert store.retrieve(token) == 'from redis'
    # sliding window is clipped to what remains of the absolute lifetime
    assert mock_redis_client.expirations[key] == 300

    fake_clock.advance(300)
    assert store.retrieve(token) is None
    assert key not in mock_redis_client.store


def test_falls_back_to_memory_when_redis_down(monkeypatch):
    class DownRedis:
        def __init__(self, *a, **k):
            pass

        def ping(self):
            raise redis.ConnectionError('connection refused')

    monkeypatch.setattr(ts_mod, 'REDIS_CACHE_ENABLED', True)
    monkeypatch.setattr(ts_mod.redis, 'Redis', DownRedis)
    store = TextStore()
    assert store.backend == 'memory'
    token = store.store('still works')
    assert store.retrieve(token) == 'still works'


def test_singleton():
    assert TextStore.get_instance() is TextStore.get_instance()


def test_store_evicts_expired_entries(fake_clock):
    store = TextStore(ttl=1800, sliding_ttl=600, clock=fake_clock)
    stale = [store.store(f'lecture {i}') for i in range(1000)]
    fake_clock.advance(300)
    fresh = store.store('still idle-valid')
    fake_clock.advance(4000)
    latest = store.store('latest upload')
    assert list(store._in_memory) == [latest]
    assert store.retrieve(stale[0]) is None
    assert store.retrieve(fresh) is None
    assert store.retrieve(latest) == 'latest upload'


def test_store_keeps_live_entries(fake_clock):
    store = TextStore(ttl=1800, sliding_ttl=600, clock=fake_clock)
    first = store.store('first')
    fake_clock.advance(599)
    second = store.store('second')
    assert set(store._in_memory) == {first, second}
