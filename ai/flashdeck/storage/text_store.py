"""Short-lived storage for uploaded lecture text, addressed by an opaque token.

Entries expire after an absolute lifetime (default 30 minutes) or after a
sliding idle window (default 10 minutes), whichever comes first. Every
successful retrieval restarts the idle window but never extends past the
absolute deadline.

Redis is used when enabled and reachable; otherwise entries live in process
memory with the same expiry rules.
"""
import os
import json
import time
import uuid
import threading
from typing import Callable, Dict, Any, Optional

import redis

from flashdeck.utils import get_logger

LOG = get_logger()

REDIS_HOST = os.getenv('REDIS_HOST', 'redis')
REDIS_PORT = int(os.getenv('REDIS_PORT', '6379'))
REDIS_PASSWORD = os.getenv('REDIS_PASSWORD') or None
REDIS_CACHE_ENABLED = os.getenv('REDIS_CACHE_ENABLED', 'true').lower() in ('1', 'true', 'yes')
TEXT_STORE_TTL_SECONDS = int(os.getenv('TEXT_STORE_TTL_SECONDS', '1800'))
TEXT_STORE_SLIDING_TTL_SECONDS = int(os.getenv('TEXT_STORE_SLIDING_TTL_SECONDS', '600'))


class TextStoreError(Exception):
    pass


class TextStore:
    _instance = None

    def __init__(self, ttl: int = None, sliding_ttl: int = None, clock: Callable[[], float] = time.time):
        self.ttl = ttl or TEXT_STORE_TTL_SECONDS
        self.sliding_ttl = min(sliding_ttl or TEXT_STORE_SLIDING_TTL_SECONDS, self.ttl)
        self._clock = clock
        self._lock = threading.Lock()
        self._in_memory: Dict[str, Dict[str, Any]] = {}
        self._client = None
        self._use_redis = False
        if not REDIS_CACHE_ENABLED:
            LOG.info('text_store_in_memory', extra={'reason': 'redis disabled'})
            return
        try:
            self._client = redis.Redis(host=REDIS_HOST, port=REDIS_PORT, password=REDIS_PASSWORD, decode_responses=True, socket_connect_timeout=2)
            self._client.ping()
            self._use_redis = True
            LOG.info('text_store_redis_connected', extra={'host': REDIS_HOST, 'port': REDIS_PORT})
        except redis.RedisError as e:
            LOG.warning('text_store_redis_unavailable', extra={'error': str(e)})
            self._client = None

    @classmethod
    def get_instance(cls) -> 'TextStore':
        if cls._instance is None:
            cls._instance = TextStore()
        return cls._instance

    @property
    def backend(self) -> str:
        return 'redis' if self._use_redis else 'memory'

    def _key(self, token: str) -> str:
        return f'text:{token}'

    def _window(self, created_at: float, now: float) -> int:
        """Seconds the entry may still live: idle window capped by the absolute deadline."""
        remaining = created_at + self.ttl - now
        return int(min(self.sliding_ttl, remaining))

    def _evict_expired(self, now: float) -> None:
        """Drop memory entries past their idle window or absolute deadline; caller holds the lock."""
        expired = [
            token for token, entry in self._in_memory.items()
            if now >= entry['expires_at'] or self._window(entry['created_at'], now) <= 0
        ]
        for token in expired:
            del self._in_memory[token]
        if expired:
            LOG.info('text_store_evicted', extra={'count': len(expired)})

    def store(self, text: str) -> str:
        if not text or not text.strip():
            raise TextStoreError('Text content is required')
        token = str(uuid.uuid4())
        now = self._clock()
        entry = {'text': text, 'created_at': now}
        if self._use_redis:
            try:
                self._client.setex(self._key(token), self.sliding_ttl, json.dumps(entry))
            except redis.RedisError as e:
                LOG.exception('text_store_set_failed', extra={'token': token})
                raise TextStoreError(f'Could not store text: {e}') from e
        else:
            with self._lock:
                self._evict_expired(now)
                entry['expires_at'] = now + self.sliding_ttl
                self._in_memory[token] = entry
        LOG.info('text_store_set', extra={'token': token, 'length': len(text), 'backend': self.backend})
        return token

    def retrieve(self, token: str) -> Optional[str]:
        if not token or not token.strip():
            return None
        now = self._clock()
        if self._use_redis:
            return self._retrieve_redis(token, now)
        with self._lock:
            entry = self._in_memory.get(token)
            if entry is None:
                return None
            window = self._window(entry['created_at'], now)
            if now >= entry['expires_at'] or window <= 0:
                self._in_memory.pop(token, None)
                LOG.info('text_store_expired', extra={'token': token})
                return None
            entry['expires_at'] = now + window
            return entry['text']

    def _retrieve_redis(self, token: str, now: float) -> Optional[str]:
        key = self._key(token)
        try:
            raw = self._client.get(key)
            if raw is None:
                return None
            entry = json.loads(raw)
            window = self._window(entry['created_at'], now)
            if window <= 0:
                self._client.delete(key)
                LOG.info('text_store_expired', extra={'token': token})
                return None
            self._client.expire(key, window)
            return entry['text']
        except redis.RedisError as e:
            LOG.exception('text_store_get_failed', extra={'token': token})
            raise TextStoreError(f'Could not retrieve text: {e}') from e

    def delete(self, token: str) -> None:
        if self._use_redis:
            try:
                self._client.delete(self._key(token))
            except redis.RedisError as e:
                LOG.warning('text_store_delete_failed', extra={'token': token, 'error': str(e)})
            return
        with self._lock:
            self._in_memory.pop(token, None)
