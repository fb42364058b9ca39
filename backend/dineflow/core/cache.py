"""
Process-scoped read cache with TTL and prefix invalidation.

Used to dedupe hot reads (user records during authentication, business
documents, menu listings). Not correctness-critical: every write path
invalidates the keys it affects.
"""
from datetime import datetime, timedelta
from typing import Any, Optional
import logging

from dineflow.core.config import settings

logger = logging.getLogger(__name__)


class SimpleCache:
    """In-memory cache with TTL support and size limit."""

    MAX_ENTRIES = 10000

    def __init__(self, default_ttl_seconds: int = 300):
        self.default_ttl_seconds = default_ttl_seconds
        self._cache: dict = {}
        self._expiry: dict = {}
        self._hits = 0
        self._misses = 0

    def _evict_expired(self):
        now = datetime.now()
        expired = [k for k, exp in self._expiry.items() if exp <= now]
        for k in expired:
            self._cache.pop(k, None)
            self._expiry.pop(k, None)

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired. Expired entries are dropped on read."""
        if key in self._cache:
            if datetime.now() < self._expiry.get(key, datetime.min):
                self._hits += 1
                return self._cache[key]
            del self._cache[key]
            del self._expiry[key]
        self._misses += 1
        return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None):
        """Set value in cache with TTL."""
        if ttl_seconds is None:
            ttl_seconds = self.default_ttl_seconds
        if len(self._cache) >= self.MAX_ENTRIES:
            self._evict_expired()
        if len(self._cache) >= self.MAX_ENTRIES:
            oldest_keys = sorted(self._expiry, key=self._expiry.get)[:100]
            for k in oldest_keys:
                self._cache.pop(k, None)
                self._expiry.pop(k, None)
        self._cache[key] = value
        self._expiry[key] = datetime.now() + timedelta(seconds=ttl_seconds)

    def delete(self, key: str):
        """Invalidate a single key."""
        self._cache.pop(key, None)
        self._expiry.pop(key, None)

    def clear_prefix(self, prefix: str):
        """Invalidate all keys with the given prefix."""
        keys_to_delete = [k for k in self._cache.keys() if k.startswith(prefix)]
        for key in keys_to_delete:
            self.delete(key)
        if keys_to_delete:
            logger.debug(f"Cache invalidated {len(keys_to_delete)} keys under '{prefix}'")

    def clear(self):
        """Clear entire cache."""
        self._cache.clear()
        self._expiry.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict:
        """Get cache statistics."""
        now = datetime.now()
        valid = sum(1 for exp in self._expiry.values() if exp > now)
        return {
            "total_keys": len(self._cache),
            "valid_keys": valid,
            "expired_keys": len(self._cache) - valid,
            "hits": self._hits,
            "misses": self._misses,
        }


cache = SimpleCache(default_ttl_seconds=settings.cache_ttl_seconds)


def invalidate_cache(prefix: str):
    """Invalidate all cache entries with given prefix."""
    cache.clear_prefix(prefix)


class CacheKeys:
    """Key builders shared by readers and the writers that invalidate them."""

    @staticmethod
    def document(collection: str, doc_id) -> str:
        return f"doc:{collection}/{doc_id}"

    @staticmethod
    def user(user_id) -> str:
        return CacheKeys.document("users", user_id)

    @staticmethod
    def business(business_id) -> str:
        return CacheKeys.document("businesses", business_id)

    @staticmethod
    def menu(business_id) -> str:
        return f"menu:{business_id}"
