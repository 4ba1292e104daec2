import fnmatch
import json
import logging
import time
from urllib.parse import quote

import redis.asyncio as redis

from newsdesk.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

KEY_SEPARATOR = ":"


def _encode_part(part) -> str:
    # bool before int: bool is an int subclass.
    if part is None:
        return "n."
    if isinstance(part, bool):
        return "b." + ("1" if part else "0")
    if isinstance(part, int):
        return f"i.{part}"
    if isinstance(part, float):
        return f"f.{part!r}"
    if isinstance(part, str):
        # Escapes the separator and every glob metacharacter.
        return "s." + quote(part, safe="")
    raise TypeError(f"Unsupported cache key part: {type(part).__name__}")


def make_key(*parts) -> str:
    """
    Derive a cache key from an ordered tuple of scalars.

    Every part carries a type tag, so ``make_key(1, 10)`` ("i.1:i.10") and
    ``make_key("1", 1, 10)`` ("s.1:i.1:i.10") can never collide, and a
    string part can never smuggle in a separator or glob character.
    """
    return KEY_SEPARATOR.join(_encode_part(part) for part in parts)


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryCacheBackend:
    """
    In-process backend for single-worker deployments and tests.

    Values are kept as serialised strings, exactly as Redis would hold
    them, so callers never share mutable state with the cache.
    """

    def __init__(self) -> None:
        self._values: dict[str, tuple[float | None, str]] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        expire, value = entry
        if expire is not None and expire < time.monotonic():
            del self._values[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        expire = time.monotonic() + ttl if ttl else None
        self._values[key] = (expire, value)

    async def delete_pattern(self, pattern: str) -> int:
        keys = [key for key in self._values if fnmatch.fnmatchcase(key, pattern)]
        for key in keys:
            del self._values[key]
        return len(keys)

    async def close(self) -> None:
        self._values.clear()


class RedisCacheBackend:
    def __init__(self, url: str) -> None:
        self.url = url
        self._redis = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )

    async def ping(self) -> bool:
        return await self._redis.ping()

    async def get(self, key: str) -> str | None:
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        await self._redis.set(key, value, ex=ttl)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        keys: list[str] = []
        async for key in self._redis.scan_iter(match=pattern):
            keys.append(key)
        if keys:
            await self._redis.delete(*keys)
        return len(keys)

    async def close(self) -> None:
        await self._redis.aclose()


def create_backend(name: str):
    if name == "memory":
        return MemoryCacheBackend()
    if name == "redis":
        return RedisCacheBackend(settings.REDIS_URL)
    raise ValueError(f"Unknown CACHE_BACKEND: {name!r}")


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------

class CacheManager:
    """
    Namespaced read-through cache for news documents.

    Entries are addressed by ``(namespace, key)`` where *key* comes from
    ``make_key``.  A value is either a single JSON object or an ordered
    JSON array; ``get_single`` and ``get_collection`` only return the
    shape they were asked for.

    All public methods are safe to call even when the backend is
    unavailable: reads return None and writes are skipped, so a cache
    outage degrades to uncached reads instead of failed requests.
    """

    def __init__(self, backend=None) -> None:
        self._backend = backend
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Create the configured backend.  Called once at application startup."""
        self._backend = create_backend(settings.CACHE_BACKEND)
        # Ping to surface mis-configuration early (non-fatal).
        try:
            await self._backend.ping()
            logger.info("Cache backend ready: %s", settings.CACHE_BACKEND)
        except Exception as exc:  # pragma: no cover
            logger.warning("Cache ping failed, reads will miss: %s", exc)

    async def disconnect(self) -> None:
        """Release the backend.  Called once at application shutdown."""
        if self._backend:
            await self._backend.close()
            self._backend = None

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    @property
    def list_namespace(self) -> str:
        return f"{settings.CACHE_NAMESPACE}:list"

    @property
    def search_namespace(self) -> str:
        return f"{settings.CACHE_NAMESPACE}:search"

    @property
    def detail_namespace(self) -> str:
        return f"{settings.CACHE_NAMESPACE}:detail"

    # ------------------------------------------------------------------
    # Raw operations
    # ------------------------------------------------------------------

    async def get(self, namespace: str, key: str) -> dict | list | None:
        """
        Return the cached value, or None on a miss / error.

        Increments hit/miss counters for observability.
        """
        full_key = f"{namespace}:{key}"
        if not self._backend:
            self._misses += 1
            return None
        try:
            data = await self._backend.get(full_key)
            if data is not None:
                self._hits += 1
                return json.loads(data)
            self._misses += 1
            return None
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", full_key, exc)
            self._misses += 1
            return None

    async def set(self, namespace: str, key: str, value: dict | list, ttl: int | None = None) -> None:
        """Store *value*; failures are logged and never reach the caller."""
        full_key = f"{namespace}:{key}"
        if not self._backend:
            return
        try:
            await self._backend.set(full_key, json.dumps(value, default=str), ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", full_key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        if not self._backend:
            return
        try:
            deleted = await self._backend.delete_pattern(pattern)
            if deleted:
                logger.debug("Cache invalidated %d key(s) matching %r", deleted, pattern)
        except Exception as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Single objects and ordered collections
    # ------------------------------------------------------------------

    async def put_single(self, namespace: str, key: str, value: dict) -> None:
        await self.set(namespace, key, value, ttl=settings.CACHE_TTL)

    async def get_single(self, namespace: str, key: str) -> dict | None:
        value = await self.get(namespace, key)
        return value if isinstance(value, dict) else None

    async def put_collection(self, namespace: str, key: str, values: list) -> None:
        await self.set(namespace, key, list(values), ttl=settings.CACHE_TTL)

    async def get_collection(self, namespace: str, key: str) -> list | None:
        value = await self.get(namespace, key)
        return value if isinstance(value, list) else None

    # ------------------------------------------------------------------
    # Domain-level invalidation helpers
    # ------------------------------------------------------------------

    async def invalidate_news(self, news_id: str | None = None) -> None:
        """
        Purge every list and search page; when *news_id* is given, also
        purge its detail entries for every comment page/limit.
        """
        await self.delete_pattern(f"{self.list_namespace}:*")
        await self.delete_pattern(f"{self.search_namespace}:*")
        if news_id is not None:
            await self.delete_pattern(f"{self.detail_namespace}:{make_key(news_id)}:*")

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Return a snapshot of hit/miss counters for metrics endpoints."""
        total = self._hits + self._misses
        return {
            "backend": type(self._backend).__name__ if self._backend else None,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
