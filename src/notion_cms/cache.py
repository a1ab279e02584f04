"""Time-based memoization for fetched content.

Entries expire lazily: nothing sweeps the store in the background, an
expired entry is only dropped when :meth:`TTLCache.get` or
:meth:`TTLCache.has` looks at it. Not thread-safe; callers sharing one
instance across threads must serialize access themselves.
"""

import logging
import time
from typing import Any, Callable, NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300


class _CacheEntry(NamedTuple):
    value: Any
    expiry: float


class TTLCache:
    """In-memory key/value store with per-entry expiry.

    Attributes:
        default_ttl: Lifetime in seconds used when ``set`` gets no override.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            default_ttl: Lifetime in seconds for entries stored without an override.
            clock: Returns the current time in seconds. Injectable for tests.
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds (default_ttl if None)."""
        lifetime = self.default_ttl if ttl is None else ttl
        self._entries[key] = _CacheEntry(value, self._clock() + lifetime)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key``, or ``default``.

        Side effect: an expired entry is deleted.
        """
        entry = self._entries.get(key)
        if entry is None:
            return default

        if self._clock() > entry.expiry:
            logger.debug(f"Cache entry expired: {key}")
            del self._entries[key]
            return default

        return entry.value

    def has(self, key: str) -> bool:
        """Return True if ``key`` holds a live value.

        Side effect: like ``get``, an expired entry is deleted.
        """
        missing = object()
        return self.get(key, missing) is not missing

    def delete(self, key: str) -> None:
        """Remove ``key`` whether or not it is expired."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def keys(self) -> list[str]:
        """Return every stored key, including expired ones not yet evicted."""
        return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self._entries)
