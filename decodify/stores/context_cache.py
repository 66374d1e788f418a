"""In-memory cache for derived per-project artifacts."""

from __future__ import annotations

import threading
from typing import Callable, Generic, Hashable, Optional, TypeVar

from cachetools import TTLCache

from ..config import CacheConfig

T = TypeVar("T")


class ContextCache(Generic[T]):
    """Bounded, expiring cache of values built on demand for a key."""

    def __init__(self, max_entries: int = 32, ttl_seconds: float = 3600.0) -> None:
        self._cache: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl_seconds)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: CacheConfig) -> "ContextCache[T]":
        return cls(max_entries=config.max_projects, ttl_seconds=config.ttl_seconds)

    def get(self, key: Hashable) -> Optional[T]:
        with self._lock:
            return self._cache.get(key)

    def get_or_build(self, key: Hashable, builder: Callable[[], T]) -> T:
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached
        value = builder()
        with self._lock:
            self._cache[key] = value
        return value

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache


__all__ = ["ContextCache"]
