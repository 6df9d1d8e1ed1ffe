"""
Caching Utilities
=================
Process-local memoisation for TMDB lookups.

Features:
- TTL (Time To Live) per decorated function
- LRU eviction once max_size entries are held
- Per-function clearing (keys are prefixed with the function name)

Usage:
    from moodflix.utils.cache import cache, clear_all_cache

    @cache(ttl=300)
    def get_trending(category):
        ...

    get_trending.clear()  # Drop every entry of get_trending
    clear_all_cache()     # Drop everything
"""
from functools import wraps
from typing import Any, Callable, Optional
from collections import OrderedDict
from datetime import datetime, timedelta
from threading import RLock
import hashlib
import json
import logging

logger = logging.getLogger(__name__)


class CacheStore:
    """
    In-memory cache with TTL and LRU eviction.
    Shared by all requests of one worker process; not shared across workers.
    """

    def __init__(self, max_size: int = 1000):
        self._cache: OrderedDict = OrderedDict()
        self._max_size = max_size
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(func_name: str, args: tuple, kwargs: dict) -> str:
        """
        Build a stable key: "<func_name>:<md5 of the JSON encoded arguments>".
        Non JSON values (classes, dates) are encoded with str().
        """
        key_data = {
            'args': args,
            'kwargs': sorted(kwargs.items())
        }
        key_str = json.dumps(key_data, sort_keys=True, default=str)
        return f"{func_name}:{hashlib.md5(key_str.encode()).hexdigest()}"

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            if key not in self._cache:
                self._misses += 1
                return None

            value, expiry = self._cache[key]
            if expiry and datetime.now() > expiry:
                del self._cache[key]
                self._misses += 1
                return None

            self._cache.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store value; ttl=None keeps it until evicted."""
        expiry = datetime.now() + timedelta(seconds=ttl) if ttl else None
        with self._lock:
            self._cache[key] = (value, expiry)
            self._cache.move_to_end(key)

            if len(self._cache) > self._max_size:
                oldest_key, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted cache key: {oldest_key}")

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix, return how many went."""
        with self._lock:
            doomed = [key for key in self._cache if key.startswith(prefix)]
            for key in doomed:
                del self._cache[key]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Cache cleared")

    def get_stats(self) -> dict:
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0

        return {
            'size': len(self._cache),
            'max_size': self._max_size,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': f"{hit_rate:.2f}%"
        }


# Global cache instance
_cache_store = CacheStore(max_size=1000)


def cache(ttl: int = 300):
    """
    Decorator to cache function results for ttl seconds.

    Results equal to None are never cached, so a failed lookup is retried
    on the next call.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = _cache_store.make_key(func.__qualname__, args, kwargs)

            cached_value = _cache_store.get(cache_key)
            if cached_value is not None:
                logger.debug(f"Cache hit for {func.__qualname__}")
                return cached_value

            logger.debug(f"Cache miss for {func.__qualname__}")
            result = func(*args, **kwargs)
            if result is not None:
                _cache_store.set(cache_key, result, ttl)
            return result

        wrapper.clear = lambda: clear_function_cache(func)
        return wrapper

    return decorator


def clear_function_cache(func: Callable) -> None:
    """Clear all cache entries for one function."""
    removed = _cache_store.delete_prefix(f"{func.__qualname__}:")
    logger.debug(f"Cleared {removed} cache entries for {func.__qualname__}")


def clear_all_cache() -> None:
    """Clear all cache entries."""
    _cache_store.clear()


def get_cache_stats() -> dict:
    """Hit/miss statistics of the process cache."""
    return _cache_store.get_stats()


def warm_cache(func: Callable, param_sets: list) -> int:
    """
    Pre-populate cache by calling func for each (args, kwargs) pair.
    Returns the number of calls that succeeded; failures are logged.
    """
    logger.info(f"Warming cache for {func.__qualname__} with {len(param_sets)} entries")

    warmed = 0
    for args, kwargs in param_sets:
        try:
            func(*args, **kwargs)
            warmed += 1
        except Exception as e:
            logger.error(f"Error warming cache for {func.__qualname__}: {str(e)}")

    logger.info(f"Cache warming complete for {func.__qualname__} ({warmed}/{len(param_sets)})")
    return warmed
