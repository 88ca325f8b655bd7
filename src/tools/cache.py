import logging
from typing import Callable, Union

from cachetools import TTLCache, cached

import configs

_cached_funcs: list[Callable] = []
log = logging.getLogger(__name__)


def ttl_cache(maxsize: Union[int, Callable] = 100, ttl: Union[int, float] = configs.CACHE_TTL):
    """TTL cache decorator with hit/miss counters, registered for global clear"""
    if callable(maxsize):
        # ttl_cache was applied directly
        return ttl_cache()(maxsize)

    def decorator(func: Callable) -> Callable:
        wrapper = cached(TTLCache(maxsize, ttl), info=True)(func)
        wrapper.ttl = ttl
        _cached_funcs.append(wrapper)
        return wrapper
    return decorator


def clear_caches(ttl_threshold: float = None):
    """Clear caches with ttl up to `ttl_threshold`, or all caches if None. Resets counters."""
    cleared = [
        func for func in _cached_funcs
        if ttl_threshold is None or func.ttl <= ttl_threshold
    ]
    for func in cleared:
        func.cache_clear()
    log.debug(f'Cleared {len(cleared)} caches')


def get_stats() -> dict[str, dict[str, int]]:
    """Hits, misses and size of each cache since it was last cleared"""
    return {
        f'{func.__module__}.{func.__qualname__}': func.cache_info()._asdict()
        for func in _cached_funcs
    }
