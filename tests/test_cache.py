from tools import cache, price


def make_counted(func):
    def wrapper(*args):
        wrapper.n_calls += 1
        return func(*args)
    wrapper.n_calls = 0
    return wrapper


def test_ttl_cache_memoizes():
    func = make_counted(lambda x: x * 2)
    cached_func = cache.ttl_cache(maxsize=10, ttl=60)(func)

    assert cached_func(2) == 4
    assert cached_func(2) == 4
    assert func.n_calls == 1


def test_ttl_cache_applied_directly():
    func = make_counted(lambda: 'value')
    cached_func = cache.ttl_cache(func)

    cached_func()
    cached_func()
    assert func.n_calls == 1


def test_clear_caches():
    func = make_counted(lambda x: x)
    cached_func = cache.ttl_cache(maxsize=10, ttl=60)(func)

    cached_func(1)
    cache.clear_caches()
    cached_func(1)
    assert func.n_calls == 2


def test_clear_caches_ttl_threshold():
    short_func = make_counted(lambda x: x)
    long_func = make_counted(lambda x: x)
    short_cached = cache.ttl_cache(maxsize=10, ttl=1)(short_func)
    long_cached = cache.ttl_cache(maxsize=10, ttl=3600)(long_func)

    short_cached(1)
    long_cached(1)
    cache.clear_caches(ttl_threshold=60)
    short_cached(1)
    long_cached(1)

    assert short_func.n_calls == 2
    assert long_func.n_calls == 1


def test_stats_count_hits_and_misses():
    cached_func = cache.ttl_cache(maxsize=10, ttl=60)(lambda x: x)
    cached_func(1)
    cached_func(1)
    cached_func(2)

    stats = cache.get_stats()
    key = f'{cached_func.__module__}.{cached_func.__qualname__}'
    assert stats[key] == {'hits': 1, 'misses': 2, 'maxsize': 10, 'currsize': 2}


def test_clear_caches_resets_stats():
    cached_func = cache.ttl_cache(maxsize=10, ttl=60)(lambda x: x)
    cached_func(1)
    cached_func(1)
    cache.clear_caches()

    info = cached_func.cache_info()
    assert (info.hits, info.misses, info.currsize) == (0, 0, 0)


def test_stats_include_gas_price_cache():
    assert f'{price.__name__}.get_gas_price' in cache.get_stats()
