"""Shared flask-caching instance backing the memoized inventory snapshot."""
import logging

from flask_caching import Cache

from config import CACHE_KEY_PREFIX, CACHE_TTL_SECONDS, REDIS_URL

logger = logging.getLogger(__name__)

cache = Cache()


def cache_config(redis_url=REDIS_URL, ttl_seconds=CACHE_TTL_SECONDS):
    """Redis when a URL is configured, otherwise an in-process SimpleCache."""
    config = {
        'CACHE_DEFAULT_TIMEOUT': ttl_seconds,
        'CACHE_KEY_PREFIX': CACHE_KEY_PREFIX,
    }
    if redis_url:
        config['CACHE_TYPE'] = 'RedisCache'
        config['CACHE_REDIS_URL'] = redis_url
    else:
        config['CACHE_TYPE'] = 'SimpleCache'
    return config


def init_cache(server, config=None):
    config = config or cache_config()
    cache.init_app(server, config=config)
    logger.info(f"Snapshot cache: {config['CACHE_TYPE']}, ttl {config['CACHE_DEFAULT_TIMEOUT']}s")
    return cache
