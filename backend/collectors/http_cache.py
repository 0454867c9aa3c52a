"""Shared JSON GET helper with an in-memory TTL cache.

Upstream data moves slowly (reports are fortnightly), so every successful
response is reused for CACHE_TTL_SECONDS. Stale data only means a stale
report. Failed responses are never cached.
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx

from config import CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30

# url key -> payload, url key -> expiry timestamp
_cache: Dict[str, Any] = {}
_cache_ttl: Dict[str, float] = {}


def _cache_key(url: str, params: Optional[Dict] = None) -> str:
    if not params:
        return url
    query = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return f"{url}?{query}"


def _evict_expired(now: float):
    for key in [k for k, expires in _cache_ttl.items() if expires <= now]:
        _cache.pop(key, None)
        _cache_ttl.pop(key, None)


def clear_cache():
    _cache.clear()
    _cache_ttl.clear()


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[Dict] = None,
    headers: Optional[Dict] = None,
    ttl: float = CACHE_TTL_SECONDS,
) -> Any:
    """GET url and return decoded JSON, or None on a non-200 status.

    Headers are not part of the cache key, so an authenticated and an
    anonymous call for the same query share one entry. Expired entries
    are dropped on lookup and on every insert.
    """
    key = _cache_key(url, params)
    now = time.time()
    if key in _cache:
        if _cache_ttl.get(key, 0) > now:
            return _cache[key]
        _cache.pop(key, None)
        _cache_ttl.pop(key, None)

    resp = await client.get(url, params=params, headers=headers or {}, timeout=REQUEST_TIMEOUT)
    if resp.status_code != 200:
        logger.warning("GET %s returned %s", url, resp.status_code)
        return None

    data = resp.json()
    if ttl > 0:
        _evict_expired(now)
        _cache[key] = data
        _cache_ttl[key] = now + ttl
    return data
