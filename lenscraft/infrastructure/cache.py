import json
from typing import Any, Optional

import redis
import structlog

from ..config import settings

logger = structlog.get_logger()

APPROVED_CLASSES_KEY = "classes:approved"
POPULAR_CLASSES_KEY = "classes:popular:{limit}"
CATALOG_PATTERN = "classes:*"

_redis_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client


def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


def get_cache(key: str) -> Optional[Any]:
    """Cached JSON value or None; Redis being down counts as a miss."""
    try:
        value = get_redis().get(key)
        if value:
            return json.loads(value)
    except Exception as e:
        logger.warning("cache_unavailable", op="get", key=key, error=str(e))
    return None


def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    try:
        get_redis().setex(key, ttl or settings.CACHE_TTL, json.dumps(value, ensure_ascii=False))
        return True
    except Exception as e:
        logger.warning("cache_unavailable", op="set", key=key, error=str(e))
        return False


def delete_cache_pattern(pattern: str) -> int:
    try:
        client = get_redis()
        keys = client.keys(pattern)
        if keys:
            return client.delete(*keys)
        return 0
    except Exception as e:
        logger.warning("cache_unavailable", op="delete", key=pattern, error=str(e))
        return 0


def invalidate_catalog() -> int:
    """Drop every cached catalog listing (status or occupancy changed)."""
    return delete_cache_pattern(CATALOG_PATTERN)
