import redis
import json
import logging
import os
from typing import Optional, Any, Callable

logger = logging.getLogger(__name__)

# Redis configuration
REDIS_HOST = os.getenv('REDIS_HOST', 'localhost')
REDIS_PORT = int(os.getenv('REDIS_PORT', 6379))
REDIS_DB = int(os.getenv('REDIS_DB', 0))
REDIS_PASSWORD = os.getenv('REDIS_PASSWORD', None)

# Cache TTL settings (in seconds)
CACHE_TTL_SHORT = 300  # 5 minutes
CACHE_TTL_MEDIUM = 600  # 10 minutes

# Initialize Redis client
try:
    redis_client = redis.Redis(
        host=REDIS_HOST,
        port=REDIS_PORT,
        db=REDIS_DB,
        password=REDIS_PASSWORD,
        decode_responses=True,
        socket_connect_timeout=5
    )
    # Test connection
    redis_client.ping()
    logger.info(f"Redis connected successfully at {REDIS_HOST}:{REDIS_PORT}")
except Exception as e:
    logger.warning(f"Redis connection failed: {str(e)}. Caching will be disabled.")
    redis_client = None


class CacheManager:
    """
    Read-through cache in front of the relationship tables.

    The database is the only source of truth; cached entries are derived
    views that are dropped whenever an edge touching the user changes.
    """

    @staticmethod
    def is_available() -> bool:
        """Check if Redis is available"""
        return redis_client is not None

    @staticmethod
    def get(key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/error
        """
        if not CacheManager.is_available():
            return None

        try:
            value = redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Cache get error for key '{key}': {str(e)}")
            return None

    @staticmethod
    def set(key: str, value: Any, ttl: int = CACHE_TTL_MEDIUM) -> bool:
        """
        Set value in cache with TTL

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        if not CacheManager.is_available():
            return False

        try:
            redis_client.setex(
                key,
                ttl,
                json.dumps(value, default=str)  # default=str handles datetime, etc.
            )
            logger.debug(f"Cached key '{key}' with TTL {ttl}s")
            return True
        except Exception as e:
            logger.error(f"Cache set error for key '{key}': {str(e)}")
            return False

    @staticmethod
    def get_or_load(key: str, loader: Callable[[], Any], ttl: int = CACHE_TTL_SHORT) -> Any:
        """Return the cached value for key, loading and caching it on a miss"""
        cached_value = CacheManager.get(key)
        if cached_value is not None:
            logger.debug(f"Cache HIT for '{key}'")
            return cached_value

        value = loader()
        CacheManager.set(key, value, ttl)
        return value

    @staticmethod
    def delete_pattern(pattern: str) -> int:
        """
        Delete all keys matching a pattern

        Args:
            pattern: Pattern to match (e.g., 'graph:123:*')

        Returns:
            Number of keys deleted
        """
        if not CacheManager.is_available():
            return 0

        try:
            keys = list(redis_client.scan_iter(match=pattern))
            if keys:
                deleted = redis_client.delete(*keys)
                logger.debug(f"Deleted {deleted} cache keys matching '{pattern}'")
                return deleted
            return 0
        except Exception as e:
            logger.error(f"Cache delete pattern error for '{pattern}': {str(e)}")
            return 0

    @staticmethod
    def invalidate_user_cache(user_id: str):
        """
        Invalidate all cache entries for a specific user

        Args:
            user_id: User ID
        """
        patterns = [
            f"graph:{user_id}:*",
            f"user:stats:{user_id}",
        ]

        for pattern in patterns:
            CacheManager.delete_pattern(pattern)

        logger.debug(f"Invalidated cache for user {user_id}")


# Cache key builders
def build_relationship_cache_key(user_id: str, relation: str) -> str:
    """Build cache key for a relationship list (followers, following, liked, liked_by)"""
    return f"graph:{user_id}:{relation}"


def build_user_stats_cache_key(user_id: str) -> str:
    """Build cache key for user stats"""
    return f"user:stats:{user_id}"
