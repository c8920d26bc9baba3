"""
Drop the cached jobs snapshot so the API serves from the database
"""
import redis
import structlog

from jobboard.core.logging_config import configure_logging
from jobboard.core.redis_client import JobCache

logger = structlog.get_logger()


def clear_jobs_cache(cache: JobCache) -> bool:
    """Delete the snapshot key; returns True when a key was removed"""
    try:
        deleted = cache.delete_snapshot()
    except redis.RedisError as e:
        logger.error("cache_clear_failed", key=cache.key, error=str(e))
        print(f"❌ Error clearing cache: {e}")
        return False

    if deleted:
        logger.info("cache_cleared", key=cache.key)
        print(f"✅ Cleared {cache.key}")
    else:
        logger.info("no_cache_keys_found", key=cache.key)
        print("ℹ️  No snapshot found")
    return deleted


if __name__ == "__main__":
    configure_logging()
    job_cache = JobCache.from_settings()
    try:
        clear_jobs_cache(job_cache)
    finally:
        job_cache.close()
