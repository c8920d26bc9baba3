"""
Redis client for the jobs snapshot cache
"""
import enum
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import redis
import structlog

from jobboard.core.config import Settings, settings as default_settings

logger = structlog.get_logger()


class CacheOutcome(str, enum.Enum):
    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


@dataclass
class SnapshotLookup:
    """Result of reading the jobs snapshot"""

    outcome: CacheOutcome
    records: List[Dict[str, Any]] = field(default_factory=list)
    reason: Optional[str] = None


class JobCache:
    """
    Lazily connected Redis client holding the jobs snapshot.

    The client is created on first use and reused for the life of the
    process. Concurrent first calls may each build a client; the last one
    wins and the others are garbage collected.
    """

    def __init__(
        self,
        url: str,
        key: str = "jobs_data",
        password: Optional[str] = None,
        timeout: float = 2.0,
        client: Optional[redis.Redis] = None,
    ):
        self.url = url
        self.key = key
        self.password = password
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "JobCache":
        config = config or default_settings
        return cls(
            config.redis_url,
            key=config.JOBS_CACHE_KEY,
            password=config.REDIS_PASSWORD,
            timeout=config.CACHE_TIMEOUT_SECONDS,
        )

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            client = redis.from_url(
                self.url,
                password=self.password or None,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=self.timeout,
                socket_timeout=self.timeout,
                health_check_interval=30,
            )
            client.ping()
            self._client = client
            logger.info("jobs_cache_connected")
        return self._client

    def fetch_snapshot(self) -> SnapshotLookup:
        """Read and decode the snapshot; never raises"""
        try:
            raw = self.client.get(self.key)
        except redis.RedisError as e:
            return SnapshotLookup(CacheOutcome.ERROR, reason=f"redis: {e}")

        if not raw:
            return SnapshotLookup(CacheOutcome.MISS)

        try:
            records = json.loads(raw)
        except (ValueError, RecursionError) as e:
            return SnapshotLookup(CacheOutcome.ERROR, reason=f"decode: {e}")

        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            return SnapshotLookup(CacheOutcome.ERROR, reason="snapshot is not a list of objects")

        return SnapshotLookup(CacheOutcome.HIT, records=records)

    def delete_snapshot(self) -> bool:
        """Drop the snapshot so reads go to the database"""
        return bool(self.client.delete(self.key))

    def close(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            except redis.RedisError as e:
                logger.warning("jobs_cache_close_failed", error=str(e))
            self._client = None
