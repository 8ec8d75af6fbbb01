# ==============================================================================
# Valkey Cache Implementation
# ==============================================================================
"""
Valkey/Redis implementation of the Cache interface.

Computed funnel reports are stored as JSON strings under keys of the form
``funnel:report:<tenant>:<window>:<granularity>:<filter>:<limit>``, so all
reports of one tenant can be dropped with a single pattern delete.
"""

import json
import logging

import redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from funnelcore.base import Cache
from funnelcore.utils.config import get_settings
from funnelcore.utils.retry import VALKEY_RETRIES

logger = logging.getLogger(__name__)

# Keys removed per DEL call when invalidating a tenant
DELETE_BATCH_SIZE = 500


def _build_client(
    url: str, socket_timeout: int, retries: int, health_check_interval: int
) -> redis.Redis:
    return redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
        retry=Retry(ExponentialBackoff(cap=32, base=1), retries=retries),
        retry_on_error=[RedisTimeoutError, RedisConnectionError],
        health_check_interval=health_check_interval,
    )


class ValkeyCache(Cache):
    """
    Report cache backed by Valkey.

    Args:
        url: Connection URL. If None, uses settings.
        socket_timeout: Connect and read timeout in seconds
        retries: Client-level retries on timeouts and dropped connections
            (default: VALKEY_RETRIES)
        health_check_interval: Seconds between connection health checks
        client: Pre-built client, used as is (tests pass a fakeredis instance)
    """

    def __init__(
        self,
        url: str | None = None,
        socket_timeout: int = 10,
        retries: int | None = None,
        health_check_interval: int = 30,
        client: redis.Redis | None = None,
    ):
        self._url = url
        if client is None:
            self._url = url or get_settings().valkey.url
            client = _build_client(
                self._url,
                socket_timeout,
                VALKEY_RETRIES if retries is None else retries,
                health_check_interval,
            )
        self._client = client

    @property
    def client(self) -> redis.Redis:
        """The underlying client."""
        return self._client

    def get(self, key: str) -> dict | None:
        """Return the stored payload, or None when absent or not valid JSON."""
        raw = self._client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable cache entry %s", key)
            return None

    def set(self, key: str, value: dict, ttl_seconds: int | None = None) -> None:
        payload = json.dumps(value)
        if ttl_seconds is None:
            self._client.set(key, payload)
        else:
            self._client.setex(key, ttl_seconds, payload)

    def delete(self, key: str) -> bool:
        return self._client.delete(key) > 0

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob pattern.

        Keys are collected with SCAN and removed in DEL batches of
        DELETE_BATCH_SIZE.
        """
        deleted = 0
        batch: list[str] = []
        for key in self._client.scan_iter(match=pattern, count=DELETE_BATCH_SIZE):
            batch.append(key)
            if len(batch) >= DELETE_BATCH_SIZE:
                deleted += self._client.delete(*batch)
                batch = []
        if batch:
            deleted += self._client.delete(*batch)
        logger.debug("Deleted %d cache keys matching %s", deleted, pattern)
        return deleted

    def ping(self) -> bool:
        """True if Valkey answers a PING."""
        try:
            return bool(self._client.ping())
        except RedisError as e:
            logger.debug("Valkey ping failed: %s", e)
            return False

    def close(self) -> None:
        self._client.close()


def get_valkey_cache() -> ValkeyCache:
    """Build a ValkeyCache from settings."""
    return ValkeyCache()
