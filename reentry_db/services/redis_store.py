# SPDX-License-Identifier: Apache-2.0

"""
Redis-backed key-value store.

This module adapts the standard redis-py client to the ``KeyValueStore``
port so the comment, activity and thread stores can persist outside the
process.
"""

import os
from typing import Optional

import logging
import redis
from opentelemetry import trace

from .errors import StorageReadError, StorageWriteError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """
    KeyValueStore over a Redis server.

    Values are stored as plain strings with no TTL. Unlike a cache, a
    failed write is an error the caller must see, so ``set`` raises
    instead of returning False.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize the Redis store.

        Args:
            redis_url: Redis connection URL (redis://host:port/db)
            client: Pre-built client, mainly for tests
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")
        self.client = client or redis.from_url(self.redis_url, decode_responses=True)

        logger.info(f"Redis store configured for {self.redis_url}")

    def ping(self) -> bool:
        """
        Test the Redis connection.

        Raises:
            StorageReadError: If Redis does not answer
        """
        try:
            result = self.client.ping()
        except redis.RedisError as e:
            logger.error(f"Redis connection test failed: {str(e)}")
            raise StorageReadError(f"Redis connection failed: {str(e)}") from e

        if not result:
            raise StorageReadError("Redis ping failed")
        return True

    def get(self, key: str) -> Optional[str]:
        """
        Get a value from Redis.

        Args:
            key: Redis key

        Returns:
            Stored string, or None if the key does not exist

        Raises:
            StorageReadError: If Redis cannot be reached
        """
        with tracer.start_as_current_span("redis.get") as span:
            span.set_attribute("redis.key", key)

            try:
                value = self.client.get(key)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis get failed for key {key}: {str(e)}")
                raise StorageReadError(f"Redis get failed for key {key}") from e

            if value is None:
                span.set_attribute("redis.result", "not_found")
                return None

            span.set_attribute("redis.result", "success")
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            return value

    def set(self, key: str, value: str) -> None:
        """
        Set a key-value pair in Redis.

        Args:
            key: Redis key
            value: String to store

        Raises:
            StorageWriteError: If the write does not succeed
        """
        with tracer.start_as_current_span("redis.set") as span:
            span.set_attributes({
                "redis.key": key,
                "redis.value_size": len(value)
            })

            try:
                result = self.client.set(key, value)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis set failed for key {key}: {str(e)}")
                raise StorageWriteError(f"Redis set failed for key {key}") from e

            if not result:
                span.set_attribute("redis.result", "rejected")
                raise StorageWriteError(f"Redis rejected set for key {key}")

            span.set_attribute("redis.result", "success")
