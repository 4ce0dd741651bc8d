"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection shared by the mapping store
Interface: connect(), disconnect(), from_config()
Hidden: Redis URL assembly, password handling, client lifetime

Can be replaced with any storage backend without affecting other modules.
"""

import logging
import os
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: str = None, password: Optional[str] = None):
        """Initialize storage with connection URL."""
        self.url = connection_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.password = password
        self._client = None

    @classmethod
    def from_config(cls, config) -> "StorageModule":
        """
        Build storage from a ConfigModule.

        The password is passed separately from the URL to avoid URL encoding
        issues with special characters.
        """
        url = f"redis://{config.get('redis_host')}:{config.get('redis_port')}/{config.get('redis_db')}"
        return cls(url, password=config.get("redis_password"))

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            logger.debug(f"Connecting to {self.url}")
            self._client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule"]
