"""
Shared pytest fixtures for casmapping tests.

This module provides:
- A Redis mock for call-level assertions
- An in-memory Redis double that honours TTLs against a fake clock
"""

import os
import sys
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock Redis client for async operations."""
    redis = AsyncMock()

    redis.setex = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=0)
    redis.exists = AsyncMock(return_value=0)

    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    Keys written with setex expire once the fake clock passes their TTL.
    Call redis._advance(seconds) to move the clock forward.
    """
    storage = {}
    expires_at = {}
    clock = [0.0]

    redis = AsyncMock()

    def purge(key):
        deadline = expires_at.get(key)
        if deadline is not None and clock[0] >= deadline:
            storage.pop(key, None)
            expires_at.pop(key, None)

    async def mock_setex(key, ttl, value):
        storage[key] = value
        expires_at[key] = clock[0] + ttl
        return True

    async def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        expires_at.pop(key, None)
        return True

    async def mock_get(key):
        purge(key)
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            purge(key)
            if key in storage:
                del storage[key]
                expires_at.pop(key, None)
                count += 1
        return count

    async def mock_exists(*keys):
        for key in keys:
            purge(key)
        return sum(1 for k in keys if k in storage)

    def advance(seconds):
        clock[0] += seconds
        for key in list(storage):
            purge(key)

    redis.setex = mock_setex
    redis.set = mock_set
    redis.get = mock_get
    redis.delete = mock_delete
    redis.exists = mock_exists
    redis._storage = storage  # Expose for test assertions
    redis._advance = advance

    return redis
