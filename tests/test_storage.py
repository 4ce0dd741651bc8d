"""Tests for the Redis connection owner."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from casmapping.modules.storage import StorageModule


def test_default_url_from_environment(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://cache:6380/2")

    assert StorageModule().url == "redis://cache:6380/2"


def test_default_url_fallback(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)

    assert StorageModule().url == "redis://localhost:6379/0"


def test_from_config_builds_url_and_keeps_password_separate():
    config = MagicMock()
    config.get.side_effect = {
        "redis_host": "redis.internal",
        "redis_port": 6379,
        "redis_db": 1,
        "redis_password": "p@ss/word",
    }.get

    storage = StorageModule.from_config(config)

    assert storage.url == "redis://redis.internal:6379/1"
    assert storage.password == "p@ss/word"


@pytest.mark.asyncio
async def test_connect_reuses_client():
    client = MagicMock()
    client.aclose = AsyncMock()

    with patch("casmapping.modules.storage.redis.from_url", return_value=client) as from_url:
        storage = StorageModule("redis://localhost:6379/0", password="secret")

        assert await storage.connect() is client
        assert await storage.connect() is client

    from_url.assert_called_once_with(
        "redis://localhost:6379/0",
        password="secret",
        encoding="utf-8",
        decode_responses=True,
    )


@pytest.mark.asyncio
async def test_disconnect_closes_client():
    client = MagicMock()
    client.aclose = AsyncMock()

    with patch("casmapping.modules.storage.redis.from_url", return_value=client):
        storage = StorageModule("redis://localhost:6379/0")
        await storage.connect()
        await storage.disconnect()

    client.aclose.assert_awaited_once()
    assert storage._client is None


@pytest.mark.asyncio
async def test_disconnect_without_connect_is_noop():
    await StorageModule("redis://localhost:6379/0").disconnect()
