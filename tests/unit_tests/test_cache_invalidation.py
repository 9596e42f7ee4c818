"""Test suite for downstream cache invalidation."""

from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from opsdash_api.reconciliation.cache_invalidation import DownstreamCache


def _redis_client(keys):
    """redis.asyncio client double whose scan_iter yields ``keys``."""

    async def scan_iter(match=None):
        for key in keys:
            yield key

    client = MagicMock()
    client.scan_iter = MagicMock(side_effect=scan_iter)
    client.delete = AsyncMock(side_effect=lambda *deleted: len(deleted))
    client.aclose = AsyncMock()
    return client


class TestDownstreamCache:
    """Tests for DownstreamCache."""

    def test_disabled_without_url(self):
        """Test the cache is disabled when no Redis URL is configured."""
        assert DownstreamCache().enabled is False

    @patch("opsdash_api.reconciliation.cache_invalidation.redis.from_url")
    def test_client_created_from_url(self, mock_from_url):
        """Test a Redis URL creates a client with decoded responses."""
        cache = DownstreamCache("redis://localhost:6379/0")

        mock_from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)
        assert cache.enabled is True

    @pytest.mark.asyncio
    async def test_invalidate_without_client_is_noop(self):
        """Test invalidation is skipped when disabled."""
        assert await DownstreamCache().invalidate_team_cache() == 0

    @pytest.mark.asyncio
    async def test_invalidate_deletes_team_keys(self):
        """Test team:all and every team:* key are deleted in one call."""
        client = _redis_client(["team:all", "team:member:1", "team:member:2"])
        cache = DownstreamCache(client=client)

        deleted = await cache.invalidate_team_cache()

        assert deleted == 3
        client.scan_iter.assert_called_once_with(match="team:*")
        client.delete.assert_awaited_once_with("team:all", "team:member:1", "team:member:2")

    @pytest.mark.asyncio
    async def test_invalidate_always_targets_team_all(self):
        """Test team:all is deleted even when the scan finds nothing."""
        client = _redis_client([])
        cache = DownstreamCache(client=client)

        await cache.invalidate_team_cache()

        client.delete.assert_awaited_once_with("team:all")

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Test Redis failures reach the caller."""
        client = _redis_client([])
        client.delete.side_effect = ConnectionError("redis unreachable")
        cache = DownstreamCache(client=client)

        with pytest.raises(ConnectionError):
            await cache.invalidate_team_cache()

    @pytest.mark.asyncio
    async def test_close(self):
        """Test close releases the client connection pool."""
        client = _redis_client([])
        await DownstreamCache(client=client).close()
        client.aclose.assert_awaited_once()
