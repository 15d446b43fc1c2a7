"""Tests for the per-stream comment list cache."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from livecomment.comments.cache import CommentListCache
from livecomment.comments.schemas import CommentResponse


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Mock Redis client."""
    redis_mock = AsyncMock()
    redis_mock.get = AsyncMock(return_value=None)
    return redis_mock


@pytest.fixture
def cache(mock_redis: AsyncMock) -> CommentListCache:
    return CommentListCache(redis=mock_redis, ttl_seconds=120)


class TestCommentListCache:
    """Tests for CommentListCache."""

    def test_key_is_per_stream(self, cache: CommentListCache) -> None:
        assert cache.key(42) == "livecomments:42"
        assert cache.key(42) != cache.key(43)

    @pytest.mark.asyncio
    async def test_miss(self, cache: CommentListCache, mock_redis: AsyncMock) -> None:
        assert await cache.get(42) is None
        mock_redis.get.assert_awaited_once_with("livecomments:42")

    @pytest.mark.asyncio
    async def test_put_then_get(
        self,
        cache: CommentListCache,
        mock_redis: AsyncMock,
        sample_comment: CommentResponse,
    ) -> None:
        await cache.put(42, [sample_comment])

        mock_redis.setex.assert_awaited_once()
        key, ttl, payload = mock_redis.setex.await_args.args
        assert key == "livecomments:42"
        assert ttl == 120

        mock_redis.get.return_value = payload
        assert await cache.get(42) == [sample_comment]

    @pytest.mark.asyncio
    async def test_cached_empty_list_is_a_hit(
        self, cache: CommentListCache, mock_redis: AsyncMock
    ) -> None:
        mock_redis.get.return_value = "[]"
        assert await cache.get(42) == []

    @pytest.mark.asyncio
    async def test_malformed_entry_is_a_miss(
        self, cache: CommentListCache, mock_redis: AsyncMock
    ) -> None:
        mock_redis.get.return_value = '[{"id": "not-a-comment"}]'
        assert await cache.get(42) is None

    @pytest.mark.asyncio
    async def test_read_failure_is_a_miss(
        self, cache: CommentListCache, mock_redis: AsyncMock
    ) -> None:
        mock_redis.get.side_effect = RedisConnectionError("down")
        assert await cache.get(42) is None

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(
        self,
        cache: CommentListCache,
        mock_redis: AsyncMock,
        sample_comment: CommentResponse,
    ) -> None:
        mock_redis.setex.side_effect = RedisConnectionError("down")
        await cache.put(42, [sample_comment])

    @pytest.mark.asyncio
    async def test_invalidate_deletes_key(
        self, cache: CommentListCache, mock_redis: AsyncMock
    ) -> None:
        await cache.invalidate(42)
        mock_redis.delete.assert_awaited_once_with("livecomments:42")

    @pytest.mark.asyncio
    async def test_invalidate_failure_propagates(
        self, cache: CommentListCache, mock_redis: AsyncMock
    ) -> None:
        """Writers must know when the stale entry could not be dropped."""
        mock_redis.delete.side_effect = RedisConnectionError("down")
        with pytest.raises(RedisConnectionError):
            await cache.invalidate(42)


class TestDisabledCache:
    """Without Redis every read misses and writes do nothing."""

    @pytest.mark.asyncio
    async def test_disabled(self, sample_comment: CommentResponse) -> None:
        cache = CommentListCache(redis=None)
        assert cache.enabled is False
        await cache.put(42, [sample_comment])
        assert await cache.get(42) is None
        await cache.invalidate(42)
