"""Per-stream cache of hydrated comment lists.

Backed by Redis. Reads are best-effort: anything other than a well-formed
cached list is a miss. Invalidation is the safety property; writers delete
the entry so the next read recomputes from the database.
"""

from typing import TYPE_CHECKING

import structlog
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from .schemas import CommentResponse


if TYPE_CHECKING:
    from redis.asyncio import Redis


logger = structlog.get_logger(__name__)

_comment_list_adapter = TypeAdapter(list[CommentResponse])


class CommentListCache:
    """Cache of ``list_comments`` results keyed by stream id.

    With no Redis client the cache is disabled: every read misses and
    writes are no-ops.
    """

    KEY_PREFIX = "livecomments"

    def __init__(self, redis: "Redis | None" = None, ttl_seconds: int = 3600):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    def key(self, stream_id: int) -> str:
        return f"{self.KEY_PREFIX}:{stream_id}"

    async def get(self, stream_id: int) -> list[CommentResponse] | None:
        """Cached comment list for a stream, or None on any kind of miss."""
        if not self.redis:
            return None

        try:
            cached = await self.redis.get(self.key(stream_id))
        except RedisError as e:
            logger.warning(
                "comment_cache_read_failed", stream_id=stream_id, error=str(e)
            )
            return None

        if cached is None:
            return None

        try:
            return _comment_list_adapter.validate_json(cached)
        except ValidationError as e:
            logger.warning(
                "comment_cache_entry_malformed",
                stream_id=stream_id,
                errors=e.error_count(),
            )
            return None

    async def put(self, stream_id: int, comments: list[CommentResponse]) -> None:
        """Store a freshly read comment list. Failures are logged, not raised."""
        if not self.redis:
            return

        try:
            await self.redis.setex(
                self.key(stream_id),
                self.ttl_seconds,
                _comment_list_adapter.dump_json(comments),
            )
        except RedisError as e:
            logger.warning(
                "comment_cache_write_failed", stream_id=stream_id, error=str(e)
            )

    async def invalidate(self, stream_id: int) -> None:
        """Drop the cached list of a stream.

        Raises:
            RedisError: If the entry could not be deleted
        """
        if not self.redis:
            return

        await self.redis.delete(self.key(stream_id))
