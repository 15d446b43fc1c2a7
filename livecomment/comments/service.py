"""Live comment service layer.

Business logic for:
- Listing a stream's comments, served from the comment list cache when possible
- Posting comments through the NG word filter
- Reporting comments
- Registering NG words and purging the comments they now ban

Every operation runs in a single database transaction: it commits only when
all of its steps succeed and rolls back on any error or cancellation.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from redis.exceptions import RedisError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from livecomment.users.models import Livestream
from livecomment.users.service import HydrationError, Hydrator

from .cache import CommentListCache
from .models import LiveComment, LiveCommentReport, NGWord, unix_now
from .moderation import find_ng_word, select_purge_targets
from .schemas import CommentResponse, NGWordResponse, ReportResponse


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class StreamNotFoundError(CommentError):
    """Referenced stream does not exist."""

    def __init__(self, message: str = "livestream not found"):
        super().__init__(message, "stream_not_found")


class CommentNotFoundError(CommentError):
    """Referenced comment does not exist."""

    def __init__(self, message: str = "livecomment not found"):
        super().__init__(message, "comment_not_found")


class PermissionDeniedError(CommentError):
    """Caller may not moderate the stream."""

    def __init__(self, message: str = "cannot moderate a stream you do not own"):
        super().__init__(message, "permission_denied")


class SpamDetectedError(CommentError):
    """Comment contains one of the stream's NG words."""

    def __init__(self, message: str = "this comment was rejected as spam"):
        super().__init__(message, "spam_detected")


class StoreError(CommentError):
    """Database or cache failure; the transaction was rolled back."""

    def __init__(self, message: str = "store operation failed"):
        super().__init__(message, "store_error")


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for live comments and their moderation."""

    # Keeps the purge DELETE under driver bind-parameter limits
    PURGE_BATCH_SIZE = 500

    def __init__(
        self,
        session_factory: "async_sessionmaker[AsyncSession]",
        cache: CommentListCache,
        fallback_image_path: str | None = None,
    ):
        """Initialize with a session factory and the comment list cache."""
        self.session_factory = session_factory
        self.cache = cache
        self.fallback_image_path = fallback_image_path

    @asynccontextmanager
    async def _transaction(self, action: str) -> AsyncIterator["AsyncSession"]:
        """Open a session and transaction; store failures become StoreError."""
        try:
            async with self.session_factory() as session, session.begin():
                yield session
        except (SQLAlchemyError, HydrationError, RedisError) as e:
            logger.error(
                "comment_store_failed",
                action=action,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise StoreError(f"failed to {action}") from e

    def _hydrator(self, session: "AsyncSession") -> Hydrator:
        return Hydrator(session, self.fallback_image_path)

    async def _to_response(
        self, hydrator: Hydrator, comment: LiveComment
    ) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            user=await hydrator.user(comment.user_id),
            livestream=await hydrator.stream(comment.livestream_id),
            comment=comment.comment,
            tip=comment.tip,
            created_at=comment.created_at,
        )

    async def _invalidate_after_commit(self, stream_id: int) -> None:
        """Drop the cache entry again once the write is visible.

        A reader that started before the commit may have refilled the entry
        from its older snapshot in the meantime.
        """
        try:
            await self.cache.invalidate(stream_id)
        except RedisError as e:
            logger.warning(
                "comment_cache_invalidation_failed", stream_id=stream_id, error=str(e)
            )

    # ==========================================================================
    # Listing
    # ==========================================================================

    async def list_comments(
        self, stream_id: int, limit: int | None = None
    ) -> list[CommentResponse]:
        """Comments of a stream, newest first, with hydrated author and stream.

        The full list is cached per stream; limited reads always query the
        database. A missing stream yields an empty list.
        """
        if limit is None:
            cached = await self.cache.get(stream_id)
            if cached is not None:
                logger.debug("comment_cache_hit", stream_id=stream_id)
                return cached

        async with self._transaction("get livecomments") as session:
            if await session.get(Livestream, stream_id) is None:
                return []

            query = (
                select(LiveComment)
                .where(LiveComment.livestream_id == stream_id)
                .order_by(LiveComment.created_at.desc(), LiveComment.id.desc())
            )
            if limit is not None:
                query = query.limit(limit)

            rows = (await session.scalars(query)).all()
            hydrator = self._hydrator(session)
            comments = [await self._to_response(hydrator, row) for row in rows]

        if limit is None:
            await self.cache.put(stream_id, comments)

        return comments

    # ==========================================================================
    # Posting
    # ==========================================================================

    async def create_comment(
        self, stream_id: int, user_id: int, text: str, tip: int
    ) -> CommentResponse:
        """Post a comment after checking it against the stream owner's NG words.

        Raises:
            StreamNotFoundError: If the stream does not exist
            SpamDetectedError: If the text contains an NG word
        """
        async with self._transaction("insert livecomment") as session:
            stream = await session.get(Livestream, stream_id)
            if stream is None:
                raise StreamNotFoundError

            ng_words = (
                await session.scalars(
                    select(NGWord.word)
                    .where(
                        NGWord.user_id == stream.user_id,
                        NGWord.livestream_id == stream.id,
                    )
                    .order_by(NGWord.id)
                )
            ).all()

            matched = find_ng_word(text, ng_words)
            if matched is not None:
                logger.info(
                    "comment_rejected_as_spam",
                    stream_id=stream_id,
                    author_id=user_id,
                    ng_word=matched,
                )
                raise SpamDetectedError

            comment = LiveComment(
                user_id=user_id,
                livestream_id=stream_id,
                comment=text,
                tip=tip,
                created_at=unix_now(),
            )
            session.add(comment)
            await session.flush()

            response = await self._to_response(self._hydrator(session), comment)
            await self.cache.invalidate(stream_id)

        await self._invalidate_after_commit(stream_id)
        logger.info(
            "comment_created",
            comment_id=response.id,
            stream_id=stream_id,
            author_id=user_id,
            tip=tip,
        )
        return response

    # ==========================================================================
    # Reports
    # ==========================================================================

    async def report_comment(
        self, stream_id: int, comment_id: int, reporter_id: int
    ) -> ReportResponse:
        """Record a report against a comment.

        The same reporter may report the same comment any number of times.

        Raises:
            StreamNotFoundError: If the stream does not exist
            CommentNotFoundError: If the comment does not exist
        """
        async with self._transaction("insert livecomment report") as session:
            if await session.get(Livestream, stream_id) is None:
                raise StreamNotFoundError

            comment = await session.get(LiveComment, comment_id)
            if comment is None:
                raise CommentNotFoundError

            report = LiveCommentReport(
                user_id=reporter_id,
                livestream_id=stream_id,
                livecomment_id=comment_id,
                created_at=unix_now(),
            )
            session.add(report)
            await session.flush()

            hydrator = self._hydrator(session)
            response = ReportResponse(
                id=report.id,
                reporter=await hydrator.user(reporter_id),
                livecomment=await self._to_response(hydrator, comment),
                created_at=report.created_at,
            )

        logger.info(
            "comment_reported",
            report_id=response.id,
            comment_id=comment_id,
            stream_id=stream_id,
            reporter_id=reporter_id,
        )
        return response

    # ==========================================================================
    # NG Words
    # ==========================================================================

    async def moderate(self, stream_id: int, owner_id: int, word: str) -> int:
        """Register an NG word and delete the stream's comments it now bans.

        Existing comments are rescanned against every NG word of the stream,
        not only the new one. Registration and purge commit together.

        Returns:
            The id of the new NG word

        Raises:
            PermissionDeniedError: If ``owner_id`` does not own the stream
        """
        async with self._transaction("moderate livestream") as session:
            owned = await session.scalar(
                select(Livestream.id).where(
                    Livestream.id == stream_id, Livestream.user_id == owner_id
                )
            )
            if owned is None:
                logger.info(
                    "moderation_denied", stream_id=stream_id, user_id=owner_id
                )
                raise PermissionDeniedError

            ng_word = NGWord(
                user_id=owner_id,
                livestream_id=stream_id,
                word=word,
                created_at=unix_now(),
            )
            session.add(ng_word)
            await session.flush()

            words = (
                await session.scalars(
                    select(NGWord.word)
                    .where(NGWord.livestream_id == stream_id)
                    .order_by(NGWord.id)
                )
            ).all()

            comments = (
                await session.execute(
                    select(
                        LiveComment.id, LiveComment.livestream_id, LiveComment.comment
                    ).where(LiveComment.livestream_id == stream_id)
                )
            ).all()

            deleted_ids = select_purge_targets(stream_id, comments, words)
            await self._delete_comments(session, stream_id, deleted_ids)
            await self.cache.invalidate(stream_id)

        await self._invalidate_after_commit(stream_id)
        logger.info(
            "ng_word_registered",
            word_id=ng_word.id,
            stream_id=stream_id,
            owner_id=owner_id,
            purged_comments=len(deleted_ids),
        )
        return ng_word.id

    async def _delete_comments(
        self, session: "AsyncSession", stream_id: int, comment_ids: list[int]
    ) -> None:
        """Delete exactly ``comment_ids``, restricted to ``stream_id``."""
        for start in range(0, len(comment_ids), self.PURGE_BATCH_SIZE):
            batch = comment_ids[start : start + self.PURGE_BATCH_SIZE]
            await session.execute(
                delete(LiveComment).where(
                    LiveComment.id.in_(batch),
                    LiveComment.livestream_id == stream_id,
                ),
                execution_options={"synchronize_session": False},
            )

    async def list_ng_words(
        self, stream_id: int, owner_id: int
    ) -> list[NGWordResponse]:
        """NG words ``owner_id`` registered for the stream, newest first."""
        async with self._transaction("get NG words") as session:
            rows = (
                await session.scalars(
                    select(NGWord)
                    .where(
                        NGWord.user_id == owner_id,
                        NGWord.livestream_id == stream_id,
                    )
                    .order_by(NGWord.created_at.desc(), NGWord.id.desc())
                )
            ).all()
            return [NGWordResponse.model_validate(row) for row in rows]
