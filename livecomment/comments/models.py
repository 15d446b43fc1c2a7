"""Database models for live comments.

Tables:
- livecomments: comments posted on a stream, each carrying a tip
- livecomment_reports: one row per report action (duplicates allowed)
- ng_words: banned words registered by a stream's owner for that stream

Timestamps are unix seconds.
"""

import time

from sqlalchemy import BigInteger, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from livecomment.core.database import Base, BigIntPK


def unix_now() -> int:
    """Current time in unix seconds."""
    return int(time.time())


class LiveComment(Base):
    """Comment posted on a stream. Never updated; deleted only by moderation."""

    __tablename__ = "livecomments"
    __table_args__ = (
        Index("livecomments_stream_created_idx", "livestream_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id"), nullable=False
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    tip: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=unix_now)


class LiveCommentReport(Base):
    __tablename__ = "livecomment_reports"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id"), nullable=False, index=True
    )
    # No foreign key: a report outlives a comment purged by moderation
    livecomment_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=unix_now)


class NGWord(Base):
    """Banned word scoped to one (owner, stream) pair."""

    __tablename__ = "ng_words"
    __table_args__ = (
        Index("ng_words_owner_stream_idx", "user_id", "livestream_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id"), nullable=False
    )
    word: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=unix_now)
