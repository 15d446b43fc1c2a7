"""ORM tables for users and streams.

These rows are owned by other parts of the platform; the comment service only
reads them to hydrate responses and to resolve stream ownership.
"""

from sqlalchemy import BigInteger, Boolean, ForeignKey, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from livecomment.core.database import Base, BigIntPK


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    password: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class Theme(Base):
    __tablename__ = "themes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    dark_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Icon(Base):
    """Uploaded user icon. ``hash`` is the SHA-256 hex digest of ``image``."""

    __tablename__ = "icons"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    image: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    hash: Mapped[str | None] = mapped_column(String(64), nullable=True)


class Livestream(Base):
    __tablename__ = "livestreams"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    playlist_url: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    thumbnail_url: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    start_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)


class LivestreamTag(Base):
    __tablename__ = "livestream_tags"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id"), nullable=False, index=True
    )
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id"), nullable=False)
