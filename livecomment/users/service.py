"""User and stream hydration.

Turns ``users``/``livestreams`` rows into the nested snapshots embedded in
comment and report responses. All lookups run on the caller's session so they
share the enclosing transaction.
"""

import hashlib
from functools import lru_cache
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from livecomment.config import get_settings

from .models import Icon, Livestream, LivestreamTag, Tag, Theme, User
from .schemas import StreamResponse, TagResponse, ThemeResponse, UserResponse


class HydrationError(Exception):
    """A row referenced by a comment, report or stream could not be loaded."""


@lru_cache
def fallback_icon_hash(path: str) -> str:
    """SHA-256 hex digest of the default icon image at ``path``."""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


class Hydrator:
    """Builds user and stream snapshots, memoized for one transaction.

    A comment list repeats the same stream and often the same authors, so
    every user and stream is loaded at most once per hydrator.
    """

    def __init__(self, session: AsyncSession, fallback_image_path: str | None = None):
        self.session = session
        self.fallback_image_path = (
            fallback_image_path or get_settings().fallback_image_path
        )
        self._users: dict[int, UserResponse] = {}
        self._streams: dict[int, StreamResponse] = {}

    async def user(self, user_id: int) -> UserResponse:
        """Hydrate a user with theme and icon hash.

        Raises:
            HydrationError: If the user or their theme is missing, or the
                fallback image cannot be read
        """
        if user_id in self._users:
            return self._users[user_id]

        user = await self.session.get(User, user_id)
        if user is None:
            msg = f"user {user_id} not found"
            raise HydrationError(msg)

        theme = await self.session.scalar(
            select(Theme).where(Theme.user_id == user_id).limit(1)
        )
        if theme is None:
            msg = f"theme for user {user_id} not found"
            raise HydrationError(msg)

        hydrated = UserResponse(
            id=user.id,
            name=user.name,
            display_name=user.display_name,
            description=user.description,
            theme=ThemeResponse(id=theme.id, dark_mode=theme.dark_mode),
            icon_hash=await self._icon_hash(user_id),
        )
        self._users[user_id] = hydrated
        return hydrated

    async def stream(self, stream_id: int) -> StreamResponse:
        """Hydrate a stream with its owner and tags.

        Raises:
            HydrationError: If the stream or its owner cannot be hydrated
        """
        if stream_id in self._streams:
            return self._streams[stream_id]

        stream = await self.session.get(Livestream, stream_id)
        if stream is None:
            msg = f"livestream {stream_id} not found"
            raise HydrationError(msg)

        owner = await self.user(stream.user_id)

        tags = await self.session.scalars(
            select(Tag)
            .join(LivestreamTag, LivestreamTag.tag_id == Tag.id)
            .where(LivestreamTag.livestream_id == stream_id)
            .order_by(Tag.id)
        )

        hydrated = StreamResponse(
            id=stream.id,
            owner=owner,
            title=stream.title,
            description=stream.description,
            playlist_url=stream.playlist_url,
            thumbnail_url=stream.thumbnail_url,
            tags=[TagResponse.model_validate(tag) for tag in tags],
            start_at=stream.start_at,
            end_at=stream.end_at,
        )
        self._streams[stream_id] = hydrated
        return hydrated

    async def _icon_hash(self, user_id: int) -> str:
        icon = await self.session.scalar(
            select(Icon).where(Icon.user_id == user_id).order_by(Icon.id.desc()).limit(1)
        )
        if icon is not None:
            return icon.hash or hashlib.sha256(icon.image).hexdigest()

        try:
            return fallback_icon_hash(self.fallback_image_path)
        except OSError as e:
            msg = f"failed to read fallback image: {e}"
            raise HydrationError(msg) from e
