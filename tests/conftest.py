"""Shared fixtures.

Service tests run against an in-memory SQLite database (aiosqlite) seeded with
a few users and streams, and a dict-backed Redis double for the comment list
cache. HTTP tests mock the comment service entirely.
"""

import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from unittest.mock import AsyncMock, Mock

# Settings are read once and cached, so the environment must be set up before
# anything from livecomment is imported.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "json")
os.environ.setdefault(
    "LOG_DIR", str(Path(tempfile.gettempdir()) / "livecomment-test-logs")
)

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from livecomment.auth.security import create_access_token
from livecomment.comments.cache import CommentListCache
from livecomment.comments.schemas import CommentResponse
from livecomment.comments.service import CommentService
from livecomment.core.database import create_session_factory, create_tables
from livecomment.users.models import (
    Icon,
    Livestream,
    LivestreamTag,
    Tag,
    Theme,
    User,
)
from livecomment.users.schemas import (
    StreamResponse,
    TagResponse,
    ThemeResponse,
    UserResponse,
)


STREAM_ID = 42
OWNER_ID = 7
VIEWER_ID = 3
OTHER_VIEWER_ID = 9
OTHER_STREAM_ID = 43

OWNER_ICON = b"owner-icon-bytes"
FALLBACK_IMAGE = b"no-image"


class FakeRedis:
    """Dict-backed stand-in for the few ``redis.asyncio`` calls the cache makes."""

    def __init__(self):
        self.store: dict[str, bytes | str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> bytes | str | None:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: bytes | str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed


# ==============================================================================
# Database
# ==============================================================================


@pytest.fixture
def fallback_image(tmp_path: Path) -> Path:
    """Default icon image on disk."""
    path = tmp_path / "NoImage.jpg"
    path.write_bytes(FALLBACK_IMAGE)
    return path


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Seeded in-memory database.

    Stream 42 is owned by user 7 and tagged "music"; stream 43 is owned by
    user 9. Only user 7 has an uploaded icon.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    factory = create_session_factory(engine)

    async with factory() as session, session.begin():
        for user_id, name in (
            (VIEWER_ID, "viewer"),
            (OWNER_ID, "streamer"),
            (OTHER_VIEWER_ID, "other"),
        ):
            session.add(
                User(
                    id=user_id,
                    name=name,
                    display_name=name.title(),
                    password="x",
                    description=f"{name} description",
                )
            )
            session.add(Theme(user_id=user_id, dark_mode=user_id == OWNER_ID))
        session.add(Icon(user_id=OWNER_ID, image=OWNER_ICON))
        session.add(
            Livestream(
                id=STREAM_ID,
                user_id=OWNER_ID,
                title="Morning stream",
                description="coffee and code",
                playlist_url="https://media.example.com/42/playlist.m3u8",
                thumbnail_url="https://media.example.com/42/thumb.jpg",
                start_at=1_700_000_000,
                end_at=1_700_003_600,
            )
        )
        session.add(
            Livestream(
                id=OTHER_STREAM_ID,
                user_id=OTHER_VIEWER_ID,
                title="Evening stream",
                start_at=1_700_010_000,
                end_at=1_700_013_600,
            )
        )
        session.add(Tag(id=1, name="music"))
        session.add(LivestreamTag(livestream_id=STREAM_ID, tag_id=1))

    yield factory

    await engine.dispose()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def comment_cache(fake_redis: FakeRedis) -> CommentListCache:
    return CommentListCache(redis=fake_redis, ttl_seconds=60)


@pytest.fixture
def comment_service(
    session_factory: async_sessionmaker[AsyncSession],
    comment_cache: CommentListCache,
    fallback_image: Path,
) -> CommentService:
    """CommentService backed by the seeded database and the fake Redis."""
    return CommentService(
        session_factory=session_factory,
        cache=comment_cache,
        fallback_image_path=str(fallback_image),
    )


# ==============================================================================
# Sample payloads
# ==============================================================================


def make_user(user_id: int = VIEWER_ID) -> UserResponse:
    return UserResponse(
        id=user_id,
        name=f"user{user_id}",
        display_name=f"User {user_id}",
        description="",
        theme=ThemeResponse(id=user_id, dark_mode=False),
        icon_hash="0" * 64,
    )


def make_comment(comment_id: int = 1, text: str = "hello") -> CommentResponse:
    return CommentResponse(
        id=comment_id,
        user=make_user(VIEWER_ID),
        livestream=StreamResponse(
            id=STREAM_ID,
            owner=make_user(OWNER_ID),
            title="Morning stream",
            description="",
            playlist_url="",
            thumbnail_url="",
            tags=[TagResponse(id=1, name="music")],
            start_at=1_700_000_000,
            end_at=1_700_003_600,
        ),
        comment=text,
        tip=0,
        created_at=1_700_000_100,
    )


@pytest.fixture
def sample_comment() -> CommentResponse:
    return make_comment()


@pytest.fixture
def comment_factory():
    """Build hydrated CommentResponse payloads: ``comment_factory(id, text)``."""
    return make_comment


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def mock_comment_service() -> AsyncMock:
    """Comment service double; every operation is an AsyncMock."""
    service = AsyncMock(spec=CommentService)
    service.cache = Mock(enabled=True)
    return service


@pytest.fixture
def client(mock_comment_service: AsyncMock) -> TestClient:
    """Test client with the comment service mocked (lifespan not run)."""
    from livecomment.main import create_app

    app = create_app()
    app.state.comment_service = mock_comment_service
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Bearer token for the viewer."""
    return {"Authorization": f"Bearer {create_access_token(VIEWER_ID)}"}


@pytest.fixture
def owner_headers() -> dict[str, str]:
    """Bearer token for the stream owner."""
    return {"Authorization": f"Bearer {create_access_token(OWNER_ID)}"}
