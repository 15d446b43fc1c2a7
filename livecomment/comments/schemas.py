"""Pydantic schemas for live comments.

Request/Response models with validation for:
- Posting comments with a tip
- Reports
- NG word moderation
"""

from pydantic import BaseModel, ConfigDict, Field

from livecomment.users.schemas import StreamResponse, UserResponse


# ==============================================================================
# Request Schemas
# ==============================================================================


class PostCommentRequest(BaseModel):
    """Request to post a comment on a stream."""

    comment: str
    tip: int = Field(0, ge=0, description="Tip in the smallest currency unit")


class ModerateRequest(BaseModel):
    """Request to register an NG word on a stream."""

    ng_word: str


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(BaseModel):
    """Comment with its hydrated author and stream."""

    id: int
    user: UserResponse
    livestream: StreamResponse
    comment: str
    tip: int
    created_at: int


class ReportResponse(BaseModel):
    """Report with its hydrated reporter and reported comment."""

    id: int
    reporter: UserResponse
    livecomment: CommentResponse
    created_at: int


class NGWordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    livestream_id: int
    word: str
    created_at: int


class ModerateResponse(BaseModel):
    word_id: int
