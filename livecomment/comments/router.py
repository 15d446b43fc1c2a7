"""Live comment API endpoints.

Provides routes for:
- Listing and posting comments on a stream
- Reporting a comment
- Registering and listing a stream's NG words
"""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from livecomment.auth.dependencies import CurrentUserId

from .dependencies import CommentServiceDep, handle_comment_error
from .schemas import (
    CommentResponse,
    ModerateRequest,
    ModerateResponse,
    NGWordResponse,
    PostCommentRequest,
    ReportResponse,
)
from .service import CommentError


router = APIRouter(prefix="/streams", tags=["livecomments"])

# Ids and limits are signed 64-bit values
MAX_INT64 = 2**63 - 1

StreamId = Annotated[int, Path(description="Livestream ID", le=MAX_INT64)]


@router.get(
    "/{stream_id}/comments",
    response_model=list[CommentResponse],
    summary="List stream comments",
)
async def list_comments(
    stream_id: StreamId,
    comment_service: CommentServiceDep,
    _user_id: CurrentUserId,
    limit: Annotated[int | None, Query(ge=0, le=MAX_INT64)] = None,
) -> list[CommentResponse]:
    """Get the comments of a stream, newest first.

    An unknown stream yields an empty list.
    """
    try:
        return await comment_service.list_comments(stream_id, limit=limit)
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.post(
    "/{stream_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post comment",
)
async def post_comment(
    stream_id: StreamId,
    data: PostCommentRequest,
    comment_service: CommentServiceDep,
    user_id: CurrentUserId,
) -> CommentResponse:
    """Post a comment with a tip.

    Rejected with 400 when it contains one of the stream's NG words.
    """
    try:
        return await comment_service.create_comment(
            stream_id=stream_id,
            user_id=user_id,
            text=data.comment,
            tip=data.tip,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.post(
    "/{stream_id}/comments/{comment_id}/report",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report comment",
)
async def report_comment(
    stream_id: StreamId,
    comment_id: Annotated[int, Path(description="Livecomment ID", le=MAX_INT64)],
    comment_service: CommentServiceDep,
    user_id: CurrentUserId,
) -> ReportResponse:
    """Report a comment for moderation."""
    try:
        return await comment_service.report_comment(
            stream_id=stream_id,
            comment_id=comment_id,
            reporter_id=user_id,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.post(
    "/{stream_id}/moderate",
    response_model=ModerateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register NG word",
)
async def moderate(
    stream_id: StreamId,
    data: ModerateRequest,
    comment_service: CommentServiceDep,
    user_id: CurrentUserId,
) -> ModerateResponse:
    """Register an NG word on a stream the caller owns.

    Existing comments containing any of the stream's NG words are deleted.
    """
    try:
        word_id = await comment_service.moderate(
            stream_id=stream_id,
            owner_id=user_id,
            word=data.ng_word,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e
    return ModerateResponse(word_id=word_id)


@router.get(
    "/{stream_id}/ngwords",
    response_model=list[NGWordResponse],
    summary="List NG words",
)
async def list_ng_words(
    stream_id: StreamId,
    comment_service: CommentServiceDep,
    user_id: CurrentUserId,
) -> list[NGWordResponse]:
    """Get the caller's NG words for a stream, newest first."""
    try:
        return await comment_service.list_ng_words(stream_id, owner_id=user_id)
    except CommentError as e:
        raise handle_comment_error(e) from e
