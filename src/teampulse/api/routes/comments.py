"""Comment API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from teampulse.api.dependencies import CurrentUser, DbSession, Pagination
from teampulse.api.schemas import (
    CommentCreate,
    CommentDetailEnvelope,
    CommentEnvelope,
    CommentListResponse,
    CommentResponse,
    CommentUpdate,
    ErrorResponse,
    MessageResponse,
)
from teampulse.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post(
    "",
    response_model=CommentEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_comment(db: DbSession, user: CurrentUser, payload: CommentCreate) -> CommentEnvelope:
    """Comment on exactly one kudos or feedback item."""
    comment = await CommentService(db).create(
        user,
        message=payload.message,
        kudos_id=payload.kudos_id,
        feedback_id=payload.feedback_id,
    )
    await db.commit()
    return CommentEnvelope(message="Comment added successfully", comment=CommentResponse.model_validate(comment))


@router.get(
    "",
    response_model=CommentListResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_comments(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    kudos_id: Annotated[UUID | None, Query(alias="kudosId")] = None,
    feedback_id: Annotated[UUID | None, Query(alias="feedbackId")] = None,
) -> CommentListResponse:
    result = await CommentService(db).list(user, page, kudos_id=kudos_id, feedback_id=feedback_id)
    return CommentListResponse(
        comments=[CommentResponse.model_validate(c) for c in result.items],
        pagination=result.pagination(),
    )


@router.get(
    "/{comment_id}",
    response_model=CommentDetailEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_comment(
    db: DbSession,
    user: CurrentUser,
    comment_id: Annotated[UUID, Path()],
) -> CommentDetailEnvelope:
    comment = await CommentService(db).get_visible(comment_id, user)
    return CommentDetailEnvelope(comment=CommentResponse.model_validate(comment))


@router.put(
    "/{comment_id}",
    response_model=CommentEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_comment(
    db: DbSession,
    user: CurrentUser,
    comment_id: Annotated[UUID, Path()],
    payload: CommentUpdate,
) -> CommentEnvelope:
    comment = await CommentService(db).update(comment_id, user, payload.message)
    await db.commit()
    return CommentEnvelope(message="Comment updated successfully", comment=CommentResponse.model_validate(comment))


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_comment(
    db: DbSession,
    user: CurrentUser,
    comment_id: Annotated[UUID, Path()],
) -> MessageResponse:
    await CommentService(db).delete(comment_id, user)
    await db.commit()
    return MessageResponse(message="Comment deleted successfully")
