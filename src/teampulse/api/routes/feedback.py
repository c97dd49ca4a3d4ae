"""Feedback API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from teampulse.api.dependencies import CurrentUser, DbSession, ManagerUser, Pagination
from teampulse.api.schemas import (
    ErrorResponse,
    FeedbackCreate,
    FeedbackDetailEnvelope,
    FeedbackDetailResponse,
    FeedbackEnvelope,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackReviewRequest,
    FeedbackUpdate,
    MessageResponse,
)
from teampulse.models import Feedback, FeedbackStatus, FeedbackType, User
from teampulse.services.feedback_service import FeedbackService, hides_sender

router = APIRouter(prefix="/feedback", tags=["feedback"])


def render(
    feedback: Feedback,
    viewer: User,
    schema: type[FeedbackResponse] = FeedbackResponse,
) -> FeedbackResponse:
    """Serialize feedback, masking the author of anonymous items."""
    view = schema.model_validate(feedback)
    if hides_sender(feedback, viewer):
        view = view.model_copy(update={"from_user": None, "from_user_id": None})
    return view


@router.post(
    "",
    response_model=FeedbackEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_feedback(db: DbSession, user: CurrentUser, payload: FeedbackCreate) -> FeedbackEnvelope:
    feedback = await FeedbackService(db).create(
        user,
        message=payload.message,
        type=payload.type,
        to_user_id=payload.to_user_id,
        is_public=payload.is_public,
        is_anonymous=payload.is_anonymous,
    )
    await db.commit()
    return FeedbackEnvelope(message="Feedback submitted successfully", feedback=render(feedback, user))


@router.get("", response_model=FeedbackListResponse)
async def list_feedback(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    from_user_id: Annotated[UUID | None, Query(alias="fromUserId")] = None,
    to_user_id: Annotated[UUID | None, Query(alias="toUserId")] = None,
    type_filter: Annotated[FeedbackType | None, Query(alias="type")] = None,
    status_filter: Annotated[FeedbackStatus | None, Query(alias="status")] = None,
    is_public: Annotated[bool | None, Query(alias="isPublic")] = None,
) -> FeedbackListResponse:
    result = await FeedbackService(db).list(
        user,
        page,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        type=type_filter,
        status=status_filter,
        is_public=is_public,
    )
    return FeedbackListResponse(
        feedback=[render(f, user) for f in result.items],
        pagination=result.pagination(),
    )


@router.get(
    "/{feedback_id}",
    response_model=FeedbackDetailEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_feedback(
    db: DbSession,
    user: CurrentUser,
    feedback_id: Annotated[UUID, Path()],
) -> FeedbackDetailEnvelope:
    feedback = await FeedbackService(db).get_visible(feedback_id, user)
    return FeedbackDetailEnvelope(feedback=render(feedback, user, FeedbackDetailResponse))


@router.put(
    "/{feedback_id}",
    response_model=FeedbackEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_feedback(
    db: DbSession,
    user: CurrentUser,
    feedback_id: Annotated[UUID, Path()],
    payload: FeedbackUpdate,
) -> FeedbackEnvelope:
    feedback = await FeedbackService(db).update(
        feedback_id,
        user,
        message=payload.message,
        type=payload.type,
        is_public=payload.is_public,
    )
    await db.commit()
    return FeedbackEnvelope(message="Feedback updated successfully", feedback=render(feedback, user))


@router.post(
    "/{feedback_id}/review",
    response_model=FeedbackEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def review_feedback(
    db: DbSession,
    manager: ManagerUser,
    feedback_id: Annotated[UUID, Path()],
    payload: FeedbackReviewRequest,
) -> FeedbackEnvelope:
    """Set the review status; the author is notified."""
    feedback = await FeedbackService(db).review(feedback_id, payload.status)
    await db.commit()
    return FeedbackEnvelope(message="Feedback status updated successfully", feedback=render(feedback, manager))


@router.delete(
    "/{feedback_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_feedback(
    db: DbSession,
    user: CurrentUser,
    feedback_id: Annotated[UUID, Path()],
) -> MessageResponse:
    await FeedbackService(db).delete(feedback_id, user)
    await db.commit()
    return MessageResponse(message="Feedback deleted successfully")
