"""Notification endpoints. Callers only ever see their own notifications."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from teampulse.api.dependencies import CurrentUser, DbSession, Pagination
from teampulse.api.schemas import (
    ErrorResponse,
    MessageResponse,
    NotificationEnvelope,
    NotificationListResponse,
    NotificationResponse,
    ReadAllResponse,
)
from teampulse.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    is_read: Annotated[bool | None, Query(alias="isRead")] = None,
) -> NotificationListResponse:
    service = NotificationService(db)
    result = await service.list_for_user(user, page, is_read)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in result.items],
        unread_count=await service.unread_count(user),
        pagination=result.pagination(),
    )


@router.put("/read-all", response_model=ReadAllResponse)
async def mark_all_read(db: DbSession, user: CurrentUser) -> ReadAllResponse:
    count = await NotificationService(db).mark_all_read(user)
    await db.commit()
    return ReadAllResponse(message="All notifications marked as read", count=count)


@router.put(
    "/{notification_id}/read",
    response_model=NotificationEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def mark_read(
    db: DbSession,
    user: CurrentUser,
    notification_id: Annotated[UUID, Path()],
) -> NotificationEnvelope:
    notification = await NotificationService(db).mark_read(notification_id, user)
    await db.commit()
    return NotificationEnvelope(
        message="Notification marked as read",
        notification=NotificationResponse.model_validate(notification),
    )


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_notification(
    db: DbSession,
    user: CurrentUser,
    notification_id: Annotated[UUID, Path()],
) -> MessageResponse:
    await NotificationService(db).delete(notification_id, user)
    await db.commit()
    return MessageResponse(message="Notification deleted successfully")
