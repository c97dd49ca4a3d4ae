"""Kudos API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from teampulse.api.dependencies import CurrentUser, DbSession, ManagerUser, Pagination
from teampulse.api.schemas import (
    ApprovalRequest,
    ErrorResponse,
    KudosCreate,
    KudosDetailEnvelope,
    KudosDetailResponse,
    KudosEnvelope,
    KudosListResponse,
    KudosResponse,
    KudosUpdate,
    MessageResponse,
    TagListResponse,
    TagResponse,
)
from teampulse.models import KudosStatus
from teampulse.services.kudos_service import KudosService

router = APIRouter(prefix="/kudos", tags=["kudos"])


# ============================================================================
# Kudos CRUD
# ============================================================================


@router.post(
    "",
    response_model=KudosEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_kudos(db: DbSession, user: CurrentUser, payload: KudosCreate) -> KudosEnvelope:
    """Send kudos, spending budget when a monetary amount is given."""
    kudos = await KudosService(db).create(
        user,
        to_user_id=payload.to_user_id,
        message=payload.message,
        tag_ids=payload.tag_ids,
        is_public=payload.is_public,
        monetary_amount=payload.monetary_amount,
        currency=payload.currency.upper(),
    )
    await db.commit()
    return KudosEnvelope(message="Kudos sent successfully", kudos=KudosResponse.model_validate(kudos))


@router.get("", response_model=KudosListResponse)
async def list_kudos(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    from_user_id: Annotated[UUID | None, Query(alias="fromUserId")] = None,
    to_user_id: Annotated[UUID | None, Query(alias="toUserId")] = None,
    status_filter: Annotated[KudosStatus | None, Query(alias="status")] = None,
    is_public: Annotated[bool | None, Query(alias="isPublic")] = None,
) -> KudosListResponse:
    """List kudos visible to the caller."""
    result = await KudosService(db).list(
        user,
        page,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status=status_filter,
        is_public=is_public,
    )
    return KudosListResponse(
        kudos=[KudosResponse.model_validate(k) for k in result.items],
        pagination=result.pagination(),
    )


@router.get("/tags", response_model=TagListResponse)
@router.get("/tags/all", response_model=TagListResponse)
async def list_tags(db: DbSession, user: CurrentUser) -> TagListResponse:
    tags = await KudosService(db).list_tags()
    return TagListResponse(tags=[TagResponse.model_validate(t) for t in tags])


@router.get(
    "/{kudos_id}",
    response_model=KudosDetailEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_kudos(
    db: DbSession,
    user: CurrentUser,
    kudos_id: Annotated[UUID, Path()],
) -> KudosDetailEnvelope:
    kudos = await KudosService(db).get_visible(kudos_id, user)
    return KudosDetailEnvelope(kudos=KudosDetailResponse.model_validate(kudos))


@router.put(
    "/{kudos_id}",
    response_model=KudosEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_kudos(
    db: DbSession,
    user: CurrentUser,
    kudos_id: Annotated[UUID, Path()],
    payload: KudosUpdate,
) -> KudosEnvelope:
    kudos = await KudosService(db).update(
        kudos_id,
        user,
        message=payload.message,
        tag_ids=payload.tag_ids,
        is_public=payload.is_public,
    )
    await db.commit()
    return KudosEnvelope(message="Kudos updated successfully", kudos=KudosResponse.model_validate(kudos))


@router.delete(
    "/{kudos_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_kudos(
    db: DbSession,
    user: CurrentUser,
    kudos_id: Annotated[UUID, Path()],
) -> MessageResponse:
    await KudosService(db).delete(kudos_id, user)
    await db.commit()
    return MessageResponse(message="Kudos deleted successfully")


# ============================================================================
# Approval workflow
# ============================================================================


@router.post(
    "/{kudos_id}/approve",
    response_model=KudosEnvelope,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def approve_kudos(
    db: DbSession,
    manager: ManagerUser,
    kudos_id: Annotated[UUID, Path()],
    payload: ApprovalRequest | None = None,
) -> KudosEnvelope:
    """Approve a pending kudos and count it."""
    reason = payload.reason if payload else None
    kudos = await KudosService(db).approve(kudos_id, manager, reason)
    await db.commit()
    return KudosEnvelope(message="Kudos approved successfully", kudos=KudosResponse.model_validate(kudos))


@router.post(
    "/{kudos_id}/reject",
    response_model=KudosEnvelope,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def reject_kudos(
    db: DbSession,
    manager: ManagerUser,
    kudos_id: Annotated[UUID, Path()],
    payload: ApprovalRequest | None = None,
) -> KudosEnvelope:
    """Reject a pending kudos."""
    reason = payload.reason if payload else None
    kudos = await KudosService(db).reject(kudos_id, manager, reason)
    await db.commit()
    return KudosEnvelope(message="Kudos rejected successfully", kudos=KudosResponse.model_validate(kudos))
