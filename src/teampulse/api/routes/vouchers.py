"""Voucher API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from teampulse.api.dependencies import CurrentUser, DbSession, ManagerUser, Pagination
from teampulse.api.schemas import (
    ErrorResponse,
    MessageResponse,
    VoucherCreate,
    VoucherDetailEnvelope,
    VoucherEnvelope,
    VoucherListResponse,
    VoucherResponse,
    VoucherUpdate,
)
from teampulse.models import VoucherType
from teampulse.services.voucher_service import VoucherService

router = APIRouter(prefix="/vouchers", tags=["vouchers"])


@router.post(
    "",
    response_model=VoucherEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_voucher(db: DbSession, manager: ManagerUser, payload: VoucherCreate) -> VoucherEnvelope:
    voucher = await VoucherService(db).create(
        manager,
        user_id=payload.user_id,
        type=payload.type,
        value=payload.value,
        description=payload.description,
        expires_at=payload.expires_at,
    )
    await db.commit()
    return VoucherEnvelope(message="Voucher created successfully", voucher=VoucherResponse.model_validate(voucher))


@router.get("", response_model=VoucherListResponse)
async def list_vouchers(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
    type_filter: Annotated[VoucherType | None, Query(alias="type")] = None,
    is_redeemed: Annotated[bool | None, Query(alias="isRedeemed")] = None,
) -> VoucherListResponse:
    result = await VoucherService(db).list(
        user, page, user_id=user_id, type=type_filter, is_redeemed=is_redeemed
    )
    return VoucherListResponse(
        vouchers=[VoucherResponse.model_validate(v) for v in result.items],
        pagination=result.pagination(),
    )


@router.get(
    "/{voucher_id}",
    response_model=VoucherDetailEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_voucher(
    db: DbSession,
    user: CurrentUser,
    voucher_id: Annotated[UUID, Path()],
) -> VoucherDetailEnvelope:
    voucher = await VoucherService(db).get_visible(voucher_id, user)
    return VoucherDetailEnvelope(voucher=VoucherResponse.model_validate(voucher))


@router.put(
    "/{voucher_id}",
    response_model=VoucherEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def update_voucher(
    db: DbSession,
    manager: ManagerUser,
    voucher_id: Annotated[UUID, Path()],
    payload: VoucherUpdate,
) -> VoucherEnvelope:
    voucher = await VoucherService(db).update(
        voucher_id,
        type=payload.type,
        value=payload.value,
        description=payload.description,
        expires_at=payload.expires_at,
    )
    await db.commit()
    return VoucherEnvelope(message="Voucher updated successfully", voucher=VoucherResponse.model_validate(voucher))


@router.post(
    "/{voucher_id}/redeem",
    response_model=VoucherEnvelope,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def redeem_voucher(
    db: DbSession,
    user: CurrentUser,
    voucher_id: Annotated[UUID, Path()],
) -> VoucherEnvelope:
    """Redeem one of the caller's vouchers. Irreversible."""
    voucher = await VoucherService(db).redeem(voucher_id, user)
    await db.commit()
    return VoucherEnvelope(message="Voucher redeemed successfully", voucher=VoucherResponse.model_validate(voucher))


@router.delete(
    "/{voucher_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_voucher(
    db: DbSession,
    manager: ManagerUser,
    voucher_id: Annotated[UUID, Path()],
) -> MessageResponse:
    await VoucherService(db).delete(voucher_id)
    await db.commit()
    return MessageResponse(message="Voucher deleted successfully")
