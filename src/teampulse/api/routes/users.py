"""User directory endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from teampulse.api.dependencies import AdminUser, CurrentUser, DbSession, Pagination
from teampulse.api.schemas import (
    ErrorResponse,
    KudosResponse,
    MeResponse,
    UserListResponse,
    UserResponse,
    UserSearchResponse,
    UserStatsBody,
    UserStatsResponse,
    UserUpdate,
)
from teampulse.models import UserRole
from teampulse.services.pagination import MAX_LIMIT
from teampulse.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    search: str | None = None,
    department: str | None = None,
    role: UserRole | None = None,
    is_active: Annotated[bool | None, Query(alias="isActive")] = None,
) -> UserListResponse:
    """List users ordered by name."""
    result = await UserService(db).list(
        page, search=search, department=department, role=role, is_active=is_active
    )
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in result.items],
        pagination=result.pagination(),
    )


@router.get("/search", response_model=UserSearchResponse, responses={400: {"model": ErrorResponse}})
@router.get("/search/users", response_model=UserSearchResponse, responses={400: {"model": ErrorResponse}})
async def search_users(
    db: DbSession,
    user: CurrentUser,
    q: str | None = None,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = 10,
) -> UserSearchResponse:
    users = await UserService(db).search(q, limit)
    return UserSearchResponse(users=[UserResponse.model_validate(u) for u in users])


@router.get("/leaderboard", response_model=UserSearchResponse)
async def leaderboard(
    db: DbSession,
    user: CurrentUser,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = 10,
) -> UserSearchResponse:
    """Active users ranked by kudos received."""
    users = await UserService(db).leaderboard(limit)
    return UserSearchResponse(users=[UserResponse.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=MeResponse, responses={404: {"model": ErrorResponse}})
async def get_user(
    db: DbSession,
    user: CurrentUser,
    user_id: Annotated[UUID, Path()],
) -> MeResponse:
    found = await UserService(db).get(user_id)
    return MeResponse(user=UserResponse.model_validate(found))


@router.get("/{user_id}/stats", response_model=UserStatsResponse, responses={404: {"model": ErrorResponse}})
async def get_user_stats(
    db: DbSession,
    user: CurrentUser,
    user_id: Annotated[UUID, Path()],
) -> UserStatsResponse:
    service = UserService(db)
    found = await service.get(user_id)
    stats = await service.stats(user_id)
    return UserStatsResponse(
        user=UserResponse.model_validate(found),
        stats=UserStatsBody(
            recent_kudos_received=[KudosResponse.model_validate(k) for k in stats.recent_kudos_received],
            recent_kudos_sent=[KudosResponse.model_validate(k) for k in stats.recent_kudos_sent],
            kudos_by_status=stats.kudos_by_status,
        ),
    )


@router.put(
    "/{user_id}",
    response_model=MeResponse,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_user(
    db: DbSession,
    user: CurrentUser,
    user_id: Annotated[UUID, Path()],
    payload: UserUpdate,
) -> MeResponse:
    updated = await UserService(db).update(
        user_id,
        user,
        name=payload.name,
        email=payload.email,
        department=payload.department,
        avatar=str(payload.avatar) if payload.avatar is not None else None,
        role=payload.role,
        is_active=payload.is_active,
    )
    await db.commit()
    return MeResponse(user=UserResponse.model_validate(updated))


@router.delete("/{user_id}", response_model=MeResponse, responses={400: {"model": ErrorResponse}})
async def deactivate_user(
    db: DbSession,
    admin: AdminUser,
    user_id: Annotated[UUID, Path()],
) -> MeResponse:
    """Soft delete: the account is deactivated, not removed."""
    user = await UserService(db).deactivate(user_id, admin)
    await db.commit()
    return MeResponse(user=UserResponse.model_validate(user))
