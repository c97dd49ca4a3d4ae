"""Activity feed endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from teampulse.api.dependencies import CurrentUser, DbSession, Pagination
from teampulse.api.schemas import (
    ActivityEnvelope,
    ActivityListResponse,
    ActivityResponse,
    ErrorResponse,
)
from teampulse.models import ActivityType
from teampulse.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=ActivityListResponse)
async def list_activities(
    db: DbSession,
    user: CurrentUser,
    page: Pagination,
    type_filter: Annotated[ActivityType | None, Query(alias="type")] = None,
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
) -> ActivityListResponse:
    result = await ActivityService(db).list(user, page, type_filter, user_id)
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(a) for a in result.items],
        pagination=result.pagination(),
    )


@router.get("/{activity_id}", response_model=ActivityEnvelope, responses={404: {"model": ErrorResponse}})
async def get_activity(
    db: DbSession,
    user: CurrentUser,
    activity_id: Annotated[UUID, Path()],
) -> ActivityEnvelope:
    activity = await ActivityService(db).get(activity_id)
    return ActivityEnvelope(activity=ActivityResponse.model_validate(activity))
