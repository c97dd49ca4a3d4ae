"""Team API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from teampulse.api.dependencies import CurrentUser, DbSession, ManagerUser, Pagination
from teampulse.api.schemas import (
    ErrorResponse,
    MessageResponse,
    TeamCreate,
    TeamDetailEnvelope,
    TeamEnvelope,
    TeamListResponse,
    TeamMemberCreate,
    TeamMemberEnvelope,
    TeamMemberResponse,
    TeamResponse,
    TeamUpdate,
)
from teampulse.services.team_service import TeamService

router = APIRouter(prefix="/teams", tags=["teams"])


# ============================================================================
# Team CRUD
# ============================================================================


@router.post(
    "",
    response_model=TeamEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_team(db: DbSession, manager: ManagerUser, payload: TeamCreate) -> TeamEnvelope:
    team = await TeamService(db).create(payload.name, payload.member_ids)
    await db.commit()
    return TeamEnvelope(message="Team created successfully", team=TeamResponse.model_validate(team))


@router.get("", response_model=TeamListResponse)
async def list_teams(db: DbSession, user: CurrentUser, page: Pagination) -> TeamListResponse:
    result = await TeamService(db).list(page)
    return TeamListResponse(
        teams=[TeamResponse.model_validate(t) for t in result.items],
        pagination=result.pagination(),
    )


@router.get("/{team_id}", response_model=TeamDetailEnvelope, responses={404: {"model": ErrorResponse}})
async def get_team(
    db: DbSession,
    user: CurrentUser,
    team_id: Annotated[UUID, Path()],
) -> TeamDetailEnvelope:
    team = await TeamService(db).get(team_id)
    return TeamDetailEnvelope(team=TeamResponse.model_validate(team))


@router.put("/{team_id}", response_model=TeamEnvelope, responses={404: {"model": ErrorResponse}})
async def update_team(
    db: DbSession,
    manager: ManagerUser,
    team_id: Annotated[UUID, Path()],
    payload: TeamUpdate,
) -> TeamEnvelope:
    team = await TeamService(db).update(team_id, payload.name)
    await db.commit()
    return TeamEnvelope(message="Team updated successfully", team=TeamResponse.model_validate(team))


@router.delete("/{team_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def delete_team(
    db: DbSession,
    manager: ManagerUser,
    team_id: Annotated[UUID, Path()],
) -> MessageResponse:
    """Delete a team; its memberships go with it."""
    await TeamService(db).delete(team_id)
    await db.commit()
    return MessageResponse(message="Team deleted successfully")


# ============================================================================
# Membership
# ============================================================================


@router.post(
    "/{team_id}/members",
    response_model=TeamMemberEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_member(
    db: DbSession,
    manager: ManagerUser,
    team_id: Annotated[UUID, Path()],
    payload: TeamMemberCreate,
) -> TeamMemberEnvelope:
    member = await TeamService(db).add_member(team_id, payload.user_id, payload.role)
    await db.commit()
    return TeamMemberEnvelope(
        message="Member added successfully",
        member=TeamMemberResponse.model_validate(member),
    )


@router.delete(
    "/{team_id}/members/{user_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def remove_member(
    db: DbSession,
    manager: ManagerUser,
    team_id: Annotated[UUID, Path()],
    user_id: Annotated[UUID, Path()],
) -> MessageResponse:
    await TeamService(db).remove_member(team_id, user_id)
    await db.commit()
    return MessageResponse(message="Member removed successfully")
