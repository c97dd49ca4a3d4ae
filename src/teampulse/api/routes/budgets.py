"""Budget endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from teampulse.api.dependencies import CurrentUser, DbSession, ManagerUser
from teampulse.api.schemas import (
    BudgetAllocateRequest,
    BudgetEnvelope,
    BudgetListResponse,
    BudgetMessageEnvelope,
    BudgetResponse,
    BudgetUpdate,
    ErrorResponse,
)
from teampulse.services.budget_service import BudgetService

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("/me", response_model=BudgetEnvelope)
async def get_my_budget(db: DbSession, user: CurrentUser) -> BudgetEnvelope:
    """The caller's budget; an empty one is created on first access."""
    budget = await BudgetService(db).get_or_create(user.id)
    await db.commit()
    return BudgetEnvelope(budget=BudgetResponse.model_validate(budget))


@router.put("/me", response_model=BudgetMessageEnvelope)
async def update_my_budget(
    db: DbSession,
    manager: ManagerUser,
    payload: BudgetUpdate,
) -> BudgetMessageEnvelope:
    budget = await BudgetService(db).set_caps(
        manager.id,
        total_budget=payload.total_budget,
        monthly_budget=payload.monthly_budget,
    )
    await db.commit()
    return BudgetMessageEnvelope(
        message="Budget updated successfully",
        budget=BudgetResponse.model_validate(budget),
    )


@router.post(
    "/allocate",
    response_model=BudgetMessageEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def allocate_budget(
    db: DbSession,
    manager: ManagerUser,
    payload: BudgetAllocateRequest,
) -> BudgetMessageEnvelope:
    """Add to a user's total or monthly cap."""
    budget = await BudgetService(db).allocate(payload.user_id, payload.amount, payload.type)
    await db.commit()
    return BudgetMessageEnvelope(
        message="Budget allocated successfully",
        budget=BudgetResponse.model_validate(budget),
    )


@router.get("/all", response_model=BudgetListResponse)
async def list_budgets(db: DbSession, manager: ManagerUser) -> BudgetListResponse:
    budgets = await BudgetService(db).list_all()
    await db.commit()
    return BudgetListResponse(budgets=[BudgetResponse.model_validate(b) for b in budgets])


@router.get(
    "/user/{user_id}",
    response_model=BudgetEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_user_budget(
    db: DbSession,
    manager: ManagerUser,
    user_id: Annotated[UUID, Path()],
) -> BudgetEnvelope:
    budget = await BudgetService(db).require_for_user(user_id)
    await db.commit()
    return BudgetEnvelope(budget=BudgetResponse.model_validate(budget))
