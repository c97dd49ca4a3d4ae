"""Kudos budgets: lazy monthly reset, atomic deduction and allocation.

The monthly allotment is not reset by a scheduled job. Every read of a
budget checks whether the calendar month of ``reset_date`` is at least one
month behind now and, if so, zeroes ``used_budget`` and moves ``reset_date``
to now before anything else looks at the numbers.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.errors import (
    BudgetRequiredError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from teampulse.models import Budget, BudgetAllocationType, NotificationType, User, as_utc, utcnow
from teampulse.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def months_between(start: datetime, end: datetime) -> int:
    """Whole calendar months from ``start`` to ``end`` (day of month ignored)."""
    start = as_utc(start)
    end = as_utc(end)
    return (end.year - start.year) * 12 + (end.month - start.month)


def needs_monthly_reset(reset_date: datetime, now: datetime) -> bool:
    return months_between(reset_date, now) >= 1


def check_availability(budget: Budget, amount: Decimal) -> None:
    """Raise InsufficientFundsError if ``amount`` exceeds either cap.

    The total cap is checked first so its message wins when both are short.
    """
    available = budget.available_budget
    if available < amount:
        raise InsufficientFundsError("total", available, amount)
    available_monthly = budget.available_monthly_budget
    if available_monthly < amount:
        raise InsufficientFundsError("monthly", available_monthly, amount)


class BudgetService:
    """Reads and mutations of per-user budgets."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, user_id: UUID) -> Budget | None:
        result = await self.session.execute(select(Budget).where(Budget.user_id == user_id))
        return result.scalar_one_or_none()

    async def apply_monthly_reset(self, budget: Budget, now: datetime | None = None) -> bool:
        """Reset the used amount if a new calendar month started. Idempotent."""
        now = now or utcnow()
        if not needs_monthly_reset(budget.reset_date, now):
            return False
        budget.used_budget = ZERO
        budget.reset_date = now
        await self.session.flush()
        logger.info("Monthly budget reset for user %s", budget.user_id)
        return True

    async def get_for_user(self, user_id: UUID, now: datetime | None = None) -> Budget | None:
        """Load a user's budget, applying the lazy monthly reset."""
        budget = await self._load(user_id)
        if budget is not None:
            await self.apply_monthly_reset(budget, now)
        return budget

    async def get_or_create(self, user_id: UUID, now: datetime | None = None) -> Budget:
        budget = await self.get_for_user(user_id, now)
        if budget is None:
            budget = Budget(
                user_id=user_id,
                total_budget=ZERO,
                used_budget=ZERO,
                monthly_budget=ZERO,
                reset_date=now or utcnow(),
            )
            self.session.add(budget)
            await self.session.flush()
            await self.session.refresh(budget)
        return budget

    async def require_for_user(self, user_id: UUID) -> Budget:
        budget = await self.get_for_user(user_id)
        if budget is None:
            raise NotFoundError("Budget not found")
        return budget

    async def list_all(self) -> list[Budget]:
        """All budgets ordered by owner name, each with the reset applied."""
        result = await self.session.execute(select(Budget).join(Budget.user).order_by(User.name))
        budgets = list(result.scalars().all())
        now = utcnow()
        for budget in budgets:
            await self.apply_monthly_reset(budget, now)
        return budgets

    async def deduct(self, user_id: UUID, amount: Decimal, now: datetime | None = None) -> Budget:
        """Spend ``amount`` from the user's budget.

        The check and the increment are one conditional UPDATE, so two
        concurrent requests cannot push usage past either cap.
        """
        budget = await self.get_for_user(user_id, now)
        if budget is None:
            raise BudgetRequiredError()

        check_availability(budget, amount)

        result = await self.session.execute(
            update(Budget)
            .where(
                Budget.id == budget.id,
                Budget.used_budget + amount <= Budget.total_budget,
                Budget.used_budget + amount <= Budget.monthly_budget,
            )
            .values(used_budget=Budget.used_budget + amount)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(budget)
        if not result.rowcount:
            # Lost a race with another deduction; report against fresh numbers.
            check_availability(budget, amount)
            raise InsufficientFundsError("total", budget.available_budget, amount)
        return budget

    async def set_caps(
        self,
        user_id: UUID,
        total_budget: Decimal | None = None,
        monthly_budget: Decimal | None = None,
    ) -> Budget:
        """Overwrite the total and/or monthly caps.

        Neither cap may drop below what has already been spent this month.
        """
        budget = await self.get_or_create(user_id)
        if total_budget is not None and total_budget < budget.used_budget:
            raise ValidationError("Total budget cannot be less than used budget")
        if monthly_budget is not None and monthly_budget < budget.used_budget:
            raise ValidationError("Monthly budget cannot be less than used budget")
        if total_budget is not None:
            budget.total_budget = total_budget
        if monthly_budget is not None:
            budget.monthly_budget = monthly_budget
        await self.session.flush()
        return budget

    async def allocate(
        self,
        user_id: UUID,
        amount: Decimal,
        allocation_type: BudgetAllocationType,
    ) -> Budget:
        """Add ``amount`` to the user's total or monthly cap and notify them."""
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        allocation_type = BudgetAllocationType(allocation_type)
        budget = await self.get_or_create(user_id)
        column = (
            Budget.total_budget
            if allocation_type is BudgetAllocationType.TOTAL
            else Budget.monthly_budget
        )
        await self.session.execute(
            update(Budget)
            .where(Budget.id == budget.id)
            .values({column: column + amount})
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(budget)

        await NotificationService(self.session).notify(
            user_id,
            "Budget Allocated",
            f"You have been allocated ${amount} {allocation_type.value} budget for giving kudos.",
            NotificationType.INFO,
        )
        logger.info("Allocated %s %s budget to user %s", amount, allocation_type.value, user_id)
        return budget
