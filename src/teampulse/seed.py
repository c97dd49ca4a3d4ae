"""Seed data: the default kudos tag catalog and starter budgets."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.models import Budget, KudosTag, User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_TAGS: list[tuple[str, str, str]] = [
    ("Teamwork", "🤝", "bg-blue-100 text-blue-800"),
    ("Leadership", "👑", "bg-purple-100 text-purple-800"),
    ("Innovation", "💡", "bg-yellow-100 text-yellow-800"),
    ("Communication", "💬", "bg-green-100 text-green-800"),
    ("Problem Solving", "🔧", "bg-orange-100 text-orange-800"),
    ("Mentorship", "📚", "bg-indigo-100 text-indigo-800"),
    ("Creativity", "🎨", "bg-pink-100 text-pink-800"),
    ("Reliability", "✅", "bg-emerald-100 text-emerald-800"),
    ("Positive Attitude", "😊", "bg-rose-100 text-rose-800"),
    ("Going Above & Beyond", "⭐", "bg-amber-100 text-amber-800"),
]

# (total, monthly) per role
STARTER_BUDGETS = {
    UserRole.ADMIN.value: (Decimal("1000"), Decimal("200")),
}
DEFAULT_STARTER_BUDGET = (Decimal("500"), Decimal("100"))


async def seed_tags(session: AsyncSession) -> list[KudosTag]:
    """Insert missing default tags; returns the ones created."""
    existing = set((await session.execute(select(KudosTag.name))).scalars().all())
    created = []
    for name, emoji, color in DEFAULT_TAGS:
        if name in existing:
            continue
        tag = KudosTag(name=name, emoji=emoji, color=color)
        session.add(tag)
        created.append(tag)
    await session.flush()
    logger.info("Seeded %d kudos tags", len(created))
    return created


async def seed_budgets(session: AsyncSession) -> list[Budget]:
    """Give every user without a budget a role-based starter budget."""
    result = await session.execute(
        select(User).outerjoin(Budget, Budget.user_id == User.id).where(Budget.id.is_(None))
    )
    created = []
    for user in result.scalars().all():
        total, monthly = STARTER_BUDGETS.get(user.role, DEFAULT_STARTER_BUDGET)
        budget = Budget(
            user_id=user.id,
            total_budget=total,
            used_budget=Decimal("0"),
            monthly_budget=monthly,
        )
        session.add(budget)
        created.append(budget)
    await session.flush()
    logger.info("Created %d budgets", len(created))
    return created
