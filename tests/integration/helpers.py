"""Database lookups shared by the API tests."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teampulse.models import Budget, KudosTag, Notification


async def notifications_for(db: async_sessionmaker[AsyncSession], user_id: UUID) -> list[Notification]:
    """All notifications of a user, oldest first."""
    async with db() as session:
        result = await session.execute(
            select(Notification).where(Notification.user_id == user_id).order_by(Notification.created_at)
        )
        return list(result.scalars().all())


async def budget_for(db: async_sessionmaker[AsyncSession], user_id: UUID) -> Budget | None:
    async with db() as session:
        return await session.scalar(select(Budget).where(Budget.user_id == user_id))


async def add_tag(db: async_sessionmaker[AsyncSession], name: str, emoji: str = "🤝") -> KudosTag:
    async with db() as session:
        tag = KudosTag(name=name, emoji=emoji, color="bg-blue-100 text-blue-800")
        session.add(tag)
        await session.commit()
        return tag


def error_message(response: Any) -> str:
    return response.json()["error"]["message"]
