"""User directory, profile updates, statistics and deactivation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from teampulse.models import Kudos, KudosStatus, User, UserRole, utcnow
from teampulse.services.pagination import Page, PageParams, paginate

logger = logging.getLogger(__name__)

RECENT_KUDOS_LIMIT = 5
STATS_WINDOW_MONTHS = 6


def months_ago(now: datetime, months: int) -> datetime:
    """Same day ``months`` calendar months earlier, clamped to the month end."""
    index = now.year * 12 + now.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    day = now.day
    while day > 28:
        try:
            return now.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1
    return now.replace(year=year, month=month, day=day)


def _contains(column, term: str):
    return func.lower(column).contains(term.lower(), autoescape=True)


@dataclass
class UserStats:
    recent_kudos_received: list[Kudos] = field(default_factory=list)
    recent_kudos_sent: list[Kudos] = field(default_factory=list)
    kudos_by_status: dict[str, int] = field(default_factory=dict)


class UserService:
    """User directory, leaderboard, stats and profile changes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list(
        self,
        params: PageParams,
        *,
        search: str | None = None,
        department: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> Page[User]:
        query = select(User)
        if search:
            query = query.where(
                or_(
                    _contains(User.name, search),
                    _contains(User.email, search),
                    _contains(User.department, search),
                )
            )
        if department:
            query = query.where(User.department == department)
        if role is not None:
            query = query.where(User.role == UserRole(role).value)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        return await paginate(self.session, query, params, User.name, User.id)

    async def search(self, q: str | None, limit: int = 10) -> list[User]:
        """Active users whose name, email or department contains ``q``."""
        if not q or not q.strip():
            raise ValidationError("Search query is required")
        term = q.strip()
        result = await self.session.execute(
            select(User)
            .where(
                User.is_active.is_(True),
                or_(
                    _contains(User.name, term),
                    _contains(User.email, term),
                    _contains(User.department, term),
                ),
            )
            .order_by(User.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def leaderboard(self, limit: int = 10) -> list[User]:
        result = await self.session.execute(
            select(User)
            .where(User.is_active.is_(True))
            .order_by(User.total_kudos_received.desc(), User.total_kudos_sent.desc(), User.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def stats(self, user_id: UUID, now: datetime | None = None) -> UserStats:
        user = await self.get(user_id)
        approved = KudosStatus.APPROVED.value

        async def recent(*criteria: Any) -> list[Kudos]:
            result = await self.session.execute(
                select(Kudos)
                .where(Kudos.status == approved, *criteria)
                .order_by(Kudos.created_at.desc())
                .limit(RECENT_KUDOS_LIMIT)
            )
            return list(result.scalars().all())

        since = months_ago(now or utcnow(), STATS_WINDOW_MONTHS)
        rows = await self.session.execute(
            select(Kudos.status, func.count(Kudos.id))
            .where(
                or_(Kudos.from_user_id == user.id, Kudos.to_user_id == user.id),
                Kudos.created_at >= since,
            )
            .group_by(Kudos.status)
        )
        return UserStats(
            recent_kudos_received=await recent(Kudos.to_user_id == user.id),
            recent_kudos_sent=await recent(Kudos.from_user_id == user.id),
            kudos_by_status={status: count for status, count in rows.all()},
        )

    async def update(
        self,
        user_id: UUID,
        editor: User,
        *,
        name: str | None = None,
        email: str | None = None,
        department: str | None = None,
        avatar: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> User:
        """Apply profile changes; role and active flag are admin-only."""
        user = await self.get(user_id)
        if user.id != editor.id and not editor.is_admin:
            raise ForbiddenError("You can only edit your own profile")
        if (role is not None or is_active is not None) and not editor.is_admin:
            raise ForbiddenError("Only admins can change user roles and status")

        if email is not None:
            email = email.strip().lower()
            if email != user.email:
                taken = await self.session.scalar(select(User.id).where(func.lower(User.email) == email))
                if taken is not None:
                    raise ConflictError("Email already in use")
                user.email = email

        if name is not None:
            user.name = name
        if department is not None:
            user.department = department
        if avatar is not None:
            user.avatar = avatar
        if role is not None:
            user.role = UserRole(role).value
        if is_active is not None:
            user.is_active = is_active
        await self.session.flush()
        return user

    async def deactivate(self, user_id: UUID, admin: User) -> User:
        user = await self.get(user_id)
        if user.id == admin.id:
            raise ValidationError("You cannot delete your own account")
        user.is_active = False
        await self.session.flush()
        logger.info("User %s deactivated by %s", user.id, admin.id)
        return user
