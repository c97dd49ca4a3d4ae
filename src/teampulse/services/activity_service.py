"""Activity feed."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teampulse.errors import NotFoundError
from teampulse.models import Activity, ActivityType, User
from teampulse.services.pagination import Page, PageParams, paginate

_ACTIVITY_OPTIONS = (selectinload(Activity.kudos), selectinload(Activity.feedback))


class ActivityService:
    """Append-only feed of user-facing events."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        type: ActivityType,
        user_id: UUID,
        message: str,
        *,
        target_user_id: UUID | None = None,
        kudos_id: UUID | None = None,
        feedback_id: UUID | None = None,
    ) -> Activity:
        activity = Activity(
            type=ActivityType(type).value,
            user_id=user_id,
            target_user_id=target_user_id,
            message=message,
            kudos_id=kudos_id,
            feedback_id=feedback_id,
        )
        self.session.add(activity)
        await self.session.flush()
        return activity

    async def list(
        self,
        viewer: User,
        params: PageParams,
        type: ActivityType | None = None,
        user_id: UUID | None = None,
    ) -> Page[Activity]:
        """List activities; non-managers only see events they took part in."""
        query = select(Activity).options(*_ACTIVITY_OPTIONS)
        if type is not None:
            query = query.where(Activity.type == ActivityType(type).value)
        if user_id is not None:
            query = query.where(Activity.user_id == user_id)
        if not viewer.is_manager:
            query = query.where(
                or_(Activity.user_id == viewer.id, Activity.target_user_id == viewer.id)
            )
        return await paginate(self.session, query, params, Activity.created_at.desc())

    async def get(self, activity_id: UUID) -> Activity:
        result = await self.session.execute(
            select(Activity).where(Activity.id == activity_id).options(*_ACTIVITY_OPTIONS)
        )
        activity = result.scalar_one_or_none()
        if activity is None:
            raise NotFoundError("Activity not found")
        return activity
