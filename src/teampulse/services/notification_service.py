"""User notifications."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.errors import ForbiddenError, NotFoundError
from teampulse.models import Notification, NotificationType, User, utcnow
from teampulse.services.pagination import Page, PageParams, paginate


class NotificationService:
    """Create and manage notifications owned by a single user."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def notify(
        self,
        user_id: UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=NotificationType(type).value,
            title=title,
            message=message,
        )
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def list_for_user(
        self,
        user: User,
        params: PageParams,
        is_read: bool | None = None,
    ) -> Page[Notification]:
        query = select(Notification).where(Notification.user_id == user.id)
        if is_read is not None:
            query = query.where(Notification.is_read == is_read)
        return await paginate(self.session, query, params, Notification.created_at.desc())

    async def unread_count(self, user: User) -> int:
        count = await self.session.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user.id, Notification.is_read.is_(False))
        )
        return count or 0

    async def _get_owned(self, notification_id: UUID, user: User) -> Notification:
        notification = await self.session.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.user_id != user.id:
            raise ForbiddenError("Access denied")
        return notification

    async def mark_read(self, notification_id: UUID, user: User) -> Notification:
        notification = await self._get_owned(notification_id, user)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await self.session.flush()
        return notification

    async def mark_all_read(self, user: User) -> int:
        """Mark every unread notification of ``user`` read; returns how many."""
        result = await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user.id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete(self, notification_id: UUID, user: User) -> None:
        notification = await self._get_owned(notification_id, user)
        await self.session.delete(notification)
        await self.session.flush()
