"""Feedback submission, review and listing."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teampulse.errors import ForbiddenError, NotFoundError
from teampulse.models import (
    ActivityType,
    Comment,
    Feedback,
    FeedbackStatus,
    FeedbackType,
    NotificationType,
    User,
)
from teampulse.services.activity_service import ActivityService
from teampulse.services.kudos_service import can_view
from teampulse.services.notification_service import NotificationService
from teampulse.services.pagination import Page, PageParams, paginate


def hides_sender(feedback: Feedback, viewer: User) -> bool:
    """Anonymous feedback only reveals its author to the author and managers."""
    return feedback.is_anonymous and feedback.from_user_id != viewer.id and not viewer.is_manager


class FeedbackService:
    """Feedback between users, with anonymous senders masked on read."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activities = ActivityService(session)
        self.notifications = NotificationService(session)

    async def get(self, feedback_id: UUID, *, with_comments: bool = False) -> Feedback:
        query = select(Feedback).where(Feedback.id == feedback_id).execution_options(populate_existing=True)
        if with_comments:
            query = query.options(selectinload(Feedback.comments).selectinload(Comment.from_user))
        result = await self.session.execute(query)
        feedback = result.scalar_one_or_none()
        if feedback is None:
            raise NotFoundError("Feedback not found")
        return feedback

    async def get_visible(self, feedback_id: UUID, viewer: User) -> Feedback:
        feedback = await self.get(feedback_id, with_comments=True)
        if not can_view(feedback, viewer):
            raise ForbiddenError("Access denied")
        return feedback

    async def create(
        self,
        sender: User,
        *,
        message: str,
        type: FeedbackType,
        to_user_id: UUID | None = None,
        is_public: bool = True,
        is_anonymous: bool = False,
    ) -> Feedback:
        to_user = None
        if to_user_id is not None:
            to_user = await self.session.get(User, to_user_id)
            if to_user is None:
                raise NotFoundError("User not found")

        type = FeedbackType(type)
        feedback = Feedback(
            from_user_id=sender.id,
            to_user_id=to_user_id,
            message=message,
            type=type.value,
            is_public=is_public,
            is_anonymous=is_anonymous,
        )
        self.session.add(feedback)
        await self.session.flush()

        kind = type.value.lower()
        await self.activities.record(
            ActivityType.FEEDBACK,
            sender.id,
            f"gave {kind} feedback to {to_user.name}" if to_user else f"submitted {kind} feedback",
            target_user_id=to_user_id,
            feedback_id=feedback.id,
        )

        if to_user is not None:
            origin = " (anonymous)" if is_anonymous else f" from {sender.name}"
            await self.notifications.notify(
                to_user.id,
                "New Feedback Received",
                f"You received {kind} feedback{origin}",
                NotificationType.INFO,
            )
        return await self.get(feedback.id)

    async def list(
        self,
        viewer: User,
        params: PageParams,
        *,
        from_user_id: UUID | None = None,
        to_user_id: UUID | None = None,
        type: FeedbackType | None = None,
        status: FeedbackStatus | None = None,
        is_public: bool | None = None,
    ) -> Page[Feedback]:
        query = select(Feedback)
        if from_user_id is not None:
            query = query.where(Feedback.from_user_id == from_user_id)
        if to_user_id is not None:
            query = query.where(Feedback.to_user_id == to_user_id)
        if type is not None:
            query = query.where(Feedback.type == FeedbackType(type).value)
        if status is not None:
            query = query.where(Feedback.status == FeedbackStatus(status).value)
        if is_public is not None:
            query = query.where(Feedback.is_public == is_public)
        if not viewer.is_manager:
            query = query.where(
                or_(
                    Feedback.is_public.is_(True),
                    Feedback.from_user_id == viewer.id,
                    Feedback.to_user_id == viewer.id,
                )
            )
        return await paginate(self.session, query, params, Feedback.created_at.desc(), Feedback.id)

    async def update(
        self,
        feedback_id: UUID,
        editor: User,
        *,
        message: str,
        type: FeedbackType | None = None,
        is_public: bool | None = None,
    ) -> Feedback:
        feedback = await self.get(feedback_id)
        if feedback.from_user_id != editor.id and not editor.is_admin:
            raise ForbiddenError("You can only edit your own feedback")
        feedback.message = message
        if type is not None:
            feedback.type = FeedbackType(type).value
        if is_public is not None:
            feedback.is_public = is_public
        await self.session.flush()
        return await self.get(feedback.id)

    async def review(self, feedback_id: UUID, status: FeedbackStatus) -> Feedback:
        """Set the review status and tell the author."""
        feedback = await self.get(feedback_id)
        status = FeedbackStatus(status)
        feedback.status = status.value
        await self.session.flush()

        word = status.value.lower()
        await self.notifications.notify(
            feedback.from_user_id,
            f"Feedback {word}",
            f"Your feedback has been {word}",
            NotificationType.WARNING if status is FeedbackStatus.FLAGGED else NotificationType.INFO,
        )
        return feedback

    async def delete(self, feedback_id: UUID, actor: User) -> None:
        feedback = await self.get(feedback_id)
        if feedback.from_user_id != actor.id and not actor.is_admin:
            raise ForbiddenError("You can only delete your own feedback")
        await self.session.delete(feedback)
        await self.session.flush()
