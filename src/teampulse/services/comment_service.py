"""Comments on kudos and feedback."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.errors import ForbiddenError, NotFoundError, ValidationError
from teampulse.models import Comment, Feedback, Kudos, NotificationType, User
from teampulse.services.kudos_service import can_view
from teampulse.services.notification_service import NotificationService
from teampulse.services.pagination import Page, PageParams, paginate


def _require_single_parent(kudos_id: UUID | None, feedback_id: UUID | None) -> None:
    if kudos_id is None and feedback_id is None:
        raise ValidationError("Either kudosId or feedbackId is required")
    if kudos_id is not None and feedback_id is not None:
        raise ValidationError("Cannot comment on both kudos and feedback simultaneously")


class CommentService:
    """Comment threads, gated on whether the caller can see the parent item."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notifications = NotificationService(session)

    async def get(self, comment_id: UUID) -> Comment:
        result = await self.session.execute(
            select(Comment).where(Comment.id == comment_id).execution_options(populate_existing=True)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def _load_parent(self, kudos_id: UUID | None, feedback_id: UUID | None) -> Kudos | Feedback:
        if kudos_id is not None:
            parent = await self.session.get(Kudos, kudos_id)
            if parent is None:
                raise NotFoundError("Kudos not found")
            return parent
        parent = await self.session.get(Feedback, feedback_id)
        if parent is None:
            raise NotFoundError("Feedback not found")
        return parent

    async def _require_visible_parent(
        self, viewer: User, kudos_id: UUID | None, feedback_id: UUID | None
    ) -> None:
        parents = []
        if kudos_id is not None:
            parents.append(await self._load_parent(kudos_id, None))
        if feedback_id is not None:
            parents.append(await self._load_parent(None, feedback_id))
        if not all(can_view(parent, viewer) for parent in parents):
            raise ForbiddenError("Access denied")

    async def get_visible(self, comment_id: UUID, viewer: User) -> Comment:
        """Load a comment, hiding threads of private items the viewer cannot see."""
        comment = await self.get(comment_id)
        await self._require_visible_parent(viewer, comment.kudos_id, comment.feedback_id)
        return comment

    async def create(
        self,
        author: User,
        *,
        message: str,
        kudos_id: UUID | None = None,
        feedback_id: UUID | None = None,
    ) -> Comment:
        """Comment on exactly one kudos or feedback the author can see."""
        _require_single_parent(kudos_id, feedback_id)
        parent = await self._load_parent(kudos_id, feedback_id)
        if not can_view(parent, author):
            raise ForbiddenError("Access denied")

        comment = Comment(
            from_user_id=author.id,
            kudos_id=kudos_id,
            feedback_id=feedback_id,
            message=message,
        )
        self.session.add(comment)
        await self.session.flush()

        if parent.from_user_id != author.id:
            kind = "kudos" if kudos_id is not None else "feedback"
            await self.notifications.notify(
                parent.from_user_id,
                "New Comment",
                f"{author.name} commented on your {kind}",
                NotificationType.INFO,
            )
        return await self.get(comment.id)

    async def list(
        self,
        viewer: User,
        params: PageParams,
        *,
        kudos_id: UUID | None = None,
        feedback_id: UUID | None = None,
    ) -> Page[Comment]:
        if kudos_id is None and feedback_id is None:
            raise ValidationError("Either kudosId or feedbackId is required")
        await self._require_visible_parent(viewer, kudos_id, feedback_id)
        query = select(Comment)
        if kudos_id is not None:
            query = query.where(Comment.kudos_id == kudos_id)
        if feedback_id is not None:
            query = query.where(Comment.feedback_id == feedback_id)
        return await paginate(self.session, query, params, Comment.created_at.asc(), Comment.id)

    async def update(self, comment_id: UUID, editor: User, message: str) -> Comment:
        comment = await self.get(comment_id)
        if comment.from_user_id != editor.id:
            raise ForbiddenError("You can only edit your own comments")
        comment.message = message
        await self.session.flush()
        return comment

    async def delete(self, comment_id: UUID, actor: User) -> None:
        comment = await self.get(comment_id)
        if comment.from_user_id != actor.id and not actor.is_admin:
            raise ForbiddenError("You can only delete your own comments")
        await self.session.delete(comment)
        await self.session.flush()
