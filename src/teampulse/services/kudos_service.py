"""Kudos creation, approval workflow, editing and listing.

Creation runs inside the caller's transaction: the budget deduction, the
kudos row, its activity entry, the counter increments and the recipient
notification are committed together or not at all.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teampulse.errors import ForbiddenError, NotFoundError, ValidationError
from teampulse.models import (
    ActivityType,
    Comment,
    Kudos,
    KudosStatus,
    KudosTag,
    NotificationType,
    User,
)
from teampulse.services.activity_service import ActivityService
from teampulse.services.budget_service import BudgetService
from teampulse.services.notification_service import NotificationService
from teampulse.services.pagination import Page, PageParams, paginate
from teampulse.services.state_machine import KudosStateMachine, initial_status

logger = logging.getLogger(__name__)


def format_amount(amount: Decimal) -> str:
    return f"{amount.normalize():f}"


def can_view(item, viewer: User) -> bool:
    """Private kudos/feedback are visible to sender, recipient and managers."""
    return (
        item.is_public
        or item.from_user_id == viewer.id
        or item.to_user_id == viewer.id
        or viewer.is_manager
    )


class KudosService:
    """Business rules for kudos."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.budgets = BudgetService(session)
        self.activities = ActivityService(session)
        self.notifications = NotificationService(session)

    async def get(self, kudos_id: UUID, *, with_comments: bool = False) -> Kudos:
        query = select(Kudos).where(Kudos.id == kudos_id).execution_options(populate_existing=True)
        if with_comments:
            query = query.options(selectinload(Kudos.comments).selectinload(Comment.from_user))
        result = await self.session.execute(query)
        kudos = result.scalar_one_or_none()
        if kudos is None:
            raise NotFoundError("Kudos not found")
        return kudos

    async def get_visible(self, kudos_id: UUID, viewer: User) -> Kudos:
        kudos = await self.get(kudos_id, with_comments=True)
        if not can_view(kudos, viewer):
            raise ForbiddenError("Access denied")
        return kudos

    async def _load_tags(self, tag_ids: Sequence[UUID]) -> list[KudosTag]:
        if not tag_ids:
            return []
        result = await self.session.execute(select(KudosTag).where(KudosTag.id.in_(set(tag_ids))))
        tags = list(result.scalars().all())
        if len(tags) != len(set(tag_ids)):
            raise ValidationError("Unknown kudos tag")
        return tags

    async def _adjust_counters(self, from_user_id: UUID, to_user_id: UUID, delta: int) -> None:
        await self.session.execute(
            update(User)
            .where(User.id == from_user_id)
            .values(total_kudos_sent=User.total_kudos_sent + delta)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            update(User)
            .where(User.id == to_user_id)
            .values(total_kudos_received=User.total_kudos_received + delta)
            .execution_options(synchronize_session=False)
        )

    async def create(
        self,
        sender: User,
        *,
        to_user_id: UUID,
        message: str,
        tag_ids: Sequence[UUID] | None = None,
        is_public: bool = True,
        monetary_amount: Decimal | None = None,
        currency: str = "USD",
    ) -> Kudos:
        """Send kudos, spending budget when a monetary amount is given."""
        from_user = await self.session.get(User, sender.id)
        to_user = await self.session.get(User, to_user_id)
        if from_user is None or to_user is None:
            raise NotFoundError("User not found")
        if from_user.id == to_user.id:
            raise ValidationError("You cannot send kudos to yourself")

        amount = monetary_amount or Decimal("0")
        if amount > 0:
            await self.budgets.deduct(from_user.id, amount)

        status = initial_status(from_user.role, to_user.role)
        kudos = Kudos(
            from_user_id=from_user.id,
            to_user_id=to_user.id,
            message=message,
            is_public=is_public,
            status=status.value,
            monetary_amount=amount,
            currency=currency,
        )
        kudos.tags = await self._load_tags(tag_ids or [])
        self.session.add(kudos)
        await self.session.flush()

        worth = f" worth ${format_amount(amount)}" if amount > 0 else ""
        await self.activities.record(
            ActivityType.KUDOS,
            from_user.id,
            f"gave kudos{worth} to {to_user.name}",
            target_user_id=to_user.id,
            kudos_id=kudos.id,
        )

        if status is KudosStatus.APPROVED:
            await self._adjust_counters(from_user.id, to_user.id, 1)
            await self.notifications.notify(
                to_user.id,
                "New Kudos Received!",
                f"You received kudos{worth} from {from_user.name}!",
                NotificationType.SUCCESS,
            )
        else:
            await self.notifications.notify(
                to_user.id,
                "Kudos Pending Approval",
                f"{from_user.name} sent you kudos (pending approval)",
                NotificationType.INFO,
            )

        logger.info("Kudos %s from %s to %s created as %s", kudos.id, from_user.id, to_user.id, status.value)
        return await self.get(kudos.id)

    async def list(
        self,
        viewer: User,
        params: PageParams,
        *,
        from_user_id: UUID | None = None,
        to_user_id: UUID | None = None,
        status: KudosStatus | None = None,
        is_public: bool | None = None,
    ) -> Page[Kudos]:
        """List kudos matching the filters that ``viewer`` may see."""
        query = select(Kudos)
        if from_user_id is not None:
            query = query.where(Kudos.from_user_id == from_user_id)
        if to_user_id is not None:
            query = query.where(Kudos.to_user_id == to_user_id)
        if status is not None:
            query = query.where(Kudos.status == KudosStatus(status).value)
        if is_public is not None:
            query = query.where(Kudos.is_public == is_public)
        if not viewer.is_manager:
            query = query.where(
                or_(
                    Kudos.is_public.is_(True),
                    Kudos.from_user_id == viewer.id,
                    Kudos.to_user_id == viewer.id,
                )
            )
        return await paginate(self.session, query, params, Kudos.created_at.desc(), Kudos.id)

    async def update(
        self,
        kudos_id: UUID,
        editor: User,
        *,
        message: str,
        tag_ids: Sequence[UUID] | None = None,
        is_public: bool | None = None,
    ) -> Kudos:
        kudos = await self.get(kudos_id)
        if kudos.from_user_id != editor.id and not editor.is_admin:
            raise ForbiddenError("You can only edit your own kudos")

        kudos.message = message
        if is_public is not None:
            kudos.is_public = is_public
        if tag_ids is not None:
            kudos.tags = await self._load_tags(tag_ids)
        await self.session.flush()
        return await self.get(kudos.id)

    async def _transition(self, kudos_id: UUID, to_status: KudosStatus, reason: str | None) -> Kudos:
        kudos = await self.get(kudos_id)
        KudosStateMachine(kudos).transition_to(to_status, reason)
        await self.session.flush()
        return kudos

    async def approve(self, kudos_id: UUID, approver: User, reason: str | None = None) -> Kudos:
        """PENDING → APPROVED: count it and tell the recipient."""
        kudos = await self._transition(kudos_id, KudosStatus.APPROVED, reason)
        await self._adjust_counters(kudos.from_user_id, kudos.to_user_id, 1)
        await self.notifications.notify(
            kudos.to_user_id,
            "Kudos Approved!",
            f"Kudos from {kudos.from_user.name} has been approved!",
            NotificationType.SUCCESS,
        )
        logger.info("Kudos %s approved by %s", kudos.id, approver.id)
        return await self.get(kudos.id)

    async def reject(self, kudos_id: UUID, approver: User, reason: str | None = None) -> Kudos:
        """PENDING → REJECTED: tell the sender. Counters and budget are untouched."""
        kudos = await self._transition(kudos_id, KudosStatus.REJECTED, reason)
        suffix = f": {reason}" if reason else ""
        await self.notifications.notify(
            kudos.from_user_id,
            "Kudos Rejected",
            f"Your kudos to {kudos.to_user.name} was rejected{suffix}",
            NotificationType.WARNING,
        )
        logger.info("Kudos %s rejected by %s", kudos.id, approver.id)
        return await self.get(kudos.id)

    async def delete(self, kudos_id: UUID, actor: User) -> None:
        """Delete kudos (comments cascade); approved kudos are uncounted."""
        kudos = await self.get(kudos_id)
        if kudos.from_user_id != actor.id and not actor.is_admin:
            raise ForbiddenError("You can only delete your own kudos")

        was_counted = KudosStateMachine.is_counted(kudos.status)
        from_user_id, to_user_id = kudos.from_user_id, kudos.to_user_id
        await self.session.delete(kudos)
        await self.session.flush()
        if was_counted:
            await self._adjust_counters(from_user_id, to_user_id, -1)

    async def list_tags(self) -> list[KudosTag]:
        result = await self.session.execute(select(KudosTag).order_by(KudosTag.name))
        return list(result.scalars().all())
