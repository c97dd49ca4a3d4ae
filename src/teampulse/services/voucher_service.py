"""Reward vouchers: issuing, listing and one-time redemption."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.errors import ForbiddenError, InvalidStateError, NotFoundError
from teampulse.models import ActivityType, NotificationType, User, Voucher, VoucherType, utcnow
from teampulse.services.activity_service import ActivityService
from teampulse.services.kudos_service import format_amount
from teampulse.services.notification_service import NotificationService
from teampulse.services.pagination import Page, PageParams, paginate

logger = logging.getLogger(__name__)


class VoucherService:
    """Voucher issuing and redemption over one session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activities = ActivityService(session)
        self.notifications = NotificationService(session)

    async def get(self, voucher_id: UUID) -> Voucher:
        result = await self.session.execute(
            select(Voucher).where(Voucher.id == voucher_id).execution_options(populate_existing=True)
        )
        voucher = result.scalar_one_or_none()
        if voucher is None:
            raise NotFoundError("Voucher not found")
        return voucher

    async def get_visible(self, voucher_id: UUID, viewer: User) -> Voucher:
        voucher = await self.get(voucher_id)
        if voucher.user_id != viewer.id and not viewer.is_manager:
            raise ForbiddenError("Access denied")
        return voucher

    async def create(
        self,
        issuer: User,
        *,
        user_id: UUID,
        type: VoucherType,
        value: Decimal,
        description: str,
        expires_at: datetime | None = None,
    ) -> Voucher:
        owner = await self.session.get(User, user_id)
        if owner is None:
            raise NotFoundError("User not found")

        type = VoucherType(type)
        voucher = Voucher(
            user_id=owner.id,
            type=type.value,
            value=value,
            description=description,
            expires_at=expires_at,
        )
        self.session.add(voucher)
        await self.session.flush()

        await self.activities.record(
            ActivityType.VOUCHER,
            issuer.id,
            f"awarded {type.label} voucher to {owner.name}",
            target_user_id=owner.id,
        )
        await self.notifications.notify(
            owner.id,
            "New Voucher Awarded!",
            f"You received a {type.label} voucher worth ${format_amount(Decimal(value))}",
            NotificationType.SUCCESS,
        )
        return await self.get(voucher.id)

    async def list(
        self,
        viewer: User,
        params: PageParams,
        *,
        user_id: UUID | None = None,
        type: VoucherType | None = None,
        is_redeemed: bool | None = None,
    ) -> Page[Voucher]:
        """Managers may list anyone's vouchers; others only their own."""
        query = select(Voucher)
        if not viewer.is_manager:
            query = query.where(Voucher.user_id == viewer.id)
        elif user_id is not None:
            query = query.where(Voucher.user_id == user_id)
        if type is not None:
            query = query.where(Voucher.type == VoucherType(type).value)
        if is_redeemed is not None:
            query = query.where(Voucher.is_redeemed == is_redeemed)
        return await paginate(self.session, query, params, Voucher.created_at.desc(), Voucher.id)

    async def update(
        self,
        voucher_id: UUID,
        *,
        type: VoucherType | None = None,
        value: Decimal | None = None,
        description: str | None = None,
        expires_at: datetime | None = None,
    ) -> Voucher:
        voucher = await self.get(voucher_id)
        if type is not None:
            voucher.type = VoucherType(type).value
        if value is not None:
            voucher.value = value
        if description is not None:
            voucher.description = description
        if expires_at is not None:
            voucher.expires_at = expires_at
        await self.session.flush()
        return await self.get(voucher.id)

    async def redeem(self, voucher_id: UUID, user: User, now: datetime | None = None) -> Voucher:
        """Redeem a voucher once. Redeemed and expired vouchers are rejected."""
        now = now or utcnow()
        voucher = await self.get(voucher_id)
        if voucher.user_id != user.id:
            raise ForbiddenError("You can only redeem your own vouchers")
        if voucher.is_redeemed:
            raise InvalidStateError("Voucher has already been redeemed")
        if voucher.is_expired(now):
            raise InvalidStateError("Voucher has expired")

        result = await self.session.execute(
            update(Voucher)
            .where(Voucher.id == voucher.id, Voucher.is_redeemed.is_(False))
            .values(is_redeemed=True, redeemed_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InvalidStateError("Voucher has already been redeemed")

        await self.activities.record(
            ActivityType.VOUCHER,
            user.id,
            f"redeemed {VoucherType(voucher.type).label} voucher",
        )
        logger.info("Voucher %s redeemed by %s", voucher.id, user.id)
        return await self.get(voucher.id)

    async def delete(self, voucher_id: UUID) -> None:
        voucher = await self.get(voucher_id)
        await self.session.delete(voucher)
        await self.session.flush()
