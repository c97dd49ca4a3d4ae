"""Voucher model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teampulse.models.base import Base, IdMixin, Money, TimestampMixin, UpdatedAtMixin, as_utc
from teampulse.models.enums import VoucherType, check_in
from teampulse.models.user import User


class Voucher(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Reward instrument issued to a user; redeemable once."""

    __tablename__ = "voucher"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    value: Mapped[Decimal] = mapped_column(Money, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_redeemed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    redeemed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(check_in("type", VoucherType), name="voucher_type_check"),
        CheckConstraint("value > 0", name="voucher_value_positive"),
    )

    user: Mapped[User] = relationship(lazy="selectin")

    def is_expired(self, now: datetime) -> bool:
        """Whether the voucher lapsed before ``now``."""
        expires_at = as_utc(self.expires_at)
        return expires_at is not None and now > expires_at
