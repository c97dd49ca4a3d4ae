"""Kudos, feedback and comment models."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teampulse.models.base import Base, IdMixin, Money, TimestampMixin, UpdatedAtMixin
from teampulse.models.enums import FeedbackStatus, FeedbackType, KudosStatus, check_in
from teampulse.models.user import User

kudos_tag_link = Table(
    "kudos_tag_link",
    Base.metadata,
    Column("kudos_id", ForeignKey("kudos.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("kudos_tag.id", ondelete="CASCADE"), primary_key=True),
)


class KudosTag(Base, IdMixin, TimestampMixin):
    """Static catalog entry used to label kudos."""

    __tablename__ = "kudos_tag"

    name: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False)
    color: Mapped[str] = mapped_column(String(80), nullable=False)


class Kudos(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Recognition sent from one user to another."""

    __tablename__ = "kudos"

    from_user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    to_user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=KudosStatus.PENDING.value)
    monetary_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    approval_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(check_in("status", KudosStatus), name="kudos_status_check"),
        CheckConstraint("monetary_amount >= 0", name="kudos_amount_non_negative"),
    )

    from_user: Mapped[User] = relationship(foreign_keys=[from_user_id], lazy="selectin")
    to_user: Mapped[User] = relationship(foreign_keys=[to_user_id], lazy="selectin")
    tags: Mapped[list[KudosTag]] = relationship(
        secondary=kudos_tag_link,
        order_by=KudosTag.name,
        passive_deletes=True,
        lazy="selectin",
    )
    comments: Mapped[list[Comment]] = relationship(
        back_populates="kudos",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at",
    )


class Feedback(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Feedback message, optionally addressed to a user."""

    __tablename__ = "feedback"

    from_user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    to_user_id: Mapped[UUID | None] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=FeedbackType.GENERAL.value)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FeedbackStatus.PENDING.value)

    __table_args__ = (
        CheckConstraint(check_in("type", FeedbackType), name="feedback_type_check"),
        CheckConstraint(check_in("status", FeedbackStatus), name="feedback_status_check"),
    )

    from_user: Mapped[User] = relationship(foreign_keys=[from_user_id], lazy="selectin")
    to_user: Mapped[User | None] = relationship(foreign_keys=[to_user_id], lazy="selectin")
    comments: Mapped[list[Comment]] = relationship(
        back_populates="feedback",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at",
    )


class Comment(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Comment attached to exactly one kudos or one feedback item."""

    __tablename__ = "comment"

    from_user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    kudos_id: Mapped[UUID | None] = mapped_column(ForeignKey("kudos.id", ondelete="CASCADE"), nullable=True)
    feedback_id: Mapped[UUID | None] = mapped_column(ForeignKey("feedback.id", ondelete="CASCADE"), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(kudos_id IS NULL) <> (feedback_id IS NULL)",
            name="comment_single_parent_check",
        ),
    )

    from_user: Mapped[User] = relationship(lazy="selectin")
    kudos: Mapped[Kudos | None] = relationship(back_populates="comments")
    feedback: Mapped[Feedback | None] = relationship(back_populates="comments")
