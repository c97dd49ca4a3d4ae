"""Activity feed and notification models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teampulse.models.base import Base, IdMixin, TimestampMixin
from teampulse.models.enums import ActivityType, NotificationType, check_in
from teampulse.models.recognition import Feedback, Kudos
from teampulse.models.user import User


class Activity(Base, IdMixin, TimestampMixin):
    """Denormalized, append-only feed entry for display."""

    __tablename__ = "activity"

    type: Mapped[str] = mapped_column(String(16), nullable=False)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    target_user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    kudos_id: Mapped[UUID | None] = mapped_column(ForeignKey("kudos.id", ondelete="SET NULL"), nullable=True)
    feedback_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("feedback.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (CheckConstraint(check_in("type", ActivityType), name="activity_type_check"),)

    user: Mapped[User] = relationship(foreign_keys=[user_id], lazy="selectin")
    target_user: Mapped[User | None] = relationship(foreign_keys=[target_user_id], lazy="selectin")
    kudos: Mapped[Kudos | None] = relationship()
    feedback: Mapped[Feedback | None] = relationship()


class Notification(Base, IdMixin, TimestampMixin):
    """Message addressed to a single user."""

    __tablename__ = "notification"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=NotificationType.INFO.value)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (CheckConstraint(check_in("type", NotificationType), name="notification_type_check"),)
