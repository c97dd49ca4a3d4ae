"""User, budget and team models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teampulse.models.base import Base, IdMixin, Money, TimestampMixin, UpdatedAtMixin, utcnow
from teampulse.models.enums import TeamRole, UserRole, check_in


class User(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Application user.

    Users are never hard-deleted while referenced; an admin deactivates them
    by clearing ``is_active``.
    """

    __tablename__ = "app_user"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    avatar: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.USER.value)
    department: Mapped[str | None] = mapped_column(String(120), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    total_kudos_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_kudos_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (CheckConstraint(check_in("role", UserRole), name="app_user_role_check"),)

    @property
    def is_manager(self) -> bool:
        """Whether the user passes manager gates (MANAGER or ADMIN)."""
        return self.role in (UserRole.MANAGER.value, UserRole.ADMIN.value)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Budget(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Per-user allowance for monetary kudos."""

    __tablename__ = "budget"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    total_budget: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    used_budget: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    monthly_budget: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    reset_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (CheckConstraint("used_budget >= 0", name="budget_used_non_negative"),)

    user: Mapped[User] = relationship(lazy="selectin")

    @property
    def available_budget(self) -> Decimal:
        return self.total_budget - self.used_budget

    @property
    def available_monthly_budget(self) -> Decimal:
        return self.monthly_budget - self.used_budget


class Team(Base, IdMixin, TimestampMixin, UpdatedAtMixin):
    """Named group of users."""

    __tablename__ = "team"

    name: Mapped[str] = mapped_column(String(120), nullable=False)

    members: Mapped[list[TeamMember]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


class TeamMember(Base, IdMixin, TimestampMixin):
    """Membership of a user in a team with a per-team role."""

    __tablename__ = "team_member"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    team_id: Mapped[UUID] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=TeamRole.MEMBER.value)

    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="team_member_user_team_unique"),
        CheckConstraint(check_in("role", TeamRole), name="team_member_role_check"),
    )

    team: Mapped[Team] = relationship(back_populates="members")
    user: Mapped[User] = relationship(lazy="selectin")
