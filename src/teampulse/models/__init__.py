"""ORM models."""

from teampulse.models.base import Base, TimestampMixin, as_utc, utcnow
from teampulse.models.enums import (
    ActivityType,
    BudgetAllocationType,
    FeedbackStatus,
    FeedbackType,
    KudosStatus,
    MANAGER_ROLES,
    NotificationType,
    TeamRole,
    UserRole,
    VoucherType,
)
from teampulse.models.feed import Activity, Notification
from teampulse.models.recognition import Comment, Feedback, Kudos, KudosTag, kudos_tag_link
from teampulse.models.reward import Voucher
from teampulse.models.user import Budget, Team, TeamMember, User

__all__ = [
    "Activity",
    "ActivityType",
    "Base",
    "Budget",
    "BudgetAllocationType",
    "Comment",
    "Feedback",
    "FeedbackStatus",
    "FeedbackType",
    "Kudos",
    "KudosStatus",
    "KudosTag",
    "MANAGER_ROLES",
    "Notification",
    "NotificationType",
    "Team",
    "TeamMember",
    "TeamRole",
    "TimestampMixin",
    "User",
    "UserRole",
    "Voucher",
    "VoucherType",
    "as_utc",
    "utcnow",
    "kudos_tag_link",
]
