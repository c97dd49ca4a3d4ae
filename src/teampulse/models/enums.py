"""Enumerated values stored as strings."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


# Roles allowed through manager gates.
MANAGER_ROLES = frozenset({UserRole.MANAGER.value, UserRole.ADMIN.value})


class KudosStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class FeedbackType(str, Enum):
    POSITIVE = "POSITIVE"
    CONSTRUCTIVE = "CONSTRUCTIVE"
    GENERAL = "GENERAL"


class FeedbackStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    FLAGGED = "FLAGGED"


class NotificationType(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ActivityType(str, Enum):
    KUDOS = "KUDOS"
    FEEDBACK = "FEEDBACK"
    VOUCHER = "VOUCHER"


class TeamRole(str, Enum):
    MEMBER = "MEMBER"
    LEADER = "LEADER"
    ADMIN = "ADMIN"


class VoucherType(str, Enum):
    GIFT_CARD = "GIFT_CARD"
    MEAL_VOUCHER = "MEAL_VOUCHER"
    TRANSPORT = "TRANSPORT"
    ENTERTAINMENT = "ENTERTAINMENT"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        """Human readable form used in notification text."""
        return self.value.lower().replace("_", " ")


class BudgetAllocationType(str, Enum):
    TOTAL = "total"
    MONTHLY = "monthly"


def check_in(column: str, enum_cls: type[Enum]) -> str:
    """SQL fragment restricting ``column`` to the enum's values."""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"
