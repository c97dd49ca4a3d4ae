"""Pydantic schemas for API request/response models.

JSON field names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from teampulse.models import (
    BudgetAllocationType,
    FeedbackStatus,
    FeedbackType,
    TeamRole,
    UserRole,
    VoucherType,
)


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(CamelModel):
    message: str


class ErrorBody(BaseModel):
    message: str
    details: Any | None = None
    stack: str | None = None


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    error: ErrorBody


# ============================================================================
# User schemas
# ============================================================================


class UserSummary(CamelModel):
    id: UUID
    name: str
    email: str
    avatar: str | None = None
    role: str
    department: str | None = None


class UserResponse(UserSummary):
    is_active: bool
    total_kudos_sent: int
    total_kudos_received: int
    joined_at: datetime
    created_at: datetime


class UserUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2)
    email: EmailStr | None = None
    department: str | None = None
    avatar: AnyHttpUrl | None = None
    role: UserRole | None = None
    is_active: bool | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _upper_role(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class UserListResponse(CamelModel):
    users: list[UserResponse]
    pagination: Pagination


class UserSearchResponse(CamelModel):
    users: list[UserResponse]


# ============================================================================
# Auth schemas
# ============================================================================


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)
    department: str | None = None
    role: UserRole = UserRole.USER

    @field_validator("role", mode="before")
    @classmethod
    def _upper_role(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2)
    department: str | None = None
    avatar: AnyHttpUrl | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserResponse


class MeResponse(CamelModel):
    user: UserResponse


# ============================================================================
# Kudos schemas
# ============================================================================


class TagResponse(CamelModel):
    id: UUID
    name: str
    emoji: str
    color: str


class TagListResponse(CamelModel):
    tags: list[TagResponse]


class CommentResponse(CamelModel):
    id: UUID
    message: str
    from_user_id: UUID
    kudos_id: UUID | None = None
    feedback_id: UUID | None = None
    from_user: UserSummary
    created_at: datetime
    updated_at: datetime


class KudosCreate(CamelModel):
    to_user_id: UUID
    message: str = Field(min_length=1, max_length=500)
    tag_ids: list[UUID] = Field(default_factory=list)
    is_public: bool = True
    monetary_amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)


class KudosUpdate(CamelModel):
    message: str = Field(min_length=1, max_length=500)
    tag_ids: list[UUID] | None = None
    is_public: bool | None = None


class ApprovalRequest(CamelModel):
    reason: str | None = None


class KudosResponse(CamelModel):
    id: UUID
    from_user_id: UUID
    to_user_id: UUID
    message: str
    is_public: bool
    status: str
    monetary_amount: Decimal
    currency: str
    approval_reason: str | None = None
    from_user: UserSummary
    to_user: UserSummary
    tags: list[TagResponse] = []
    created_at: datetime
    updated_at: datetime


class KudosDetailResponse(KudosResponse):
    comments: list[CommentResponse] = []


class KudosEnvelope(CamelModel):
    message: str
    kudos: KudosResponse


class KudosDetailEnvelope(CamelModel):
    kudos: KudosDetailResponse


class KudosListResponse(CamelModel):
    kudos: list[KudosResponse]
    pagination: Pagination


# ============================================================================
# Budget schemas
# ============================================================================


class BudgetResponse(CamelModel):
    id: UUID
    user_id: UUID
    total_budget: Decimal
    used_budget: Decimal
    monthly_budget: Decimal
    available_budget: Decimal
    available_monthly_budget: Decimal
    reset_date: datetime
    user: UserSummary | None = None


class BudgetUpdate(CamelModel):
    total_budget: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    monthly_budget: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class BudgetAllocateRequest(CamelModel):
    user_id: UUID
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    type: BudgetAllocationType


class BudgetEnvelope(CamelModel):
    budget: BudgetResponse


class BudgetMessageEnvelope(CamelModel):
    message: str
    budget: BudgetResponse


class BudgetListResponse(CamelModel):
    budgets: list[BudgetResponse]


# ============================================================================
# Feedback schemas
# ============================================================================


class FeedbackCreate(CamelModel):
    to_user_id: UUID | None = None
    message: str = Field(min_length=1, max_length=1000)
    type: FeedbackType
    is_public: bool = True
    is_anonymous: bool = False


class FeedbackUpdate(CamelModel):
    message: str = Field(min_length=1, max_length=1000)
    type: FeedbackType | None = None
    is_public: bool | None = None


class FeedbackReviewRequest(CamelModel):
    status: FeedbackStatus


class FeedbackResponse(CamelModel):
    id: UUID
    from_user_id: UUID | None = None
    to_user_id: UUID | None = None
    message: str
    type: str
    is_public: bool
    is_anonymous: bool
    status: str
    from_user: UserSummary | None = None
    to_user: UserSummary | None = None
    created_at: datetime
    updated_at: datetime


class FeedbackDetailResponse(FeedbackResponse):
    comments: list[CommentResponse] = []


class FeedbackEnvelope(CamelModel):
    message: str
    feedback: FeedbackResponse


class FeedbackDetailEnvelope(CamelModel):
    feedback: FeedbackDetailResponse


class FeedbackListResponse(CamelModel):
    feedback: list[FeedbackResponse]
    pagination: Pagination


# ============================================================================
# Comment schemas
# ============================================================================


class CommentCreate(CamelModel):
    message: str = Field(min_length=1, max_length=500)
    kudos_id: UUID | None = None
    feedback_id: UUID | None = None


class CommentUpdate(CamelModel):
    message: str = Field(min_length=1, max_length=500)


class CommentEnvelope(CamelModel):
    message: str
    comment: CommentResponse


class CommentDetailEnvelope(CamelModel):
    comment: CommentResponse


class CommentListResponse(CamelModel):
    comments: list[CommentResponse]
    pagination: Pagination


# ============================================================================
# Notification schemas
# ============================================================================


class NotificationResponse(CamelModel):
    id: UUID
    user_id: UUID
    type: str
    title: str
    message: str
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]
    unread_count: int
    pagination: Pagination


class NotificationEnvelope(CamelModel):
    message: str
    notification: NotificationResponse


class ReadAllResponse(CamelModel):
    message: str
    count: int


# ============================================================================
# Activity schemas
# ============================================================================


class ActivityResponse(CamelModel):
    id: UUID
    type: str
    user_id: UUID
    target_user_id: UUID | None = None
    message: str
    kudos_id: UUID | None = None
    feedback_id: UUID | None = None
    user: UserSummary
    target_user: UserSummary | None = None
    kudos: KudosResponse | None = None
    created_at: datetime


class ActivityEnvelope(CamelModel):
    activity: ActivityResponse


class ActivityListResponse(CamelModel):
    activities: list[ActivityResponse]
    pagination: Pagination


# ============================================================================
# Voucher schemas
# ============================================================================


class VoucherCreate(CamelModel):
    user_id: UUID
    type: VoucherType
    value: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    description: str = Field(min_length=1)
    expires_at: datetime | None = None


class VoucherUpdate(CamelModel):
    type: VoucherType | None = None
    value: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    description: str | None = Field(default=None, min_length=1)
    expires_at: datetime | None = None


class VoucherResponse(CamelModel):
    id: UUID
    user_id: UUID
    type: str
    value: Decimal
    description: str
    expires_at: datetime | None = None
    is_redeemed: bool
    redeemed_at: datetime | None = None
    user: UserSummary
    created_at: datetime


class VoucherEnvelope(CamelModel):
    message: str
    voucher: VoucherResponse


class VoucherDetailEnvelope(CamelModel):
    voucher: VoucherResponse


class VoucherListResponse(CamelModel):
    vouchers: list[VoucherResponse]
    pagination: Pagination


# ============================================================================
# Team schemas
# ============================================================================


class TeamCreate(CamelModel):
    name: str = Field(min_length=2)
    member_ids: list[UUID] = Field(default_factory=list)


class TeamUpdate(CamelModel):
    name: str = Field(min_length=2)


class TeamMemberCreate(CamelModel):
    user_id: UUID
    role: TeamRole = TeamRole.MEMBER


class TeamMemberResponse(CamelModel):
    id: UUID
    user_id: UUID
    team_id: UUID
    role: str
    user: UserSummary


class TeamResponse(CamelModel):
    id: UUID
    name: str
    members: list[TeamMemberResponse] = []
    created_at: datetime
    updated_at: datetime


class TeamEnvelope(CamelModel):
    message: str
    team: TeamResponse


class TeamDetailEnvelope(CamelModel):
    team: TeamResponse


class TeamListResponse(CamelModel):
    teams: list[TeamResponse]
    pagination: Pagination


class TeamMemberEnvelope(CamelModel):
    message: str
    member: TeamMemberResponse


# ============================================================================
# User stats
# ============================================================================


class UserStatsBody(CamelModel):
    recent_kudos_received: list[KudosResponse]
    recent_kudos_sent: list[KudosResponse]
    kudos_by_status: dict[str, int]


class UserStatsResponse(CamelModel):
    user: UserResponse
    stats: UserStatsBody


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded"]
    timestamp: datetime
    uptime: float
    database: str
