"""TeamPulse services."""

from teampulse.services.activity_service import ActivityService
from teampulse.services.auth_service import AuthService, LoginRateLimiter
from teampulse.services.budget_service import BudgetService
from teampulse.services.comment_service import CommentService
from teampulse.services.feedback_service import FeedbackService
from teampulse.services.kudos_service import KudosService
from teampulse.services.notification_service import NotificationService
from teampulse.services.pagination import Page, PageParams
from teampulse.services.state_machine import InvalidTransitionError, KudosStateMachine, requires_approval
from teampulse.services.team_service import TeamService
from teampulse.services.user_service import UserService
from teampulse.services.voucher_service import VoucherService

__all__ = [
    "ActivityService",
    "AuthService",
    "BudgetService",
    "CommentService",
    "FeedbackService",
    "InvalidTransitionError",
    "KudosService",
    "KudosStateMachine",
    "LoginRateLimiter",
    "NotificationService",
    "Page",
    "PageParams",
    "TeamService",
    "UserService",
    "VoucherService",
    "requires_approval",
]
