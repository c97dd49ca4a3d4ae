"""API routes."""

from teampulse.api.routes.activities import router as activities_router
from teampulse.api.routes.auth import router as auth_router
from teampulse.api.routes.budgets import router as budgets_router
from teampulse.api.routes.comments import router as comments_router
from teampulse.api.routes.feedback import router as feedback_router
from teampulse.api.routes.health import router as health_router
from teampulse.api.routes.kudos import router as kudos_router
from teampulse.api.routes.notifications import router as notifications_router
from teampulse.api.routes.teams import router as teams_router
from teampulse.api.routes.users import router as users_router
from teampulse.api.routes.vouchers import router as vouchers_router

__all__ = [
    "activities_router",
    "auth_router",
    "budgets_router",
    "comments_router",
    "feedback_router",
    "health_router",
    "kudos_router",
    "notifications_router",
    "teams_router",
    "users_router",
    "vouchers_router",
]
