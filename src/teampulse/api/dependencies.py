"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator, Callable
from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.config import Settings
from teampulse.errors import ForbiddenError, UnauthenticatedError
from teampulse.models import User, UserRole
from teampulse.services.auth_service import AuthService, LoginRateLimiter
from teampulse.services.pagination import DEFAULT_LIMIT, MAX_LIMIT, PageParams

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Handlers commit explicitly; anything left uncommitted is rolled back.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_rate_limiter(request: Request) -> LoginRateLimiter:
    return request.app.state.rate_limiter


# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_settings_dep)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
RateLimiter = Annotated[LoginRateLimiter, Depends(get_rate_limiter)]


async def get_current_user(
    db: DbSession,
    settings: AppSettings,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    """Resolve the bearer token to an active user."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Access token required")
    return await AuthService(db, settings).resolve_token(credentials.credentials)


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency that admits only users holding one of ``roles``."""
    allowed = {UserRole(role).value for role in roles}

    async def checker(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise ForbiddenError("Insufficient permissions")
        return user

    return checker


ManagerUser = Annotated[User, Depends(require_roles(UserRole.MANAGER, UserRole.ADMIN))]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]


def get_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
) -> PageParams:
    return PageParams(page=page, limit=limit)


Pagination = Annotated[PageParams, Depends(get_page_params)]
